from app.api.routes import health


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    assert ready.json() == {"status": "ok", "missing_tables": []}


def test_ready_reports_missing_tables(client, monkeypatch):
    monkeypatch.setattr(health, "REQUIRED_COLUMNS", {"rooms": {"id"}, "room_bookings_archive": {"id"}})

    ready = client.get("/api/health/ready")
    assert ready.status_code == 503
    assert ready.json() == {"status": "degraded", "missing_tables": ["room_bookings_archive"]}
