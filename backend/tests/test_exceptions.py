from app.core.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    UniqueViolationError,
    ValidationError,
)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_error_status_codes():
    assert ValidationError("bad").status_code == 400
    assert NotFoundError("Room", 7).status_code == 404
    assert ConflictError("taken").status_code == 409
    assert UniqueViolationError().status_code == 409


def test_not_found_error_structure():
    err = NotFoundError("Room", 7)
    assert err.message == "Room with id 7 not found"
    assert err.details == {"resource_type": "Room", "resource_id": 7}
    assert isinstance(err, AppError)


def test_unique_violation_is_a_conflict():
    err = UniqueViolationError(details={"error": "duplicate key"})
    assert isinstance(err, ConflictError)
    assert err.details == {"error": "duplicate key"}
