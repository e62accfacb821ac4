import os
import tempfile

# The app engine is built at import time; keep it off the production database.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+pysqlite:///{os.path.join(tempfile.mkdtemp(prefix='slotkeeper-'), 'app.db')}",
)

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.locks import clear_lock_registry  # noqa: E402
from app.db.storage import SqlStorage  # noqa: E402
from app.main import app  # noqa: E402
from app.services.scheduling import SchedulingService  # noqa: E402


@pytest.fixture()
def engine():
    clear_lock_registry()
    # One shared in-memory connection so every session sees the same tables
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    clear_lock_registry()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def storage(db_session):
    return SqlStorage(db_session)


@pytest.fixture()
def service(storage):
    return SchedulingService(storage, get_settings())


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def campus(service):
    """A program with one semester, two class sections and three rooms."""
    program = service.create_program(name="Computer Science", code="CS")
    academic_year = service.create_academic_year(name="2024-2025", is_current=True)
    semester = service.create_semester(
        program_id=program.id,
        academic_year_id=academic_year.id,
        name="Fall 2024",
        semester_number=1,
        year_number=1,
        start_date=date(2024, 9, 1),
        end_date=date(2024, 12, 15),
    )
    rooms = [
        service.create_room(code="A101", building="Block A", capacity=40),
        service.create_room(code="A102", building="Block A", capacity=60),
        service.create_room(code="B201", building="Block B", capacity=120),
    ]
    classes = [
        service.create_class_section(section_name="CS-1A", subject_id=1, semester_id=semester.id),
        service.create_class_section(section_name="CS-1B", subject_id=2, semester_id=semester.id),
    ]
    return {
        "program": program,
        "academic_year": academic_year,
        "semester": semester,
        "rooms": rooms,
        "classes": classes,
    }
