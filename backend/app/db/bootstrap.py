from __future__ import annotations

import logging

from sqlalchemy import inspect

from app.db.base import Base
from app.db.session import engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "rooms": {"id", "code", "building", "capacity", "is_active"},
    "class_sections": {"id", "section_name", "semester_id", "is_active"},
    "schedule_slots": {"id", "class_id", "room_id", "day_of_week", "start_time", "end_time", "is_active"},
    "programs": {"id", "code", "is_active"},
    "academic_years": {"id", "name"},
    "semesters": {"id", "program_id", "start_date", "end_date", "is_active"},
    "issued_identifiers": {"id", "code", "prefix", "year", "sequence"},
    "staff_members": {"id", "code", "role", "email"},
}

REQUIRED_INDEXES: dict[str, set[str]] = {
    "schedule_slots": {"ix_schedule_slots_room_day", "ix_schedule_slots_class_day"},
    "semesters": {"ix_semesters_program_id"},
}


def _ensure_lookup_indexes() -> None:
    # Tables created before the composite indexes were declared do not get them from create_all.
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        for table_name, index_names in REQUIRED_INDEXES.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_indexes(table_name)}
            table = Base.metadata.tables[table_name]
            for index in table.indexes:
                if index.name in index_names and index.name not in existing:
                    logger.info("Creating missing index %s", index.name)
                    index.create(bind=connection)


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_lookup_indexes()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
