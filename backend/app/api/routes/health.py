from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.db.bootstrap import REQUIRED_COLUMNS
from app.db.session import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    """Ready once the database answers and every scheduling table exists."""
    try:
        with engine.connect() as connection:
            missing_tables = sorted(set(REQUIRED_COLUMNS) - set(inspect(connection).get_table_names()))
    except SQLAlchemyError as exc:
        logger.warning("Readiness check could not reach the database: %s", exc)
        return JSONResponse(status_code=503, content={"status": "unavailable", "missing_tables": []})

    if missing_tables:
        return JSONResponse(status_code=503, content={"status": "degraded", "missing_tables": missing_tables})
    return JSONResponse(status_code=200, content={"status": "ok", "missing_tables": []})
