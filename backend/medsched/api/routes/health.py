from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from medsched.core.config import get_settings
from medsched.db.bootstrap import schema_gaps
from medsched.db.session import engine

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    """Database reachability plus presence of every schedule table the validator reads."""
    database = {"ok": True, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": None}
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            missing_tables, missing_columns = schema_gaps(connection)
        database["missing_tables"] = missing_tables
        database["missing_columns"] = missing_columns
        database["schema_ok"] = not missing_tables and not missing_columns
    except Exception as exc:  # pragma: no cover - environment dependent
        database["ok"] = False
        database["error"] = str(exc)

    settings = get_settings()
    ready = database["ok"] and database["schema_ok"]
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _now(),
        "database": database,
        "validation": {
            "session_minutes": settings.session_minutes,
            "capacity_counts_lecturers": settings.capacity_counts_lecturers,
            "enforce_lecturer_expertise": settings.enforce_lecturer_expertise,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
