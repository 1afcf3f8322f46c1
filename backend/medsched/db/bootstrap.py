from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from medsched.db.base import Base
from medsched.db.session import engine as default_engine
import medsched.models  # noqa: F401

logger = logging.getLogger(__name__)

SCHEDULE_COLUMNS = {
    "id",
    "course_code",
    "date",
    "start_time",
    "end_time",
    "session_count",
    "room_id",
    "uses_room",
    "lecturer_ids",
    "small_group_id",
    "large_group_id",
    "makeup_group_id",
}

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "rooms": {"id", "name", "capacity"},
    "lecturers": {"id", "name", "expertise", "pbl_assignment_count", "csr_assignment_count"},
    "course_offerings": {"id", "code", "term", "semester", "start_date", "end_date"},
    "lecture_sessions": SCHEDULE_COLUMNS | {"topic"},
    "pbl_sessions": SCHEDULE_COLUMNS | {"pbl_type"},
    "csr_sessions": SCHEDULE_COLUMNS | {"category"},
    "journal_reading_sessions": SCHEDULE_COLUMNS,
    "practicum_sessions": SCHEDULE_COLUMNS,
    "special_agenda_sessions": SCHEDULE_COLUMNS | {"agenda"},
    "non_block_sessions": SCHEDULE_COLUMNS | {"row_type"},
    "schedule_resource_locks": {"resource_key"},
}


def schema_gaps(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    """Required tables that are absent, and absent columns per present table."""
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        if required - existing:
            missing_columns[table_name] = sorted(required - existing)
    return missing_tables, missing_columns


def _ensure_lecturer_assignment_counter_columns(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "lecturers" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("lecturers")}
        for column_name in ("pbl_assignment_count", "csr_assignment_count"):
            if column_name not in column_names:
                connection.execute(
                    text(f"ALTER TABLE lecturers ADD COLUMN {column_name} INTEGER NOT NULL DEFAULT 0")
                )


def _assert_required_columns(engine: Engine) -> None:
    with engine.connect() as connection:
        missing_tables, missing_columns = schema_gaps(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_lecturer_assignment_counter_columns(engine)
        _assert_required_columns(engine)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
    logger.info("Schedule schema ready (%d tables checked)", len(REQUIRED_COLUMNS))
