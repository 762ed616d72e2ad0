from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from classboard.core.config import get_settings
from classboard.db.base import Base
from classboard.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "classes": {"id", "name"},
    "schedules": {"id", "class_id", "day_of_week", "start_time", "end_time"},
    "schedule_exceptions": {
        "id",
        "schedule_id",
        "date",
        "start_time",
        "end_time",
        "cancelled",
        "created_date",
    },
}

EXCEPTION_DATE_INDEX = "uq_schedule_exceptions_schedule_date"


def _ensure_exception_date_unique_index() -> None:
    # Databases created before the (schedule_id, date) constraint existed get it added here.
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "schedule_exceptions" not in set(inspector.get_table_names()):
            return
        index_names = {item["name"] for item in inspector.get_indexes("schedule_exceptions")}
        constraint_names = {
            item["name"] for item in inspector.get_unique_constraints("schedule_exceptions")
        }
        if EXCEPTION_DATE_INDEX in index_names or EXCEPTION_DATE_INDEX in constraint_names:
            return
        connection.execute(
            text(
                f"CREATE UNIQUE INDEX {EXCEPTION_DATE_INDEX} "
                "ON schedule_exceptions (schedule_id, date)"
            )
        )
        logger.info("Added unique index %s", EXCEPTION_DATE_INDEX)


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


def ensure_runtime_schema() -> None:
    import classboard.models  # noqa: F401

    try:
        if get_settings().auto_create_schema:
            Base.metadata.create_all(bind=engine)
        _ensure_exception_date_unique_index()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
