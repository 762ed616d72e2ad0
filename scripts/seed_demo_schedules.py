"""Seed a demo class with a weekly timetable and a few date exceptions.

Run:
  PYTHONPATH=backend python scripts/seed_demo_schedules.py
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

from classboard.db.bootstrap import ensure_runtime_schema
from classboard.db.session import SessionLocal
from classboard.services.aggregator import ScheduleAggregator
from classboard.services.conflict_detector import ScheduleCandidate
from classboard.services.exception_manager import ExceptionManager
from classboard.services.schedule_manager import ScheduleManager
from classboard.services.store import ScheduleStore

DEMO_CLASS_NAME = os.getenv("DEMO_CLASS_NAME", "Demo Algebra I")

# (day_of_week, start, end); the last slot overlaps the first and is expected to be skipped.
WEEKLY_SLOTS = [
    (1, "09:00", "10:00"),
    (1, "10:00", "11:00"),
    (3, "09:00", "10:30"),
    (5, "13:00", "14:00"),
    (1, "09:30", "10:30"),
]


def _next_weekday(day_of_week: int, weeks_ahead: int) -> str:
    today = datetime.now(timezone.utc).date()
    # date.weekday() is Monday=0; schedules use Sunday=0.
    offset = (day_of_week - (today.weekday() + 1) % 7) % 7 or 7
    return (today + timedelta(days=offset + 7 * weeks_ahead)).isoformat()


def main() -> None:
    ensure_runtime_schema()
    db = SessionLocal()
    try:
        store = ScheduleStore(db)
        school_class = store.create_class(
            name=DEMO_CLASS_NAME,
            subject="Mathematics",
            room="A101",
            created_date=datetime.now(timezone.utc).date().isoformat(),
        )

        outcome = ScheduleManager(store).create_bulk(
            [ScheduleCandidate(school_class.id, day, start, end) for day, start, end in WEEKLY_SLOTS]
        )
        for item in outcome.skipped:
            print(f"Skipped slot {item.index}: {item.reason}")

        exceptions = ExceptionManager(store)
        first = outcome.created[0]
        exceptions.create(
            first.id,
            date=_next_weekday(first.day_of_week, 1),
            start_time=first.start_time,
            end_time=first.end_time,
            cancelled=True,
        )
        exceptions.create(
            first.id,
            date=_next_weekday(first.day_of_week, 2),
            start_time="11:00",
            end_time="12:00",
        )

        stats = ScheduleAggregator(store).stats(school_class.id)
        print(f"Class {school_class.name} ({school_class.id})")
        print(f"  schedules: {stats.total_schedules}")
        print(f"  by day: {stats.schedules_by_day}")
        print(f"  exceptions: {stats.total_exceptions} ({stats.upcoming_exceptions} upcoming)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
