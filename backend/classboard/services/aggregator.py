from __future__ import annotations

from classboard.core.exceptions import NotFoundError, storage_errors
from classboard.models.schedule import DAY_NAMES, Schedule
from classboard.schemas.schedule import ScheduleStats, utc_today
from classboard.services.conflict_detector import day_name
from classboard.services.store import ScheduleStore


class ScheduleAggregator:
    def __init__(self, store: ScheduleStore):
        self.store = store

    def _class_schedules(self, class_id: str) -> list[Schedule]:
        if not self.store.class_exists(class_id):
            raise NotFoundError("Class not found")
        return self.store.list_class_schedules(class_id)

    def weekly_overview(self, class_id: str) -> dict[str, list[Schedule]]:
        with storage_errors("Failed to get weekly schedule overview"):
            schedules = self._class_schedules(class_id)

        overview: dict[str, list[Schedule]] = {day: [] for day in DAY_NAMES}
        for schedule in schedules:
            overview[day_name(schedule.day_of_week)].append(schedule)
        # "HH:MM" strings sort chronologically.
        for day_schedules in overview.values():
            day_schedules.sort(key=lambda item: item.start_time)
        return overview

    def stats(self, class_id: str, today: str | None = None) -> ScheduleStats:
        today = today or utc_today()
        with storage_errors("Failed to get schedule statistics"):
            schedules = self._class_schedules(class_id)

        schedules_by_day = {day: 0 for day in DAY_NAMES}
        total_exceptions = 0
        upcoming_exceptions = 0
        for schedule in schedules:
            schedules_by_day[day_name(schedule.day_of_week)] += 1
            total_exceptions += len(schedule.exceptions)
            upcoming_exceptions += sum(1 for item in schedule.exceptions if item.date >= today)

        return ScheduleStats(
            total_schedules=len(schedules),
            schedules_by_day=schedules_by_day,
            total_exceptions=total_exceptions,
            upcoming_exceptions=upcoming_exceptions,
        )
