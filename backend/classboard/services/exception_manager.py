from __future__ import annotations

import logging

from classboard.core.exceptions import ConflictError, NotFoundError, storage_errors
from classboard.models.schedule import ScheduleException
from classboard.schemas.schedule import utc_today
from classboard.services.store import DUPLICATE_EXCEPTION_MESSAGE, ScheduleStore

logger = logging.getLogger(__name__)

EXCEPTION_FIELDS = ("date", "start_time", "end_time", "cancelled")


class ExceptionManager:
    """Date-specific overrides layered on top of a weekly schedule.

    Each (schedule, date) pair holds at most one exception. The check here gives
    the friendly error; the unique index on the table catches concurrent writers.
    """

    def __init__(self, store: ScheduleStore):
        self.store = store

    def _require_schedule(self, schedule_id: str) -> None:
        if self.store.get_schedule(schedule_id) is None:
            raise NotFoundError("Schedule not found")

    def _require_exception(self, exception_id: str) -> ScheduleException:
        exception = self.store.get_exception(exception_id)
        if exception is None:
            raise NotFoundError("Schedule exception not found")
        return exception

    def create(
        self,
        schedule_id: str,
        *,
        date: str,
        start_time: str,
        end_time: str,
        cancelled: bool = False,
    ) -> ScheduleException:
        with storage_errors("Failed to create schedule exception"):
            self._require_schedule(schedule_id)
            if self.store.find_exception(schedule_id, date) is not None:
                raise ConflictError(DUPLICATE_EXCEPTION_MESSAGE)
            exception = self.store.create_exception(
                schedule_id=schedule_id,
                date=date,
                start_time=start_time,
                end_time=end_time,
                cancelled=cancelled,
                created_date=utc_today(),
            )
        logger.info("Created exception %s for schedule %s on %s", exception.id, schedule_id, date)
        return exception

    def update(self, exception_id: str, changes: dict) -> ScheduleException:
        updates = {key: value for key, value in changes.items() if key in EXCEPTION_FIELDS}
        with storage_errors("Failed to update schedule exception"):
            exception = self._require_exception(exception_id)
            new_date = updates.get("date")
            if new_date and new_date != exception.date:
                taken = self.store.find_exception(exception.schedule_id, new_date, exclude_id=exception.id)
                if taken is not None:
                    raise ConflictError(DUPLICATE_EXCEPTION_MESSAGE)
            if not updates:
                return exception
            return self.store.update_exception(exception, updates)

    def delete(self, exception_id: str) -> None:
        with storage_errors("Failed to delete schedule exception"):
            exception = self._require_exception(exception_id)
            self.store.delete_exception(exception)
        logger.info("Deleted exception %s", exception_id)

    def list_for_schedule(self, schedule_id: str) -> list[ScheduleException]:
        with storage_errors("Failed to fetch schedule exceptions"):
            self._require_schedule(schedule_id)
            return self.store.list_exceptions(schedule_id)
