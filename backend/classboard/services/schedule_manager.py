from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from classboard.core.config import get_settings
from classboard.core.exceptions import (
    AppError,
    ConflictError,
    InvalidTimeRangeError,
    NotFoundError,
    storage_errors,
)
from classboard.models.schedule import Schedule
from classboard.schemas.schedule import (
    BulkSkippedItem,
    PaginatedSchedules,
    PaginationMeta,
    ScheduleWithExceptionsOut,
)
from classboard.services.conflict_detector import (
    BatchConflictDetector,
    ConflictDetector,
    ScheduleCandidate,
)
from classboard.services.store import ScheduleStore

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ("day_of_week", "start_time", "end_time")


@dataclass
class BulkCreateOutcome:
    created: list[Schedule] = field(default_factory=list)
    skipped: list[BulkSkippedItem] = field(default_factory=list)


class ScheduleManager:
    def __init__(self, store: ScheduleStore, detector: ConflictDetector | None = None):
        self.store = store
        self.detector = detector or ConflictDetector(store)

    def _require_class(self, class_id: str) -> None:
        # The lock doubles as the existence check and holds until the next commit.
        if not self.store.lock_class(class_id):
            raise NotFoundError("Class not found")

    def _require_schedule(self, schedule_id: str, *, with_exceptions: bool = False) -> Schedule:
        schedule = self.store.get_schedule(schedule_id, with_exceptions=with_exceptions)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    def _raise_on_conflict(self, candidate: ScheduleCandidate, exclude_id: str | None = None) -> None:
        conflicts = self.detector.detect(candidate, exclude_id)
        if conflicts:
            self.store.rollback()
            raise ConflictError(
                f"Schedule conflicts detected: {conflicts[0].message}",
                details={"conflicts": [conflict.model_dump() for conflict in conflicts]},
            )

    def get(self, schedule_id: str) -> Schedule:
        with storage_errors("Failed to fetch schedule"):
            return self._require_schedule(schedule_id, with_exceptions=True)

    def list_for_class(
        self,
        class_id: str,
        *,
        page: int = 1,
        limit: int | None = None,
        day_of_week: int | None = None,
        search: str | None = None,
    ) -> PaginatedSchedules:
        settings = get_settings()
        current_page = max(1, page)
        if limit is None:
            limit = settings.schedule_page_size_default
        page_size = min(max(1, limit), settings.schedule_page_size_max)

        with storage_errors("Failed to fetch class schedules"):
            if not self.store.class_exists(class_id):
                raise NotFoundError("Class not found")
            schedules, total = self.store.page_class_schedules(
                class_id,
                offset=(current_page - 1) * page_size,
                limit=page_size,
                day_of_week=day_of_week,
                search=search,
            )

        total_pages = math.ceil(total / page_size)
        return PaginatedSchedules(
            data=[ScheduleWithExceptionsOut.model_validate(schedule) for schedule in schedules],
            pagination=PaginationMeta(
                page=current_page,
                limit=page_size,
                total=total,
                total_pages=total_pages,
                has_next_page=current_page < total_pages,
                has_previous_page=current_page > 1,
            ),
        )

    def create(self, candidate: ScheduleCandidate) -> Schedule:
        with storage_errors("Failed to create schedule"):
            self._require_class(candidate.class_id)
            self._raise_on_conflict(candidate)
            schedule = self.store.create_schedule(
                class_id=candidate.class_id,
                day_of_week=candidate.day_of_week,
                start_time=candidate.start_time,
                end_time=candidate.end_time,
            )
        logger.info(
            "Created schedule %s for class %s (%s %s-%s)",
            schedule.id,
            schedule.class_id,
            schedule.day_of_week,
            schedule.start_time,
            schedule.end_time,
        )
        return schedule

    def update(self, schedule_id: str, changes: dict) -> Schedule:
        """Apply a partial update; only keys in SCHEDULE_FIELDS are considered."""
        updates = {key: value for key, value in changes.items() if key in SCHEDULE_FIELDS}
        with storage_errors("Failed to update schedule"):
            schedule = self._require_schedule(schedule_id)
            if not updates:
                return schedule

            self.store.lock_class(schedule.class_id)
            effective = ScheduleCandidate(
                class_id=schedule.class_id,
                day_of_week=updates.get("day_of_week", schedule.day_of_week),
                start_time=updates.get("start_time", schedule.start_time),
                end_time=updates.get("end_time", schedule.end_time),
            )
            self._raise_on_conflict(effective, exclude_id=schedule.id)
            return self.store.update_schedule(schedule, updates)

    def delete(self, schedule_id: str) -> None:
        with storage_errors("Failed to delete schedule"):
            schedule = self._require_schedule(schedule_id)
            self.store.delete_schedule(schedule)
        logger.info("Deleted schedule %s", schedule_id)

    def create_bulk(self, candidates: list[ScheduleCandidate]) -> BulkCreateOutcome:
        """Create schedules one by one in input order.

        An item is skipped when it overlaps a stored schedule or an item accepted
        earlier in the same call. Accepted items are committed individually, so
        the call can partially succeed. Raises ConflictError only when nothing
        was created.
        """
        outcome = BulkCreateOutcome()
        with storage_errors("Failed to create schedules in bulk"):
            for class_id in dict.fromkeys(candidate.class_id for candidate in candidates):
                if not self.store.class_exists(class_id):
                    raise NotFoundError("Class not found")

            batch = BatchConflictDetector(self.detector)
            for position, candidate in enumerate(candidates, start=1):
                reason = self._create_bulk_item(batch, position, candidate, outcome)
                if reason is not None:
                    logger.info("Skipped bulk schedule %d: %s", position, reason)
                    outcome.skipped.append(BulkSkippedItem(index=position, reason=reason))

        if outcome.skipped and not outcome.created:
            summary = "; ".join(f"Schedule {item.index}: {item.reason}" for item in outcome.skipped)
            raise ConflictError(
                f"All schedules have conflicts: {summary}",
                details={"skipped": [item.model_dump() for item in outcome.skipped]},
            )
        logger.info(
            "Bulk schedule creation finished: %d created, %d skipped",
            len(outcome.created),
            len(outcome.skipped),
        )
        return outcome

    def _create_bulk_item(
        self,
        batch: BatchConflictDetector,
        position: int,
        candidate: ScheduleCandidate,
        outcome: BulkCreateOutcome,
    ) -> str | None:
        try:
            self.store.lock_class(candidate.class_id)
            reasons = batch.detect(candidate)
            if reasons:
                self.store.rollback()
                return reasons[0]
            schedule = self.store.create_schedule(
                class_id=candidate.class_id,
                day_of_week=candidate.day_of_week,
                start_time=candidate.start_time,
                end_time=candidate.end_time,
            )
        except InvalidTimeRangeError as exc:
            self.store.rollback()
            return exc.message
        except AppError:
            raise
        except Exception as exc:
            logger.warning("Bulk schedule %d could not be stored", position, exc_info=True)
            self.store.rollback()
            return f"Failed to create - {exc}"
        batch.accept(position, candidate, schedule.id)
        outcome.created.append(schedule)
        return None
