from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from classboard.core.exceptions import InvalidTimeRangeError
from classboard.models.schedule import DAY_NAMES
from classboard.schemas.conflict import ScheduleConflict
from classboard.schemas.schedule import parse_time_to_minutes
from classboard.services.store import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleCandidate:
    class_id: str
    day_of_week: int
    start_time: str
    end_time: str


def day_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_NAMES):
        return DAY_NAMES[day_of_week]
    return "Unknown"


def time_range_minutes(start_time: str, end_time: str) -> tuple[int, int]:
    """Convert an "HH:MM" range to minutes since midnight.

    Reversed and zero-length ranges are rejected rather than treated as empty.
    """
    try:
        start, end = parse_time_to_minutes(start_time), parse_time_to_minutes(end_time)
    except ValueError as exc:
        raise InvalidTimeRangeError(f"Invalid time range {start_time}-{end_time}: {exc}") from exc
    if end <= start:
        raise InvalidTimeRangeError(
            f"Invalid time range {start_time}-{end_time}: end time must be after start time"
        )
    return start, end


def _ranges_overlap(first: tuple[int, int], second: tuple[int, int]) -> bool:
    # Half-open ranges: slots that only touch at a boundary do not overlap.
    return first[0] < second[1] and second[0] < first[1]


def is_time_overlapping(start1: str, end1: str, start2: str, end2: str) -> bool:
    return _ranges_overlap(time_range_minutes(start1, end1), time_range_minutes(start2, end2))


class ConflictDetector:
    def __init__(self, store: ScheduleStore):
        self.store = store

    def detect(self, candidate: ScheduleCandidate, exclude_id: str | None = None) -> List[ScheduleConflict]:
        candidate_range = time_range_minutes(candidate.start_time, candidate.end_time)

        conflicts: List[ScheduleConflict] = []
        existing = self.store.find_schedules(candidate.class_id, candidate.day_of_week, exclude_id)
        for schedule in existing:
            try:
                stored_range = time_range_minutes(schedule.start_time, schedule.end_time)
            except InvalidTimeRangeError as exc:
                logger.warning("Ignoring stored schedule %s in conflict check: %s", schedule.id, exc.message)
                continue
            if _ranges_overlap(candidate_range, stored_range):
                conflicts.append(ScheduleConflict(
                    conflict_type="schedule",
                    conflicting_id=schedule.id,
                    message=(
                        f"Schedule conflicts with existing schedule on {day_name(candidate.day_of_week)} "
                        f"from {schedule.start_time} to {schedule.end_time}"
                    ),
                ))
        return conflicts


class BatchConflictDetector:
    """Checks a bulk item against stored schedules and the batch items accepted before it.

    Accepted items are already stored by the time later items are checked, so
    stored matches on those ids are reported as in-batch conflicts instead.
    """

    def __init__(self, detector: ConflictDetector):
        self.detector = detector
        # (1-based position in the batch, candidate)
        self.accepted: List[tuple[int, ScheduleCandidate]] = []
        self.accepted_ids: set[str] = set()

    def detect(self, candidate: ScheduleCandidate) -> List[str]:
        reasons = [
            conflict.message
            for conflict in self.detector.detect(candidate)
            if conflict.conflicting_id not in self.accepted_ids
        ]
        candidate_range = time_range_minutes(candidate.start_time, candidate.end_time)
        for position, previous in self.accepted:
            if (
                previous.class_id == candidate.class_id
                and previous.day_of_week == candidate.day_of_week
                and _ranges_overlap(
                    candidate_range, time_range_minutes(previous.start_time, previous.end_time)
                )
            ):
                reasons.append(f"Conflicts with schedule {position} in this bulk operation")
        return reasons

    def accept(self, position: int, candidate: ScheduleCandidate, schedule_id: str | None = None) -> None:
        self.accepted.append((position, candidate))
        if schedule_id is not None:
            self.accepted_ids.add(schedule_id)
