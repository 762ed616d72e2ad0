from fastapi import APIRouter, Depends, Query, status

from classboard.api.deps import get_aggregator, get_schedule_manager
from classboard.core.config import get_settings
from classboard.core.exceptions import AppError
from classboard.schemas.schedule import (
    BulkCreateResult,
    BulkScheduleCreate,
    PaginatedSchedules,
    ScheduleCreate,
    ScheduleOut,
    ScheduleStats,
    ScheduleUpdate,
    ScheduleWithExceptionsOut,
)
from classboard.services.aggregator import ScheduleAggregator
from classboard.services.conflict_detector import ScheduleCandidate
from classboard.services.schedule_manager import ScheduleManager

router = APIRouter()


def _candidate(class_id: str, payload: ScheduleCreate) -> ScheduleCandidate:
    return ScheduleCandidate(
        class_id=class_id,
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )


@router.get("/classes/{class_id}/schedules", response_model=PaginatedSchedules)
def list_class_schedules(
    class_id: str,
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    day_of_week: int | None = Query(default=None, alias="dayOfWeek", ge=0, le=6),
    search: str | None = Query(default=None, max_length=20),
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> PaginatedSchedules:
    return manager.list_for_class(
        class_id,
        page=page,
        limit=limit,
        day_of_week=day_of_week,
        search=search.strip() if search else None,
    )


@router.post(
    "/classes/{class_id}/schedules",
    response_model=ScheduleOut,
    status_code=status.HTTP_201_CREATED,
)
def create_schedule(
    class_id: str,
    payload: ScheduleCreate,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> ScheduleOut:
    return manager.create(_candidate(class_id, payload))


@router.post(
    "/classes/{class_id}/schedules/bulk",
    response_model=BulkCreateResult,
    status_code=status.HTTP_201_CREATED,
)
def create_schedules_bulk(
    class_id: str,
    payload: BulkScheduleCreate,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> BulkCreateResult:
    max_items = get_settings().bulk_create_max_items
    if len(payload.schedules) > max_items:
        raise AppError(f"A bulk request may contain at most {max_items} schedules", status_code=422)
    outcome = manager.create_bulk([_candidate(class_id, item) for item in payload.schedules])
    return BulkCreateResult(
        created=[ScheduleOut.model_validate(schedule) for schedule in outcome.created],
        skipped=outcome.skipped,
    )


@router.get(
    "/classes/{class_id}/schedules/weekly",
    response_model=dict[str, list[ScheduleWithExceptionsOut]],
)
def weekly_overview(
    class_id: str,
    aggregator: ScheduleAggregator = Depends(get_aggregator),
) -> dict:
    return aggregator.weekly_overview(class_id)


@router.get("/classes/{class_id}/schedules/stats", response_model=ScheduleStats)
def schedule_stats(
    class_id: str,
    aggregator: ScheduleAggregator = Depends(get_aggregator),
) -> ScheduleStats:
    return aggregator.stats(class_id)


@router.get("/schedules/{schedule_id}", response_model=ScheduleWithExceptionsOut)
def get_schedule(
    schedule_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> ScheduleWithExceptionsOut:
    return manager.get(schedule_id)


@router.put("/schedules/{schedule_id}", response_model=ScheduleOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> ScheduleOut:
    return manager.update(schedule_id, payload.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/schedules/{schedule_id}")
def delete_schedule(
    schedule_id: str,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> dict:
    manager.delete(schedule_id)
    return {"success": True}
