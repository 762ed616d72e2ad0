from fastapi import APIRouter, Depends, status

from classboard.api.deps import get_exception_manager
from classboard.schemas.schedule import (
    ScheduleExceptionCreate,
    ScheduleExceptionOut,
    ScheduleExceptionUpdate,
)
from classboard.services.exception_manager import ExceptionManager

router = APIRouter()


@router.get("/schedules/{schedule_id}/exceptions", response_model=list[ScheduleExceptionOut])
def list_schedule_exceptions(
    schedule_id: str,
    manager: ExceptionManager = Depends(get_exception_manager),
) -> list[ScheduleExceptionOut]:
    return manager.list_for_schedule(schedule_id)


@router.post(
    "/schedules/{schedule_id}/exceptions",
    response_model=ScheduleExceptionOut,
    status_code=status.HTTP_201_CREATED,
)
def create_schedule_exception(
    schedule_id: str,
    payload: ScheduleExceptionCreate,
    manager: ExceptionManager = Depends(get_exception_manager),
) -> ScheduleExceptionOut:
    return manager.create(schedule_id, **payload.model_dump())


@router.put("/exceptions/{exception_id}", response_model=ScheduleExceptionOut)
def update_schedule_exception(
    exception_id: str,
    payload: ScheduleExceptionUpdate,
    manager: ExceptionManager = Depends(get_exception_manager),
) -> ScheduleExceptionOut:
    return manager.update(exception_id, payload.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/exceptions/{exception_id}")
def delete_schedule_exception(
    exception_id: str,
    manager: ExceptionManager = Depends(get_exception_manager),
) -> dict:
    manager.delete(exception_id)
    return {"success": True}
