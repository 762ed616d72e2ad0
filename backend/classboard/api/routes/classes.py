from fastapi import APIRouter, Depends, status

from classboard.api.deps import get_store
from classboard.core.exceptions import NotFoundError
from classboard.schemas.school_class import ClassCreate, ClassOut
from classboard.schemas.schedule import utc_today
from classboard.services.store import ScheduleStore

router = APIRouter()


@router.post("/classes", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
def create_class(payload: ClassCreate, store: ScheduleStore = Depends(get_store)) -> ClassOut:
    return store.create_class(**payload.model_dump(), created_date=utc_today())


@router.get("/classes/{class_id}", response_model=ClassOut)
def get_class(class_id: str, store: ScheduleStore = Depends(get_store)) -> ClassOut:
    school_class = store.get_class(class_id)
    if school_class is None:
        raise NotFoundError("Class not found")
    return school_class
