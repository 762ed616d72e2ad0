from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from classboard.db.session import SessionLocal
from classboard.services.aggregator import ScheduleAggregator
from classboard.services.exception_manager import ExceptionManager
from classboard.services.schedule_manager import ScheduleManager
from classboard.services.store import ScheduleStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> ScheduleStore:
    return ScheduleStore(db)


def get_schedule_manager(store: ScheduleStore = Depends(get_store)) -> ScheduleManager:
    return ScheduleManager(store)


def get_exception_manager(store: ScheduleStore = Depends(get_store)) -> ExceptionManager:
    return ExceptionManager(store)


def get_aggregator(store: ScheduleStore = Depends(get_store)) -> ScheduleAggregator:
    return ScheduleAggregator(store)
