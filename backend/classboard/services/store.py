from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from classboard.core.exceptions import ConflictError
from classboard.models.schedule import Schedule, ScheduleException
from classboard.models.school_class import SchoolClass

DUPLICATE_EXCEPTION_MESSAGE = "Schedule exception already exists for this date"


class ScheduleStore:
    """SQLAlchemy-backed persistence for classes, schedules and schedule exceptions.

    Every write commits on its own, so a bulk request is a sequence of
    independent transactions rather than one enclosing transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _commit(self, *, conflict_message: str | None = None) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if conflict_message is not None:
                raise ConflictError(conflict_message) from exc
            raise
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        """End the current transaction without writing, releasing any class lock."""
        self.db.rollback()

    # classes

    def create_class(self, **fields) -> SchoolClass:
        school_class = SchoolClass(**fields)
        self.db.add(school_class)
        self._commit()
        self.db.refresh(school_class)
        return school_class

    def get_class(self, class_id: str) -> SchoolClass | None:
        return self.db.get(SchoolClass, class_id)

    def class_exists(self, class_id: str) -> bool:
        return self.db.execute(
            select(SchoolClass.id).where(SchoolClass.id == class_id)
        ).scalar_one_or_none() is not None

    def lock_class(self, class_id: str) -> bool:
        """Take a row lock on the class for the rest of the transaction.

        Schedule writes for one class are serialized behind this lock until the
        next commit. SQLite ignores FOR UPDATE and serializes writers itself.
        """
        locked = self.db.execute(
            select(SchoolClass.id).where(SchoolClass.id == class_id).with_for_update()
        ).scalar_one_or_none()
        return locked is not None

    # schedules

    def get_schedule(self, schedule_id: str, *, with_exceptions: bool = False) -> Schedule | None:
        statement = select(Schedule).where(Schedule.id == schedule_id)
        if with_exceptions:
            statement = statement.options(selectinload(Schedule.exceptions))
        return self.db.execute(statement).scalar_one_or_none()

    def find_schedules(
        self, class_id: str, day_of_week: int, exclude_id: str | None = None
    ) -> list[Schedule]:
        statement = select(Schedule).where(
            Schedule.class_id == class_id,
            Schedule.day_of_week == day_of_week,
        )
        if exclude_id is not None:
            statement = statement.where(Schedule.id != exclude_id)
        return list(self.db.execute(statement.order_by(Schedule.start_time.asc())).scalars())

    def list_class_schedules(self, class_id: str) -> list[Schedule]:
        statement = (
            select(Schedule)
            .where(Schedule.class_id == class_id)
            .options(selectinload(Schedule.exceptions))
            .order_by(Schedule.day_of_week.asc(), Schedule.start_time.asc())
        )
        return list(self.db.execute(statement).scalars())

    def page_class_schedules(
        self,
        class_id: str,
        *,
        offset: int,
        limit: int,
        day_of_week: int | None = None,
        search: str | None = None,
    ) -> tuple[list[Schedule], int]:
        conditions = [Schedule.class_id == class_id]
        if day_of_week is not None:
            conditions.append(Schedule.day_of_week == day_of_week)
        if search:
            conditions.append(
                or_(
                    Schedule.start_time.contains(search, autoescape=True),
                    Schedule.end_time.contains(search, autoescape=True),
                )
            )

        total = self.db.execute(select(func.count(Schedule.id)).where(*conditions)).scalar_one()
        statement = (
            select(Schedule)
            .where(*conditions)
            .options(selectinload(Schedule.exceptions))
            .order_by(Schedule.day_of_week.asc(), Schedule.start_time.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(statement).scalars()), total

    def create_schedule(self, *, class_id: str, day_of_week: int, start_time: str, end_time: str) -> Schedule:
        schedule = Schedule(
            class_id=class_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        self.db.add(schedule)
        self._commit()
        self.db.refresh(schedule)
        return schedule

    def update_schedule(self, schedule: Schedule, fields: dict) -> Schedule:
        for key, value in fields.items():
            setattr(schedule, key, value)
        self._commit()
        self.db.refresh(schedule)
        return schedule

    def delete_schedule(self, schedule: Schedule) -> None:
        self.db.delete(schedule)
        self._commit()

    # exceptions

    def get_exception(self, exception_id: str) -> ScheduleException | None:
        return self.db.get(ScheduleException, exception_id)

    def find_exception(
        self, schedule_id: str, date: str, exclude_id: str | None = None
    ) -> ScheduleException | None:
        statement = select(ScheduleException).where(
            ScheduleException.schedule_id == schedule_id,
            ScheduleException.date == date,
        )
        if exclude_id is not None:
            statement = statement.where(ScheduleException.id != exclude_id)
        return self.db.execute(statement.limit(1)).scalar_one_or_none()

    def list_exceptions(self, schedule_id: str) -> list[ScheduleException]:
        statement = (
            select(ScheduleException)
            .where(ScheduleException.schedule_id == schedule_id)
            .order_by(ScheduleException.date.asc())
        )
        return list(self.db.execute(statement).scalars())

    def create_exception(self, **fields) -> ScheduleException:
        exception = ScheduleException(**fields)
        self.db.add(exception)
        self._commit(conflict_message=DUPLICATE_EXCEPTION_MESSAGE)
        self.db.refresh(exception)
        return exception

    def update_exception(self, exception: ScheduleException, fields: dict) -> ScheduleException:
        for key, value in fields.items():
            setattr(exception, key, value)
        self._commit(conflict_message=DUPLICATE_EXCEPTION_MESSAGE)
        self.db.refresh(exception)
        return exception

    def delete_exception(self, exception: ScheduleException) -> None:
        self.db.delete(exception)
        self._commit()
