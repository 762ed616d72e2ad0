from __future__ import annotations

import re
from datetime import date as date_type, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _validate_time(value: str) -> str:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format (e.g., 09:30)")
    return value


def _validate_date(value: str) -> str:
    if not DATE_PATTERN.match(value):
        raise ValueError("Date must be in YYYY-MM-DD format")
    try:
        date_type.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("Date must be a valid calendar date") from exc
    if value < utc_today():
        raise ValueError("Date cannot be in the past")
    return value


def _validate_order(start_time: str | None, end_time: str | None) -> None:
    if start_time is None or end_time is None:
        return
    if parse_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise ValueError("End time must be after start time")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ScheduleCreate(ApiModel):
    """A weekly slot for one class; also used for each item of a bulk request."""

    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleCreate":
        _validate_order(self.start_time, self.end_time)
        return self


class ScheduleUpdate(ApiModel):
    """Partial schedule update. Unset fields keep their stored value."""

    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _validate_time(value) if value is not None else value

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleUpdate":
        _validate_order(self.start_time, self.end_time)
        return self


class BulkScheduleCreate(ApiModel):
    schedules: list[ScheduleCreate] = Field(min_length=1)


class ScheduleExceptionCreate(ApiModel):
    date: str
    start_time: str
    end_time: str
    cancelled: bool = False

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _validate_date(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _validate_time(value)

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleExceptionCreate":
        _validate_order(self.start_time, self.end_time)
        return self


class ScheduleExceptionUpdate(ApiModel):
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    cancelled: bool | None = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str | None) -> str | None:
        return _validate_date(value) if value is not None else value

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return _validate_time(value) if value is not None else value

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleExceptionUpdate":
        _validate_order(self.start_time, self.end_time)
        return self


class ScheduleExceptionOut(ApiModel):
    id: str
    schedule_id: str
    date: str
    start_time: str
    end_time: str
    cancelled: bool
    created_date: str
    created_at: datetime | None = None


class ScheduleOut(ApiModel):
    id: str
    class_id: str
    day_of_week: int
    start_time: str
    end_time: str
    created_at: datetime | None = None


class ScheduleWithExceptionsOut(ScheduleOut):
    exceptions: list[ScheduleExceptionOut] = Field(default_factory=list)


class PaginationMeta(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class PaginatedSchedules(ApiModel):
    data: list[ScheduleWithExceptionsOut]
    pagination: PaginationMeta


class BulkSkippedItem(ApiModel):
    index: int
    reason: str


class BulkCreateResult(ApiModel):
    created: list[ScheduleOut]
    skipped: list[BulkSkippedItem]


class ScheduleStats(ApiModel):
    total_schedules: int
    schedules_by_day: dict[str, int]
    total_exceptions: int
    upcoming_exceptions: int
