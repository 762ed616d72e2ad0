from datetime import datetime

from pydantic import Field

from classboard.schemas.schedule import ApiModel


class ClassCreate(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    subject: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=2000)
    room: str = Field(default="", max_length=100)
    capacity: int = Field(default=30, ge=1, le=1000)
    color: str = Field(default="#3b82f6", pattern=r"^#[0-9a-fA-F]{6}$")


class ClassOut(ApiModel):
    id: str
    name: str
    subject: str
    description: str
    room: str
    capacity: int
    color: str
    created_date: str
    created_at: datetime | None = None
