import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from classboard.db.base import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    room: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#3b82f6")
    created_date: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    schedules: Mapped[list["Schedule"]] = relationship(  # noqa: F821
        back_populates="school_class",
        cascade="all, delete-orphan",
    )
