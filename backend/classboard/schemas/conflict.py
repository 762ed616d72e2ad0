from pydantic import BaseModel
from typing import Literal


class ScheduleConflict(BaseModel):
    conflict_type: Literal["schedule", "exception"]
    conflicting_id: str
    message: str
