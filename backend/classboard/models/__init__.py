from classboard.models.school_class import SchoolClass  # noqa: F401
from classboard.models.schedule import DAY_NAMES, Schedule, ScheduleException  # noqa: F401
