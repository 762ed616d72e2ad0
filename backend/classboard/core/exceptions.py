import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when a referenced class, schedule or exception does not exist."""
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    """Raised on a time overlap or a duplicate exception date."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class InvalidTimeRangeError(AppError):
    """Raised when a time range is malformed, reversed or empty."""
    def __init__(self, message: str):
        super().__init__(message, status_code=422)


class DatabaseError(AppError):
    """Raised for any unexpected storage failure. The original error is kept on `cause`."""
    def __init__(self, message: str, cause: BaseException | None = None):
        details = {"cause": type(cause).__name__} if cause is not None else None
        super().__init__(message, status_code=500, details=details)
        self.cause = cause


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Let classified errors through unchanged and wrap everything else as DatabaseError."""
    try:
        yield
    except AppError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise DatabaseError(message, cause=exc) from exc
