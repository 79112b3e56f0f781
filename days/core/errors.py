"""Error taxonomy shared by repositories and services."""

from __future__ import annotations


class DaysError(Exception):
    """Base class for every error raised by the Day Tracker core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StorageError(DaysError):
    """Persistence read or write failed (disk, quota, database)."""


class DecodeError(DaysError):
    """Persisted or imported text could not be parsed."""


class NetworkError(DaysError):
    """Remote API call failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(DaysError):
    """Caller-supplied input is unusable; nothing was persisted."""


class UnknownError(DaysError):
    """Anything not classified above. The operation is treated as failed."""
