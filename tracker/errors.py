"""Exception hierarchy for the writing tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for all tracker errors."""


class LoadError(TrackerError):
    """Persisted state could not be read or deserialized.

    Attributes:
        key: The store key that failed, or None when the whole store
            could not be read.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class SaveError(TrackerError):
    """Persisted state could not be written."""


class TrackerValidationError(TrackerError):
    """Caller input failed one or more advisory checks."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors
