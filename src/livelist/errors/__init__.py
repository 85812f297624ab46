"""Custom exception hierarchy for livelist."""

from __future__ import annotations


class LiveListError(Exception):
    """Base class for all custom errors raised by livelist."""


# --- 3-layer hierarchy ---

class DomainError(LiveListError):
    """Base class for errors raised by the ordered view itself."""


class SourceError(LiveListError):
    """Base class for failures reported by an event source."""


class SettingsError(LiveListError):
    """Base class for view settings related failures."""


# --- Domain errors ---

class OutOfRangeError(DomainError, IndexError):
    """Raised when an index falls outside ``[0, count())``."""


class KeyNotFoundError(DomainError, KeyError):
    """Raised when an event names a key the view does not hold.

    The event source guarantees causal ordering, so this always points at a
    protocol violation upstream rather than a user error.
    """

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key not found: {self.key!r}"


class ComparisonAnomaly(DomainError):
    """Reported (never raised) when two elements cannot be compared."""

    def __init__(self, field_path: str, left: object, right: object, reason: str) -> None:
        super().__init__(f"{reason} for {field_path!r} comparing {left!r} and {right!r}")
        self.field_path = field_path
        self.left = left
        self.right = right
        self.reason = reason


class ViewClosedError(DomainError):
    """Raised when a torn down view is reconfigured."""


class ReentrancyError(DomainError):
    """Raised when a change observer calls back into the view it observes."""


# --- Source errors ---

class SourceCancelledError(SourceError):
    """Raised or forwarded when the event source terminates abnormally."""

    def __init__(self, message: str = "Event source cancelled", cause: object = None) -> None:
        super().__init__(message)
        self.cause = cause


# --- Settings errors ---

class SettingsValidationError(SettingsError):
    """Raised when view settings fail schema validation."""
