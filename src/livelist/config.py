"""Default configuration values for livelist."""

from __future__ import annotations

from typing import Any, Callable, Final, Optional

# Child documents are addressed with slash separated paths such as
# ``"author/name"``, matching the paths used by the realtime backend.
FIELD_PATH_SEPARATOR: Final[str] = "/"

DEFAULT_DIRECTION: Final[str] = "ascending"


# Converters raise ``TypeError``/``ValueError`` for values that do not
# represent the named type, so the comparator reports them as anomalies
# instead of silently coercing them.
def as_string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Expected a string, got {type(value).__name__}")
    return value


def as_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("Booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} has a fractional part")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"Expected an integer, got {type(value).__name__}")


def as_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("Booleans are not numbers")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise TypeError(f"Expected a number, got {type(value).__name__}")


def as_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError(f"{value!r} is not a boolean")
    raise TypeError(f"Expected a boolean, got {type(value).__name__}")


# Names accepted in declarative view settings for ``set_ordering``'s
# ``value_type``.  ``None`` keeps the stored values untouched.
VALUE_TYPES: Final[dict[str, Optional[Callable[[Any], Any]]]] = {
    "any": None,
    "string": as_string,
    "integer": as_integer,
    "number": as_number,
    "boolean": as_boolean,
}

VIEW_SETTINGS_SCHEMA_ID: Final[str] = "livelist/view@1"
