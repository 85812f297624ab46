"""Schema helpers for declarative view settings."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any, Optional

from jsonschema import Draft202012Validator, ValidationError

from ..config import DEFAULT_DIRECTION, VALUE_TYPES, VIEW_SETTINGS_SCHEMA_ID
from ..core.filters import Predicate, field_equals, field_in, field_missing
from ..core.ordering import Direction
from ..errors import SettingsValidationError

if TYPE_CHECKING:  # pragma: no cover - import only for type checking
    from ..core.ordered_view import OrderedView

_FIELD = {"type": "string", "minLength": 1}

VIEW_SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "livelist/view.schema.json",
    "type": "object",
    "required": ["schema", "ordering", "exclude"],
    "properties": {
        "schema": {"const": VIEW_SETTINGS_SCHEMA_ID},
        "ordering": {
            "oneOf": [
                {"type": "null"},
                {
                    "type": "object",
                    "required": ["field"],
                    "properties": {
                        "field": _FIELD,
                        "direction": {"enum": [member.value for member in Direction]},
                        "value_type": {"enum": sorted(VALUE_TYPES)},
                    },
                    "additionalProperties": False,
                },
            ]
        },
        "exclude": {
            "oneOf": [
                {"type": "null"},
                {
                    "type": "object",
                    "required": ["field", "equals"],
                    "properties": {"field": _FIELD, "equals": {}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["field", "in"],
                    "properties": {"field": _FIELD, "in": {"type": "array"}},
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["field", "missing"],
                    "properties": {"field": _FIELD, "missing": {"const": True}},
                    "additionalProperties": False,
                },
            ]
        },
    },
    "additionalProperties": False,
}

DEFAULT_VIEW_SETTINGS: dict[str, Any] = {
    "schema": VIEW_SETTINGS_SCHEMA_ID,
    "ordering": None,
    "exclude": None,
}

_validator = Draft202012Validator(VIEW_SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_VIEW_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_VIEW_SETTINGS)
    if data:
        for key, value in data.items():
            if key == "ordering" and isinstance(value, dict):
                ordering = {"direction": DEFAULT_DIRECTION, "value_type": "any"}
                ordering.update(value)
                merged[key] = ordering
                continue
            merged[key] = deepcopy(value)
    validate_settings(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the view settings schema."""

    try:
        _validator.validate(data)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc


def build_predicate(exclude: dict[str, Any] | None) -> Optional[Predicate]:
    """Translate an ``exclude`` settings block into a predicate."""

    if not exclude:
        return None
    field = exclude["field"]
    if "equals" in exclude:
        return field_equals(field, exclude["equals"])
    if "in" in exclude:
        return field_in(field, exclude["in"])
    return field_missing(field)


def configure_view(view: "OrderedView", data: dict[str, Any] | None) -> dict[str, Any]:
    """Apply validated settings to *view* and return the merged settings.

    The filter is installed before the ordering so the re-sort only touches
    visible elements.  Each installed part emits its own bulk change.
    """

    settings = merge_with_defaults(data)
    predicate = build_predicate(settings["exclude"])
    if predicate is not None:
        view.set_filter(predicate)
    ordering = settings["ordering"]
    if ordering is not None:
        view.set_ordering(
            ordering["field"],
            Direction(ordering["direction"]),
            VALUE_TYPES[ordering["value_type"]],
        )
    return settings


__all__ = [
    "DEFAULT_VIEW_SETTINGS",
    "VIEW_SETTINGS_SCHEMA",
    "build_predicate",
    "configure_view",
    "merge_with_defaults",
    "validate_settings",
]
