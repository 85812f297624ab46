from .schema import (
    DEFAULT_VIEW_SETTINGS,
    VIEW_SETTINGS_SCHEMA,
    build_predicate,
    configure_view,
    merge_with_defaults,
    validate_settings,
)

__all__ = [
    "DEFAULT_VIEW_SETTINGS",
    "VIEW_SETTINGS_SCHEMA",
    "build_predicate",
    "configure_view",
    "merge_with_defaults",
    "validate_settings",
]
