from .filters import Predicate, any_of, field_equals, field_in, field_missing
from .ordered_view import OrderedView
from .ordering import Direction, FieldComparator

__all__ = [
    "Direction",
    "FieldComparator",
    "OrderedView",
    "Predicate",
    "any_of",
    "field_equals",
    "field_in",
    "field_missing",
]
