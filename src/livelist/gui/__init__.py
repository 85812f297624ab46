"""Qt integration for ordered views.

Importing this package requires PySide6.
"""

from .list_model import OrderedViewListModel
from .roles import Roles, role_names

__all__ = ["OrderedViewListModel", "Roles", "role_names"]
