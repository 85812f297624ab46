from .base import ChildListener, ChildSubscription, EventSource
from .memory import MemoryChildSource

__all__ = ["ChildListener", "ChildSubscription", "EventSource", "MemoryChildSource"]
