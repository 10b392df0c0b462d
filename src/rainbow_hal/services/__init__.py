from .event_bus import EventBus, EventHandler
from .middleware import log_middleware


__all__ = ["EventBus", "EventHandler", "log_middleware"]
