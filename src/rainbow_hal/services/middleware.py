"""
Middleware for EventBus

Middleware = pipeline functions that process events before handlers.
Can modify events, block events, or log/validate events.
"""

from rainbow_hal.models.events import Event
from rainbow_hal.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


def log_middleware(event: Event) -> Event:
    """
    Log all events for debugging

    Usage:
        event_bus.add_middleware(log_middleware)
    """
    data_str = ", ".join(f"{k}={_format(v)}" for k, v in event.to_data().items())
    log.info(f"Event: {event.type.name} from {event.source.name} | {data_str}")
    return event


def _format(value) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    if hasattr(value, "name"):
        return value.name
    return str(value)
