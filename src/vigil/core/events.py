"""Event bus for validator and hub notifications.

Provides a simple synchronous event bus. Validators publish ResultChanged
through it and hubs publish ValidatorEvent; listeners subscribe by event
class.
"""

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class EventBus:
    """Simple synchronous event bus.

    Events are dispatched synchronously to all subscribers, in subscription
    order. Handler exceptions propagate to the caller.

    Example:
        bus = EventBus()
        bus.subscribe(ResultChanged, lambda e: print(e.result))
        bus.emit(ResultChanged(result=None))
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that receives the event instance
        """
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> bool:
        """Remove a previously subscribed handler.

        Returns:
            True if the handler was subscribed, False otherwise
        """
        handlers = self._subscribers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers.

        Events with no subscribers are silently ignored. The handler list is
        copied first so handlers may unsubscribe while being dispatched.

        Args:
            event: The event instance to emit
        """
        handlers = list(self._subscribers.get(type(event), []))
        for handler in handlers:
            handler(event)
