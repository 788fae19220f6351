"""
Intent events: how card views ask the board to change state.

A view never mutates the store itself. It dispatches an IntentEvent which
bubbles from the view to its ancestors; whichever ancestor listens (normally
the board) performs the change.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

CARD_MOVE = "card-move"        # detail: {id, column}
CARD_UPDATE = "card-update"    # detail: {id, title}
CARD_DELETE = "card-delete"    # detail: {id}

Listener = Callable[["IntentEvent"], None]


@dataclass
class IntentEvent:
    """A requested state change, carried up the view tree."""
    type: str
    detail: Dict[str, Any] = field(default_factory=dict)
    bubbles: bool = True
    target: Any = None
    current_target: Any = None
    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class EventTarget:
    """Listener registry with parent-chain bubbling."""

    def __init__(self, parent: Optional["EventTarget"] = None):
        self.parent = parent
        self._listeners: Dict[str, List[Listener]] = {}

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        """Register a listener. Registering the same listener again is a no-op."""
        listeners = self._listeners.setdefault(event_type, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch_event(self, event: IntentEvent) -> IntentEvent:
        """Deliver to this target, then to each ancestor while the event bubbles."""
        event.target = self
        node: Optional[EventTarget] = self
        while node is not None:
            event.current_target = node
            for listener in list(node._listeners.get(event.type, [])):
                listener(event)
            if not event.bubbles or event.propagation_stopped:
                break
            node = node.parent
        event.current_target = None
        logger.debug(f"Dispatched {event.type} {event.detail}")
        return event
