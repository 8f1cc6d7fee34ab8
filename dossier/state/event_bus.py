"""
Event bus for dossier record changes.

Collaborators (persistence fan-out, other viewers, UI refresh) subscribe
to events instead of being passed as callbacks into the editor.

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.CHARACTER_SAVED, my_handler)

    # Editor emits once a finished record exists
    bus.emit(EventType.CHARACTER_SAVED, character_id=char.id, character=char)

    def my_handler(event: DossierEvent):
        print(f"Saved {event.data['character'].name}")
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Record events that can be published."""

    # Character events
    CHARACTER_SAVED = "character.saved"
    CHARACTER_DELETED = "character.deleted"

    # Comment events
    COMMENT_ADDED = "comment.added"
    COMMENT_UPDATED = "comment.updated"
    COMMENT_DELETED = "comment.deleted"

    # Upload events
    IMAGE_UPLOADED = "image.uploaded"
    UPLOAD_FAILED = "image.upload_failed"


@dataclass
class DossierEvent:
    """One published change. `data` holds the keyword payload given to emit()."""

    type: EventType
    data: dict = field(default_factory=dict)
    character_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.character_id}"


EventHandler = Callable[[DossierEvent], None]


class EventBus:
    """Routes record events to handlers, in subscription order."""

    def __init__(self):
        self._handlers: defaultdict[EventType, list[EventHandler]] = defaultdict(list)

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers[event_type]
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: EventType, character_id: str = "", **data) -> DossierEvent:
        """
        Deliver an event synchronously and return it.

        A handler that raises is logged; the remaining handlers still run.
        """
        event = DossierEvent(type=event_type, data=data, character_id=character_id)
        for handler in tuple(self._handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event)
        return event


# Process-wide bus used when the editor is not given one
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
