"""Notification messages and the narrow capability used to publish them.

The core only ever calls ``notifier.notify(event)`` and never waits for a
reply. Renderers, HUDs and sound all live behind that call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field

from .logging_utils import log_error


class EventType(str, Enum):
    CROP_PLANTED = "crop:planted"
    CROP_GROWN = "crop:grown"
    CROP_HARVESTED = "crop:harvested"
    CROP_WATERED = "crop:watered"
    CROP_FERTILIZED = "crop:fertilized"
    TILE_CHANGED = "tile:changed"
    AREA_UNLOCKED = "area:unlocked"
    SAVE_COMPLETED = "save:completed"
    SAVE_LOADED = "save:loaded"
    SAVE_DELETED = "save:deleted"
    SAVE_IMPORTED = "save:imported"
    VIEW_REFRESH_REQUESTED = "view:refresh-requested"


class GameEvent(BaseModel):
    """One fire-and-forget notification."""

    type: EventType
    timestamp: int = Field(..., description="Epoch milliseconds when emitted")
    payload: Dict[str, Any] = Field(default_factory=dict)


class Notifier(Protocol):
    def notify(self, event: GameEvent) -> None:
        ...


class NullNotifier:
    """Discards every event. Default when no collaborator is attached."""

    def notify(self, event: GameEvent) -> None:
        return None


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Minimal in-process publish/subscribe implementation of ``Notifier``.

    Handlers run synchronously in subscription order. A failing handler is
    logged and skipped; it never reaches the code that published the event.
    """

    def __init__(self) -> None:
        self._handlers: List[tuple[Optional[EventType], EventHandler]] = []

    def subscribe(
        self, handler: EventHandler, event_type: Optional[EventType] = None
    ) -> Callable[[], None]:
        """Register ``handler`` (for one type, or all when None). Returns an unsubscribe callable."""
        entry = (EventType(event_type) if event_type is not None else None, handler)
        self._handlers.append(entry)

        def _unsubscribe() -> None:
            if entry in self._handlers:
                self._handlers.remove(entry)

        return _unsubscribe

    def notify(self, event: GameEvent) -> None:
        for event_type, handler in list(self._handlers):
            if event_type is not None and event_type != event.type:
                continue
            try:
                handler(event)
            except Exception as exc:
                log_error(f"[Events] Handler for {event.type.value} failed: {exc}")
