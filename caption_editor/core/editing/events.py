"""
Event system for the editing workflow.

Provides a decoupled way for the layer stack and the session to notify
view components and the layer introspector about changes without
depending on a specific UI framework.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during an editing session."""

    # Image events
    IMAGE_LOAD_STARTED = "image_load_started"
    IMAGE_LOADED = "image_loaded"
    IMAGE_LOAD_FAILED = "image_load_failed"

    # Stack events
    BACKGROUND_INSTALLED = "background_installed"
    OBJECT_ADDED = "object_added"
    OBJECT_MODIFIED = "object_modified"
    OBJECT_REMOVED = "object_removed"
    STACK_CLEARED = "stack_cleared"
    # Emitted once per logical operation, after the fine-grained events
    STACK_CHANGED = "stack_changed"

    # Session events
    SELECTION_CHANGED = "selection_changed"
    SNAPSHOT_UPDATED = "snapshot_updated"
    SESSION_CLOSED = "session_closed"


@dataclass
class EditorEvent:
    """Event that occurs during editing."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[EditorEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[EditorEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners and callback in self._listeners[event_type]:
            self._listeners[event_type].remove(callback)

    def emit(self, event: EditorEvent):
        """Emit an event to all subscribers."""
        # copy, listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event.event_type, ())):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception(
                    "Error in event listener for %s", event.event_type.value
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
