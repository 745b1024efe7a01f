"""
Layer stack.

Ordered collection of scene objects; list order is paint order, index 0
is the farthest back. When the stack is non-empty index 0 holds the
background image, the only non-selectable object.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from .errors import DuplicateObjectId, LayerStackError, MissingTargetObject
from .events import EditorEvent, EventEmitter, EventType
from .objects import ImageObject, SceneObject

logger = logging.getLogger(__name__)


class LayerStack:
    """
    Back-to-front list of scene objects with change notification.

    Each mutation emits its fine-grained event straight away and marks the
    stack dirty. ``STACK_CHANGED`` is emitted once the outermost ``batch()``
    closes, or right away when no batch is open, so every logical
    operation produces exactly one of them.
    """

    def __init__(self, events: Optional[EventEmitter] = None):
        self.events = events if events is not None else EventEmitter()
        self._objects: List[SceneObject] = []
        self._batch_depth = 0
        self._dirty = False

    def __len__(self):
        return len(self._objects)

    def __iter__(self) -> Iterator[SceneObject]:
        return iter(tuple(self._objects))

    def __getitem__(self, index) -> SceneObject:
        return self._objects[index]

    @property
    def objects(self) -> Tuple[SceneObject, ...]:
        return tuple(self._objects)

    @property
    def background(self) -> Optional[ImageObject]:
        if self._objects and not self._objects[0].selectable:
            return self._objects[0]
        return None

    @property
    def overlays(self) -> Tuple[SceneObject, ...]:
        start = 1 if self.background is not None else 0
        return tuple(self._objects[start:])

    def index_of(self, object_id) -> int:
        for index, obj in enumerate(self._objects):
            if obj.id == object_id:
                return index
        raise MissingTargetObject(f"No object with id {object_id!r}")

    def get(self, object_id) -> Optional[SceneObject]:
        try:
            return self._objects[self.index_of(object_id)]
        except MissingTargetObject:
            return None

    @contextmanager
    def batch(self):
        """Coalesce the change notifications of every mutation inside."""
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._flush()

    def install_background(self, image: ImageObject):
        if self._objects:
            raise LayerStackError(
                "Background can only be installed on an empty stack"
            )
        if image.selectable:
            raise LayerStackError("Background image must not be selectable")
        self._objects.append(image)
        self._changed(EventType.BACKGROUND_INSTALLED, image)

    def append(self, obj: SceneObject):
        """Put an object on top of the paint order."""
        if not obj.selectable:
            raise LayerStackError("Only the background may be non-selectable")
        self._check_unique(obj.id)
        self._objects.append(obj)
        self._changed(EventType.OBJECT_ADDED, obj)

    def replace(self, obj: SceneObject):
        """Swap in a new value for the object with the same id."""
        index = self.index_of(obj.id)
        if obj.selectable != self._objects[index].selectable:
            raise LayerStackError("Selectability of a placed object is fixed")
        self._objects[index] = obj
        self._changed(EventType.OBJECT_MODIFIED, obj)

    def remove(self, object_id) -> SceneObject:
        index = self.index_of(object_id)
        if index == 0 and self.background is not None:
            raise LayerStackError("The background image cannot be removed")
        obj = self._objects.pop(index)
        self._changed(EventType.OBJECT_REMOVED, obj)
        return obj

    def truncate_to_background(self) -> int:
        """Remove every overlay, topmost first. Returns how many went."""
        overlays = self.overlays
        with self.batch():
            for obj in reversed(overlays):
                self._objects.remove(obj)
                self._changed(EventType.OBJECT_REMOVED, obj)
        return len(overlays)

    def clear(self):
        if not self._objects:
            return
        self._objects.clear()
        self._changed(EventType.STACK_CLEARED, None)

    def _check_unique(self, object_id):
        if any(o.id == object_id for o in self._objects):
            raise DuplicateObjectId(f"Object id {object_id!r} is already in use")

    def _changed(self, event_type: EventType, obj: Optional[SceneObject]):
        data = {"size": len(self._objects)}
        if obj is not None:
            data["object_id"] = obj.id
            data["kind"] = obj.kind.value
        self.events.emit(EditorEvent(event_type, data))
        self._dirty = True
        if self._batch_depth == 0:
            self._flush()

    def _flush(self):
        if not self._dirty:
            return
        self._dirty = False
        self.events.emit(
            EditorEvent(EventType.STACK_CHANGED, {"size": len(self._objects)})
        )
