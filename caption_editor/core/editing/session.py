"""
Editing session management.

Core logic for one editing session bound to one source image.
UI-agnostic - can be driven by any interface (GUI, Web, CLI).
"""

import logging
from enum import Enum
from functools import partial
from typing import Optional, Tuple

import numpy as np
from easydict import EasyDict as edict

from ...utils.config import get_default_cfg
from .errors import (
    DuplicateObjectId,
    ImageLoadError,
    LayerStackError,
    MissingTargetObject,
    SessionClosedError,
    UnknownShapeKind,
)
from .events import EditorEvent, EventEmitter, EventType
from .factory import ObjectFactory
from .introspection import LayerIntrospector, LayerRecord
from .objects import SceneObject, ShapeObject, TextObject
from .stack import LayerStack

logger = logging.getLogger(__name__)


class LoadState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class EditingSession:
    """
    Owns the layer stack of one editing session.

    This class handles:
    - Background image loading, guarded against stale completions
    - Adding, modifying and removing overlays
    - Selection of the active object
    - Snapshot regeneration through the layer introspector
    - Export through the canvas it exclusively owns

    Every recoverable failure degrades to "no visible change" plus a log
    entry. Only use after ``close()`` raises.
    """

    def __init__(self, loader, cfg: Optional[edict] = None):
        """
        Initialize editing session.

        Args:
            loader: ``ImageLoader`` resolving source references
            cfg: Configuration tree, defaults to ``get_default_cfg()``
        """
        self.cfg = cfg if cfg is not None else get_default_cfg()
        self.loader = loader

        # Event emitter shared with the stack and the introspector
        self.events = EventEmitter()
        self.stack = LayerStack(self.events)
        self.factory = ObjectFactory(self.cfg)
        self.introspector = LayerIntrospector(self.stack)

        from ..rendering import Canvas, Exporter

        self.canvas = Canvas(
            self.cfg.CANVAS.WIDTH, self.cfg.CANVAS.HEIGHT, self.cfg.CANVAS.BACKGROUND
        )
        self.exporter = Exporter(self.canvas, self.cfg.EXPORT.FILENAME)

        self._source_ref: Optional[str] = None
        self._load_state = LoadState.EMPTY
        self._load_generation = 0
        self._last_error: Optional[ImageLoadError] = None
        self._active_id = None
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.canvas.size

    @property
    def source_ref(self) -> Optional[str]:
        return self._source_ref

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def last_error(self) -> Optional[ImageLoadError]:
        return self._last_error

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active_object(self) -> Optional[SceneObject]:
        if self._active_id is None:
            return None
        return self.stack.get(self._active_id)

    def set_source_image(self, ref: str) -> bool:
        """
        Start a session on a new source image.

        Discards the whole stack and requests the image. Unchanged
        references are ignored unless the previous load failed.

        Returns:
            True if a load was started
        """
        self._ensure_open()
        if ref == self._source_ref and self._load_state is not LoadState.FAILED:
            return False

        self._load_generation += 1
        generation = self._load_generation
        self._source_ref = ref
        self._load_state = LoadState.LOADING
        self._last_error = None
        self._set_active(None)
        self.stack.clear()

        logger.info("Loading source image %s", ref)
        self.events.emit(
            EditorEvent(
                EventType.IMAGE_LOAD_STARTED, {"source": ref, "generation": generation}
            )
        )
        self.loader.load(
            ref,
            partial(self._on_image_loaded, generation, ref),
            partial(self._on_image_failed, generation, ref),
        )
        return True

    def add_object(self, obj: SceneObject) -> bool:
        """
        Put an object on top of the stack and make it active.

        Ignored while there is no background image, and for objects the
        stack refuses (duplicate id, non-selectable).
        """
        self._ensure_open()
        if self.stack.background is None:
            logger.warning(
                "Ignoring %s object %s: no background image installed",
                obj.kind.value,
                obj.id,
            )
            return False
        try:
            self.stack.append(obj)
        except (DuplicateObjectId, LayerStackError) as e:
            logger.warning("Refusing to add object %r: %s", obj.id, e)
            return False
        self._set_active(obj.id)
        return True

    def add_caption(
        self,
        text: str,
        font_size: Optional[float] = None,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
    ) -> Optional[TextObject]:
        self._ensure_open()
        caption = self.factory.create_caption(text, font_size, fill, stroke)
        if caption is None or not self.add_object(caption):
            return None
        return caption

    def add_emoji(self, glyph: str) -> Optional[TextObject]:
        self._ensure_open()
        emoji = self.factory.create_emoji(glyph)
        return emoji if self.add_object(emoji) else None

    def add_shape(self, kind) -> Optional[ShapeObject]:
        self._ensure_open()
        try:
            shape = self.factory.create_shape(kind)
        except UnknownShapeKind as e:
            logger.warning("Ignoring shape request: %s", e)
            return None
        return shape if self.add_object(shape) else None

    def clear_overlays(self) -> int:
        """Remove everything but the background. Returns how many went."""
        self._ensure_open()
        removed = self.stack.truncate_to_background()
        if removed:
            self._set_active(None)
        return removed

    def remove_object(self, object_id) -> bool:
        self._ensure_open()
        try:
            self.stack.remove(object_id)
        except MissingTargetObject:
            logger.info("Nothing to remove, no object with id %r", object_id)
            return False
        except LayerStackError as e:
            logger.warning("Refusing to remove object %r: %s", object_id, e)
            return False
        if self._active_id == object_id:
            self._set_active(None)
        return True

    def modify_object(self, object_id, **changes) -> Optional[SceneObject]:
        """
        Apply a direct manipulation (move, scale, rotate, restyle).

        The background image is not selectable and cannot be modified.

        Returns:
            The new object value, or None if nothing changed
        """
        self._ensure_open()
        current = self.stack.get(object_id)
        if current is None:
            logger.info("Nothing to modify, no object with id %r", object_id)
            return None
        if not current.selectable:
            logger.warning("Refusing to modify non-selectable object %r", object_id)
            return None
        if "id" in changes or "selectable" in changes:
            raise ValueError("id and selectable cannot be changed")
        updated = self.factory.update(current, **changes)
        self.stack.replace(updated)
        return updated

    def select(self, object_id) -> bool:
        self._ensure_open()
        obj = self.stack.get(object_id)
        if obj is None or not obj.selectable:
            return False
        self._set_active(object_id)
        return True

    def deselect(self):
        self._set_active(None)

    def snapshot(self) -> Tuple[LayerRecord, ...]:
        return self.introspector.snapshot

    def render(self) -> np.ndarray:
        self._ensure_open()
        return self.exporter.render(self.stack)

    def export(self) -> bytes:
        self._ensure_open()
        return self.exporter.export(self.stack)

    def save(self, directory):
        self._ensure_open()
        return self.exporter.save(self.stack, directory)

    def close(self):
        """Tear the session down; pending loads are ignored from now on."""
        if self._closed:
            return
        self._load_generation += 1
        self._closed = True
        self.introspector.detach()
        self.canvas.dispose()
        self.events.emit(EditorEvent(EventType.SESSION_CLOSED, {"source": self._source_ref}))
        self.events.clear()
        logger.debug("Session for %s closed", self._source_ref)

    def _on_image_loaded(self, generation: int, ref: str, data: bytes):
        if generation != self._load_generation:
            logger.debug("Dropping stale image load for %s", ref)
            return
        try:
            background = self.factory.create_background_image(ref, data)
        except ImageLoadError as e:
            self._on_image_failed(generation, ref, e)
            return

        self.stack.install_background(background)
        self._load_state = LoadState.READY
        logger.info(
            "Loaded %s (%dx%d, scale %.3f)",
            ref,
            background.width,
            background.height,
            background.scale.sx,
        )
        self.events.emit(
            EditorEvent(
                EventType.IMAGE_LOADED,
                {
                    "source": ref,
                    "object_id": background.id,
                    "image_size": (background.width, background.height),
                },
            )
        )

    def _on_image_failed(self, generation: int, ref: str, error: Exception):
        if generation != self._load_generation:
            logger.debug("Dropping stale image failure for %s", ref)
            return
        if not isinstance(error, ImageLoadError):
            error = ImageLoadError(str(error))
        self._load_state = LoadState.FAILED
        self._last_error = error
        logger.error("Error loading image %s: %s", ref, error)
        self.events.emit(
            EditorEvent(EventType.IMAGE_LOAD_FAILED, {"source": ref, "error": str(error)})
        )

    def _set_active(self, object_id):
        if object_id == self._active_id:
            return
        self._active_id = object_id
        self.events.emit(EditorEvent(EventType.SELECTION_CHANGED, {"object_id": object_id}))

    def _ensure_open(self):
        if self._closed:
            raise SessionClosedError("Editing session is closed")
