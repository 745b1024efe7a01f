"""
Core editing module - UI-agnostic editing logic.

This module provides the scene model, the layer stack and the session
controller that any UI framework (Qt, Web, CLI) can drive.
"""

from .errors import (
    DuplicateObjectId,
    EditorError,
    ImageLoadError,
    LayerStackError,
    MissingTargetObject,
    SessionClosedError,
    UnknownShapeKind,
)
from .events import EditorEvent, EventEmitter, EventType
from .objects import (
    ImageObject,
    ObjectKind,
    Point,
    Scale,
    SceneObject,
    ShapeKind,
    ShapeObject,
    Size,
    TextObject,
)
from .stack import LayerStack
from .factory import ObjectFactory
from .introspection import LayerIntrospector, LayerRecord, dump_snapshot, snapshot
from .session import EditingSession, LoadState

__all__ = [
    "DuplicateObjectId",
    "EditorError",
    "ImageLoadError",
    "LayerStackError",
    "MissingTargetObject",
    "SessionClosedError",
    "UnknownShapeKind",
    "EditorEvent",
    "EventEmitter",
    "EventType",
    "ImageObject",
    "ObjectKind",
    "Point",
    "Scale",
    "SceneObject",
    "ShapeKind",
    "ShapeObject",
    "Size",
    "TextObject",
    "LayerStack",
    "ObjectFactory",
    "LayerIntrospector",
    "LayerRecord",
    "dump_snapshot",
    "snapshot",
    "EditingSession",
    "LoadState",
]
