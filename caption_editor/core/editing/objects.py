"""
Scene object model.

Value types describing one visual element on the editing canvas. They say
what to render and how the element behaves under selection; translating
them to pixels is the renderer's job. Objects are frozen: a change always
produces a new value through ``with_changes``.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import UnknownShapeKind


class ObjectKind(Enum):
    IMAGE = "image"
    TEXT = "text"
    SHAPE = "shape"


class ShapeKind(Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    STAR = "star"

    @classmethod
    def parse(cls, value) -> "ShapeKind":
        """Accept a member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownShapeKind(f"Unknown shape kind: {value!r}") from None


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def to_dict(self):
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Scale:
    sx: float = 1.0
    sy: float = 1.0

    @classmethod
    def uniform(cls, factor: float) -> "Scale":
        return cls(factor, factor)

    def to_dict(self):
        return {"sx": self.sx, "sy": self.sy}


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    def to_dict(self):
        return {"width": self.width, "height": self.height}


def _coerce_point(value) -> Point:
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["y"]))
    x, y = value
    return Point(float(x), float(y))


def _coerce_scale(value) -> Scale:
    if isinstance(value, Scale):
        return value
    if isinstance(value, (int, float)):
        return Scale.uniform(float(value))
    if isinstance(value, dict):
        return Scale(float(value["sx"]), float(value["sy"]))
    sx, sy = value
    return Scale(float(sx), float(sy))


@dataclass(frozen=True)
class SceneObject:
    """
    Common geometry shared by every kind of scene object.

    ``position`` is the object's centre on the canvas. Stacking order is
    not stored here, it is whatever position the object holds in the
    layer stack.
    """

    id: int = 0
    position: Point = Point(0.0, 0.0)
    scale: Scale = Scale()
    rotation: float = 0.0
    selectable: bool = True

    kind = None

    @property
    def size(self) -> Size:
        raise NotImplementedError

    def attributes(self) -> Dict[str, Any]:
        """Kind-specific fields, JSON-safe."""
        raise NotImplementedError

    def with_changes(self, **changes) -> "SceneObject":
        allowed = {f.name for f in fields(self)}
        unknown = set(changes) - allowed
        if unknown:
            raise TypeError(
                f"{type(self).__name__} has no attribute(s) {sorted(unknown)}"
            )
        if "position" in changes:
            changes["position"] = _coerce_point(changes["position"])
        if "scale" in changes:
            changes["scale"] = _coerce_scale(changes["scale"])
        if "rotation" in changes:
            changes["rotation"] = float(changes["rotation"])
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "position": self.position.to_dict(),
            "size": self.size.to_dict(),
            "scale": self.scale.to_dict(),
            "rotation": self.rotation,
            "selectable": self.selectable,
            **self.attributes(),
        }


@dataclass(frozen=True)
class ImageObject(SceneObject):
    source: str = ""
    cross_origin: Optional[str] = "anonymous"
    width: int = 0
    height: int = 0
    # RGBA, H x W x 4
    pixels: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    kind = ObjectKind.IMAGE

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def attributes(self):
        return {"source": self.source, "cross_origin": self.cross_origin}


@dataclass(frozen=True)
class TextObject(SceneObject):
    text: str = ""
    font_size: float = 30
    font_family: str = "Arial"
    fill: str = "#ffffff"
    stroke: Optional[str] = None
    stroke_width: float = 0
    text_align: str = "left"
    # None means the box grows with its content
    box_width: Optional[float] = None
    padding: float = 0
    line_height: float = 1.16
    # measured layout size, kept in sync by the factory
    width: float = 0
    height: float = 0

    kind = ObjectKind.TEXT

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def attributes(self):
        return {
            "text": self.text,
            "font_size": self.font_size,
            "font_family": self.font_family,
            "fill": self.fill,
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "text_align": self.text_align,
            "box_width": self.box_width,
        }


@dataclass(frozen=True)
class ShapeObject(SceneObject):
    shape: ShapeKind = ShapeKind.RECTANGLE
    fill: str = "#000000"
    stroke: Optional[str] = None
    stroke_width: float = 0
    width: float = 0
    height: float = 0
    radius: Optional[float] = None
    # polygon vertices relative to the polygon origin
    points: Optional[Tuple[Point, ...]] = None

    kind = ObjectKind.SHAPE

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    def attributes(self):
        return {
            "shape": self.shape.value,
            "fill": self.fill,
            "stroke": self.stroke,
            "stroke_width": self.stroke_width,
            "radius": self.radius,
            "points": (
                [p.to_dict() for p in self.points]
                if self.points is not None
                else None
            ),
        }
