"""
Rendering surface.

A ``Canvas`` is the drawing surface backing one editing session. It turns
a sequence of scene objects into an RGB numpy array, compositing them in
paint order. Selection state never reaches it.
"""

import logging
from typing import Iterable, Tuple

import cv2
import numpy as np

from ..editing.errors import SessionClosedError
from ..editing.objects import ImageObject, SceneObject, ShapeKind, ShapeObject, TextObject
from ..editing.utils import (
    centered_polygon,
    ellipse_vertices,
    object_matrix,
    parse_color,
    rectangle_vertices,
    transform_points,
    triangle_vertices,
)
from .text import render_text

logger = logging.getLogger(__name__)

# fixed-point bits for sub-pixel polygon drawing
_SHIFT = 4


class Canvas:
    """Fixed-size drawing surface exclusively owned by one session."""

    def __init__(self, width: int = 800, height: int = 600, background="#f0f0f0"):
        self.width = int(width)
        self.height = int(height)
        self.background = background
        self._disposed = False

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self):
        self._disposed = True

    def render(self, objects: Iterable[SceneObject]) -> np.ndarray:
        """
        Composite objects back to front.

        Returns:
            H x W x 3 uint8 RGB image
        """
        if self._disposed:
            raise SessionClosedError("Canvas has been disposed")
        r, g, b, _ = parse_color(self.background)
        frame = np.empty((self.height, self.width, 3), dtype=np.float32)
        frame[:] = (r, g, b)

        for obj in objects:
            if isinstance(obj, ImageObject):
                self._draw_image(frame, obj)
            elif isinstance(obj, TextObject):
                self._draw_text(frame, obj)
            elif isinstance(obj, ShapeObject):
                self._draw_shape(frame, obj)
            else:
                raise TypeError(f"Cannot render {type(obj).__name__}")

        return np.clip(np.rint(frame), 0, 255).astype(np.uint8)

    def _draw_image(self, frame: np.ndarray, obj: ImageObject):
        if obj.pixels is None:
            logger.warning("Image object %s has no pixel data", obj.id)
            return
        self._composite_rgba(frame, obj.pixels, obj)

    def _draw_text(self, frame: np.ndarray, obj: TextObject):
        if not obj.text:
            return
        self._composite_rgba(frame, render_text(obj), obj)

    def _composite_rgba(self, frame: np.ndarray, layer: np.ndarray, obj: SceneObject):
        h, w = layer.shape[:2]
        matrix = object_matrix(
            obj.position, (obj.scale.sx, obj.scale.sy), obj.rotation, (w / 2, h / 2)
        )
        warped = cv2.warpAffine(
            layer,
            matrix,
            (self.width, self.height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
        alpha = warped[..., 3:4].astype(np.float32) / 255.0
        frame *= 1.0 - alpha
        frame += warped[..., :3].astype(np.float32) * alpha

    def _draw_shape(self, frame: np.ndarray, obj: ShapeObject):
        local = shape_outline(obj)
        matrix = object_matrix(obj.position, (obj.scale.sx, obj.scale.sy), obj.rotation)
        outline = transform_points(local, matrix)
        pts = np.rint(outline * (1 << _SHIFT)).astype(np.int32).reshape(-1, 1, 2)

        fill = parse_color(obj.fill)
        if fill[3] > 0:
            mask = np.zeros((self.height, self.width), dtype=np.uint8)
            cv2.fillPoly(mask, [pts], 255, lineType=cv2.LINE_AA, shift=_SHIFT)
            _blend(frame, mask, fill)

        if obj.stroke and obj.stroke_width > 0:
            stroke = parse_color(obj.stroke)
            thickness = max(
                int(round(obj.stroke_width * (abs(obj.scale.sx) + abs(obj.scale.sy)) / 2)),
                1,
            )
            mask = np.zeros((self.height, self.width), dtype=np.uint8)
            cv2.polylines(
                mask, [pts], True, 255, thickness, lineType=cv2.LINE_AA, shift=_SHIFT
            )
            _blend(frame, mask, stroke)


def shape_outline(obj: ShapeObject) -> np.ndarray:
    """Outline of a shape in local coordinates centred on its bounding box."""
    if obj.shape is ShapeKind.CIRCLE:
        radius = obj.radius if obj.radius is not None else obj.width / 2
        return ellipse_vertices(radius, radius)
    if obj.points:
        return centered_polygon(obj.points)
    if obj.shape is ShapeKind.TRIANGLE:
        return triangle_vertices(obj.width, obj.height)
    return rectangle_vertices(obj.width, obj.height)


def _blend(frame: np.ndarray, mask: np.ndarray, color):
    r, g, b, a = color
    coverage = (mask.astype(np.float32) / 255.0 * a)[..., None]
    frame *= 1.0 - coverage
    frame += np.array((r, g, b), dtype=np.float32) * coverage
