"""
Object factory.

Builds scene objects from user input, placing every new object at the
canvas centre and applying the per-kind default styling.
"""

import logging
from typing import Iterator, Optional, Tuple

import cv2
import numpy as np
from easydict import EasyDict as edict

from ...utils.config import get_default_cfg
from ...utils.misc import incrf
from .errors import ImageLoadError
from .objects import ImageObject, Point, Scale, SceneObject, ShapeKind, ShapeObject, TextObject
from .utils import bounding_box, fit_scale, parse_color, star_points

logger = logging.getLogger(__name__)

SHAPE_PALETTE = {
    ShapeKind.RECTANGLE: ("rgba(255,105,97,0.5)", "#ff6961"),
    ShapeKind.CIRCLE: ("rgba(119,221,119,0.5)", "#77dd77"),
    ShapeKind.TRIANGLE: ("rgba(108,180,238,0.5)", "#6cb4ee"),
    ShapeKind.STAR: ("rgba(253,253,150,0.5)", "#fdfd96"),
}

STAR_OUTER_RADIUS = 50
STAR_INNER_RADIUS = 25

# fields whose change alters the measured text box
_LAYOUT_FIELDS = {"text", "font_size", "font_family", "box_width", "line_height"}
_COLOR_FIELDS = {"fill", "stroke"}


def _to_uint8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint8:
        return image
    if np.issubdtype(image.dtype, np.floating):
        # float images are stored in [0, 1]
        image = np.nan_to_num(image, nan=0.0, posinf=1.0, neginf=0.0)
        return (np.clip(image, 0.0, 1.0) * 255.0).round().astype(np.uint8)
    return cv2.convertScaleAbs(image, alpha=255.0 / np.iinfo(image.dtype).max)


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes into an RGBA array.

    Deeper integer and floating point images are reduced to 8 bits.

    Raises:
        ImageLoadError: if the data is not a decodable image
    """
    if not data:
        raise ImageLoadError("Image data is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
        if image is None:
            raise ImageLoadError("Image data could not be decoded")
        image = _to_uint8(image)
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    except (cv2.error, ValueError) as e:
        raise ImageLoadError(f"Image data could not be converted: {e}") from e


class ObjectFactory:
    """
    Creates scene objects for one session.

    Identifiers come from a per-factory counter, so they are unique within
    the session's stack but not across sessions.
    """

    def __init__(self, cfg: Optional[edict] = None, ids: Optional[Iterator[int]] = None):
        self.cfg = cfg if cfg is not None else get_default_cfg()
        self._ids = ids if ids is not None else incrf()

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return (self.cfg.CANVAS.WIDTH, self.cfg.CANVAS.HEIGHT)

    @property
    def canvas_center(self) -> Point:
        width, height = self.canvas_size
        return Point(width / 2, height / 2)

    def next_id(self) -> int:
        return next(self._ids)

    def create_background_image(self, source_ref: str, data: bytes) -> ImageObject:
        """
        Build the non-selectable background from encoded image bytes.

        The image is centred and uniformly scaled to ``FIT_RATIO`` of the
        largest size that fits the canvas.

        Raises:
            ImageLoadError: if the bytes cannot be decoded
        """
        pixels = decode_image(data)
        height, width = pixels.shape[:2]
        scale = fit_scale(self.canvas_size, (width, height), self.cfg.IMAGE.FIT_RATIO)
        return ImageObject(
            id=self.next_id(),
            position=self.canvas_center,
            scale=Scale.uniform(scale),
            selectable=False,
            source=source_ref,
            cross_origin=self.cfg.IMAGE.CROSS_ORIGIN,
            width=width,
            height=height,
            pixels=pixels,
        )

    def create_caption(
        self,
        text: str,
        font_size: Optional[float] = None,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
    ) -> Optional[TextObject]:
        """
        Build a wrapped, centred caption box.

        Returns ``None`` for empty or whitespace-only text.
        """
        if not text or not text.strip():
            logger.debug("Ignoring blank caption")
            return None
        caption = self.cfg.CAPTION
        obj = TextObject(
            id=self.next_id(),
            position=self.canvas_center,
            text=text,
            font_size=font_size if font_size is not None else caption.FONT_SIZE,
            font_family=caption.FONT_FAMILY,
            fill=self._color(fill, caption.FILL, "fill"),
            stroke=self._color(stroke, caption.STROKE, "stroke"),
            stroke_width=caption.STROKE_WIDTH,
            text_align=caption.TEXT_ALIGN,
            box_width=caption.BOX_WIDTH,
            padding=caption.PADDING,
            line_height=caption.LINE_HEIGHT,
        )
        return self._measure(obj)

    def create_emoji(self, glyph: str) -> TextObject:
        obj = TextObject(
            id=self.next_id(),
            position=self.canvas_center,
            text=glyph,
            font_size=self.cfg.EMOJI.FONT_SIZE,
            font_family=self.cfg.CAPTION.FONT_FAMILY,
            fill="#000000",
            line_height=self.cfg.CAPTION.LINE_HEIGHT,
        )
        return self._measure(obj)

    def create_shape(self, kind) -> ShapeObject:
        """
        Build a shape with its default geometry and palette.

        Raises:
            UnknownShapeKind: if ``kind`` names no known shape
        """
        kind = ShapeKind.parse(kind)
        fill, stroke = SHAPE_PALETTE[kind]
        common = dict(
            id=self.next_id(),
            position=self.canvas_center,
            shape=kind,
            fill=fill,
            stroke=stroke,
            stroke_width=self.cfg.SHAPE.STROKE_WIDTH,
        )
        if kind is ShapeKind.CIRCLE:
            return ShapeObject(width=100, height=100, radius=50, **common)
        if kind is ShapeKind.STAR:
            points = tuple(star_points(STAR_OUTER_RADIUS, STAR_INNER_RADIUS))
            min_x, min_y, max_x, max_y = bounding_box(points)
            return ShapeObject(
                width=max_x - min_x, height=max_y - min_y, points=points, **common
            )
        return ShapeObject(width=100, height=100, **common)

    def update(self, obj: SceneObject, **changes) -> SceneObject:
        """
        Apply changes, re-measuring text when its layout inputs change.

        Unparseable colors keep the object's current color.
        """
        for field in _COLOR_FIELDS & {k for k, v in changes.items() if v is not None}:
            changes[field] = self._color(changes[field], getattr(obj, field, None), field)
        changed = obj.with_changes(**changes)
        if isinstance(changed, TextObject) and _LAYOUT_FIELDS & set(changes):
            changed = self._measure(changed)
        return changed

    @staticmethod
    def _color(value, default, field: str):
        if value is None:
            return default
        try:
            parse_color(value)
        except ValueError:
            logger.warning("Unknown %s color %r, using %r", field, value, default)
            return default
        return value

    def _measure(self, obj: TextObject) -> TextObject:
        from ..rendering.text import layout_text

        layout = layout_text(
            obj.text, obj.font_size, obj.font_family, obj.box_width, obj.line_height
        )
        return obj.with_changes(width=layout.width, height=layout.height)
