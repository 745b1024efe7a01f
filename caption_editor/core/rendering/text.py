"""
Text layout and rasterization with Pillow.

Word-wraps text to a box width, measures it, and draws it into an RGBA
numpy array that the canvas composites like any other image.
"""

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..editing.objects import TextObject
from ..editing.utils import parse_color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextLayout:
    lines: Tuple[str, ...]
    line_widths: Tuple[float, ...]
    width: float
    height: float
    line_height: float


@lru_cache(maxsize=64)
def load_font(font_family: str, font_size: int):
    """
    Resolve a font family to a Pillow font.

    Falls back to Pillow's bundled font when the family is not installed.
    """
    size = max(int(round(font_size)), 1)
    try:
        return ImageFont.truetype(font_family, size)
    except OSError:
        logger.debug("Font %r not found, using the default font", font_family)
        return ImageFont.load_default(size=size)


def _wrap_paragraph(paragraph: str, font, box_width: Optional[float]) -> List[str]:
    words = paragraph.split(" ")
    if box_width is None:
        return [paragraph]
    lines = []
    current = ""
    for word in words:
        candidate = word if not current else f"{current} {word}"
        if current and font.getlength(candidate) > box_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


def layout_text(
    text: str,
    font_size: float,
    font_family: str,
    box_width: Optional[float] = None,
    line_height: float = 1.16,
) -> TextLayout:
    """
    Wrap and measure text.

    Args:
        text: Content, explicit newlines are kept
        font_size: Font size in pixels
        font_family: Font family or font file name
        box_width: Wrap width; ``None`` keeps every paragraph on one line
        line_height: Line spacing as a multiple of the font size

    Returns:
        Layout with the wrapped lines and the box size. A word longer than
        the box widens the box instead of being split.
    """
    font = load_font(font_family, int(round(font_size)))
    lines: List[str] = []
    for paragraph in text.split("\n"):
        lines.extend(_wrap_paragraph(paragraph, font, box_width))
    line_widths = tuple(font.getlength(line) for line in lines)
    content_width = max(line_widths) if line_widths else 0.0
    width = max(content_width, box_width or 0.0)
    pitch = font_size * line_height
    return TextLayout(
        lines=tuple(lines),
        line_widths=line_widths,
        width=float(width),
        height=float(pitch * len(lines)),
        line_height=float(pitch),
    )


def render_text(obj: TextObject) -> np.ndarray:
    """
    Rasterize a text object into an RGBA array of its layout size.

    The array is ``ceil(height) x ceil(width) x 4``; its centre is the
    object's anchor point.
    """
    layout = layout_text(
        obj.text, obj.font_size, obj.font_family, obj.box_width, obj.line_height
    )
    width = max(int(math.ceil(layout.width)), 1)
    height = max(int(math.ceil(layout.height)), 1)
    font = load_font(obj.font_family, int(round(obj.font_size)))

    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    fill = _pil_color(obj.fill)
    stroke = _pil_color(obj.stroke) if obj.stroke and obj.stroke_width else None
    stroke_width = int(round(obj.stroke_width)) if stroke else 0

    for index, (line, line_width) in enumerate(zip(layout.lines, layout.line_widths)):
        if obj.text_align == "center":
            x = (layout.width - line_width) / 2
        elif obj.text_align == "right":
            x = layout.width - line_width
        else:
            x = 0
        y = index * layout.line_height
        draw.text(
            (x, y),
            line,
            font=font,
            fill=fill,
            stroke_width=stroke_width,
            stroke_fill=stroke,
        )
    return np.asarray(canvas, dtype=np.uint8)


def _pil_color(value) -> Tuple[int, int, int, int]:
    r, g, b, a = parse_color(value)
    return (r, g, b, int(round(a * 255)))
