"""
Rendering module - rasterizes scene objects.

Backs every editing session with a ``Canvas`` and flattens it to PNG
through the ``Exporter``.
"""

from .canvas import Canvas
from .exporter import Exporter, encode_png
from .text import TextLayout, layout_text, render_text

__all__ = [
    "Canvas",
    "Exporter",
    "encode_png",
    "TextLayout",
    "layout_text",
    "render_text",
]
