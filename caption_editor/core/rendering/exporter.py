"""
Exporter.

Flattens a layer stack into a PNG and delivers it as a file.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

import cv2
import numpy as np

from ..editing.objects import SceneObject
from .canvas import Canvas

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "edited-image.png"


def encode_png(image: np.ndarray) -> bytes:
    """Encode an RGB array as lossless PNG bytes."""
    ok, buffer = cv2.imencode(
        ".png",
        cv2.cvtColor(image, cv2.COLOR_RGB2BGR),
        [cv2.IMWRITE_PNG_COMPRESSION, 3],
    )
    if not ok:
        raise RuntimeError("PNG encoding failed")
    return buffer.tobytes()


class Exporter:
    """Renders the full stack, background and overlays, in paint order."""

    def __init__(self, canvas: Canvas, filename: str = DEFAULT_FILENAME):
        self.canvas = canvas
        self.filename = filename

    def render(self, objects: Iterable[SceneObject]) -> np.ndarray:
        return self.canvas.render(objects)

    def export(self, objects: Iterable[SceneObject]) -> bytes:
        """
        Rasterize the objects to PNG bytes.

        Args:
            objects: Scene objects in paint order, usually a ``LayerStack``

        Returns:
            PNG file contents at the canvas size
        """
        data = encode_png(self.render(objects))
        logger.debug(
            "Exported %dx%d canvas (%d bytes)",
            self.canvas.width,
            self.canvas.height,
            len(data),
        )
        return data

    def save(self, objects: Iterable[SceneObject], directory: Union[str, Path]) -> Path:
        """Write the export into ``directory`` under the download file name."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.filename
        target.write_bytes(self.export(objects))
        logger.info("Saved %s", target)
        return target
