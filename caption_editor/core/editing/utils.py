"""
Pure utility functions for editing geometry and colors.

These functions have no side effects and can be tested in isolation.
"""

import math
import re
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from PIL import ImageColor

from .objects import Point

_RGBA_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*"
    r"(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$"
)


def fit_scale(
    canvas_size: Tuple[float, float],
    image_size: Tuple[float, float],
    ratio: float = 0.9,
) -> float:
    """
    Uniform scale that fits an image inside the canvas.

    Args:
        canvas_size: (width, height) of the canvas
        image_size: (width, height) of the image
        ratio: Fraction of the largest aspect-preserving fit

    Returns:
        Scale factor
    """
    canvas_w, canvas_h = canvas_size
    image_w, image_h = image_size
    if image_w <= 0 or image_h <= 0:
        raise ValueError(f"Image size must be positive, got {image_size}")
    return min(canvas_w / image_w, canvas_h / image_h) * ratio


def star_points(
    outer_radius: float = 50, inner_radius: float = 25, num_vertices: int = 10
) -> List[Point]:
    """
    Vertices of a star polygon.

    Vertex ``i`` sits at angle ``i * 2pi / num_vertices``; even indices use
    the outer radius and odd indices the inner one.
    """
    step = 2 * math.pi / num_vertices
    points = []
    for i in range(num_vertices):
        radius = outer_radius if i % 2 == 0 else inner_radius
        angle = i * step
        points.append(Point(radius * math.cos(angle), radius * math.sin(angle)))
    return points


def bounding_box(points: Iterable[Point]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y)."""
    xs, ys = zip(*((p.x, p.y) for p in points))
    return min(xs), min(ys), max(xs), max(ys)


def rectangle_vertices(width: float, height: float) -> np.ndarray:
    hw, hh = width / 2, height / 2
    return np.array([[-hw, -hh], [hw, -hh], [hw, hh], [-hw, hh]], dtype=np.float64)


def triangle_vertices(width: float, height: float) -> np.ndarray:
    """Isosceles triangle with its apex at the top centre."""
    hw, hh = width / 2, height / 2
    return np.array([[0.0, -hh], [hw, hh], [-hw, hh]], dtype=np.float64)


def ellipse_vertices(rx: float, ry: float, segments: int = 90) -> np.ndarray:
    angles = np.linspace(0, 2 * np.pi, segments, endpoint=False)
    return np.stack([rx * np.cos(angles), ry * np.sin(angles)], axis=1)


def centered_polygon(points: Sequence[Point]) -> np.ndarray:
    """Polygon vertices shifted so the bounding-box centre is the origin."""
    min_x, min_y, max_x, max_y = bounding_box(points)
    cx, cy = (min_x + max_x) / 2, (min_y + max_y) / 2
    return np.array([[p.x - cx, p.y - cy] for p in points], dtype=np.float64)


def object_matrix(
    position: Point,
    scale: Tuple[float, float],
    rotation: float,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> np.ndarray:
    """
    2x3 affine matrix mapping object-local coordinates to the canvas.

    Local point ``p`` goes to ``R * S * (p - origin) + position`` with the
    rotation given in degrees, clockwise on screen (y points down).
    """
    sx, sy = scale
    theta = math.radians(rotation)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    linear = np.array(
        [[cos_t * sx, -sin_t * sy], [sin_t * sx, cos_t * sy]], dtype=np.float64
    )
    offset = np.array([position.x, position.y]) - linear @ np.asarray(origin)
    return np.hstack([linear, offset.reshape(2, 1)])


def transform_points(points: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Apply a 2x3 affine matrix to an (N, 2) array of points."""
    points = np.asarray(points, dtype=np.float64)
    return points @ matrix[:, :2].T + matrix[:, 2]


def parse_color(value) -> Tuple[int, int, int, float]:
    """
    Parse a CSS color into (r, g, b, alpha) with alpha in [0, 1].

    Handles ``rgba()`` with a fractional alpha, which Pillow does not.
    """
    if value is None:
        return (0, 0, 0, 0.0)
    text = str(value).strip()
    match = _RGBA_RE.match(text.lower())
    if match:
        r, g, b, a = match.groups()
        alpha = float(a) if a is not None else 1.0
        return (int(r), int(g), int(b), min(max(alpha, 0.0), 1.0))
    rgb = ImageColor.getrgb(text)
    if len(rgb) == 4:
        return (rgb[0], rgb[1], rgb[2], rgb[3] / 255.0)
    return (rgb[0], rgb[1], rgb[2], 1.0)
