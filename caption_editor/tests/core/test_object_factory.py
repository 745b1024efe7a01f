"""
Tests for ObjectFactory defaults and placement.
"""

import math

import cv2
import numpy as np
import pytest

from caption_editor.core.editing import (
    ImageLoadError,
    ObjectFactory,
    Point,
    ShapeKind,
    UnknownShapeKind,
)
import caption_editor.core.editing.factory as factory_module
from caption_editor.core.editing.factory import decode_image
from caption_editor.tests.conftest import encode_image, solid_image

CENTER = Point(400, 300)


class TestBackgroundImage:
    def test_scale_and_placement(self, factory, image_a):
        background = factory.create_background_image("a.png", image_a)

        assert background.scale.sx == pytest.approx(1.35)
        assert background.scale.sy == pytest.approx(1.35)
        assert background.position == CENTER
        assert background.selectable is False
        assert (background.width, background.height) == (400, 400)
        assert background.source == "a.png"
        assert background.pixels.shape == (400, 400, 4)

    def test_wide_image(self, factory):
        background = factory.create_background_image("w.png", solid_image(1600, 400))
        assert background.scale.sx == pytest.approx(0.5 * 0.9)

    def test_undecodable_data(self, factory):
        with pytest.raises(ImageLoadError):
            factory.create_background_image("bad.png", b"definitely not an image")
        with pytest.raises(ImageLoadError):
            factory.create_background_image("empty.png", b"")

    def test_decode_keeps_rgb_order_and_alpha(self):
        bgra = np.zeros((2, 3, 4), dtype=np.uint8)
        bgra[:] = (255, 0, 0, 128)  # blue, half transparent
        rgba = decode_image(encode_image(bgra))
        assert tuple(rgba[0, 0]) == (0, 0, 255, 128)

    def test_decode_grayscale(self):
        gray = np.full((5, 5), 77, dtype=np.uint8)
        rgba = decode_image(encode_image(gray))
        assert tuple(rgba[0, 0]) == (77, 77, 77, 255)

    def test_decode_float_image(self):
        bgr = np.zeros((40, 40, 3), dtype=np.float32)
        bgr[:] = (1.0, 0.0, 2.0)  # blue, plus an out-of-range red
        rgba = decode_image(encode_image(bgr, ".tiff"))
        assert rgba.dtype == np.uint8
        assert tuple(rgba[0, 0]) == (255, 0, 255, 255)

    def test_decode_16_bit_image(self):
        gray = np.full((5, 5), 65535, dtype=np.uint16)
        rgba = decode_image(encode_image(gray))
        assert rgba.dtype == np.uint8
        assert tuple(rgba[0, 0]) == (255, 255, 255, 255)

    def test_conversion_failure_is_a_load_error(self, factory, image_a, monkeypatch):
        def broken_imdecode(buffer, flags):
            raise cv2.error("unsupported pixel layout")

        monkeypatch.setattr(factory_module.cv2, "imdecode", broken_imdecode)
        with pytest.raises(ImageLoadError):
            factory.create_background_image("a.png", image_a)


class TestCaption:
    @pytest.mark.parametrize("text", ["", "  ", "\n\t"])
    def test_blank_caption_ignored(self, factory, text):
        assert factory.create_caption(text) is None

    def test_caption_defaults(self, factory):
        caption = factory.create_caption("Hello", font_size=40, fill="#ff0000", stroke="#00ff00")

        assert caption.position == CENTER
        assert caption.box_width == 300
        assert caption.width == pytest.approx(300)
        assert caption.font_size == 40
        assert caption.fill == "#ff0000"
        assert caption.stroke == "#00ff00"
        assert caption.stroke_width == 1
        assert caption.text_align == "center"
        assert caption.selectable is True
        assert caption.height == pytest.approx(40 * 1.16)

    def test_caption_style_falls_back_to_config(self, factory):
        caption = factory.create_caption("Hello")
        assert caption.font_size == 30
        assert caption.fill == "#ffffff"
        assert caption.stroke == "#000000"

    def test_unparseable_colors_fall_back_to_config(self, factory):
        caption = factory.create_caption("Hello", fill="not-a-color", stroke="#12")
        assert caption.fill == "#ffffff"
        assert caption.stroke == "#000000"

    def test_long_caption_wraps(self, factory):
        caption = factory.create_caption(" ".join(["caption"] * 40))
        assert caption.width == pytest.approx(300)
        assert caption.height > 2 * 30 * 1.16


class TestEmoji:
    def test_emoji_defaults(self, factory):
        emoji = factory.create_emoji("😀")
        assert emoji.text == "😀"
        assert emoji.font_size == 50
        assert emoji.position == CENTER
        assert emoji.box_width is None
        assert emoji.selectable is True


class TestShapes:
    def test_rectangle(self, factory):
        rect = factory.create_shape("rectangle")
        assert rect.shape is ShapeKind.RECTANGLE
        assert (rect.width, rect.height) == (100, 100)
        assert rect.fill == "rgba(255,105,97,0.5)"
        assert rect.stroke == "#ff6961"
        assert rect.stroke_width == 2
        assert rect.position == CENTER

    def test_circle(self, factory):
        circle = factory.create_shape(ShapeKind.CIRCLE)
        assert circle.radius == 50
        assert circle.fill == "rgba(119,221,119,0.5)"
        assert circle.stroke == "#77dd77"

    def test_triangle(self, factory):
        triangle = factory.create_shape("triangle")
        assert (triangle.width, triangle.height) == (100, 100)
        assert triangle.fill == "rgba(108,180,238,0.5)"
        assert triangle.stroke == "#6cb4ee"

    def test_star(self, factory):
        star = factory.create_shape("star")

        assert len(star.points) == 10
        assert star.points[0] == Point(pytest.approx(50), pytest.approx(0))
        assert star.fill == "rgba(253,253,150,0.5)"
        assert star.stroke == "#fdfd96"
        assert star.width == pytest.approx(50 - 50 * math.cos(4 * math.pi / 5))
        assert star.height == pytest.approx(2 * 50 * math.sin(2 * math.pi / 5))

    def test_unknown_shape(self, factory):
        with pytest.raises(UnknownShapeKind):
            factory.create_shape("hexagon")

    def test_all_shapes_selectable_and_centered(self, factory):
        for kind in ShapeKind:
            shape = factory.create_shape(kind)
            assert shape.selectable is True
            assert shape.position == CENTER


class TestIdentifiersAndUpdates:
    def test_ids_are_unique(self, factory, image_a):
        objects = [
            factory.create_background_image("a.png", image_a),
            factory.create_caption("x"),
            factory.create_emoji("⭐"),
            factory.create_shape("star"),
        ]
        ids = [o.id for o in objects]
        assert len(set(ids)) == len(ids)

    def test_custom_id_source(self):
        factory = ObjectFactory(ids=iter([7, 8]))
        assert factory.create_shape("circle").id == 7

    def test_update_remeasures_text(self, factory):
        emoji = factory.create_emoji("AB")
        bigger = factory.update(emoji, font_size=100)
        assert bigger.width > emoji.width
        assert bigger.height == pytest.approx(100 * 1.16)

    def test_update_geometry_keeps_measurement(self, factory):
        caption = factory.create_caption("Hello")
        moved = factory.update(caption, position=(10, 10))
        assert moved.size == caption.size
        assert moved.position == Point(10, 10)

    def test_update_keeps_color_when_unparseable(self, factory):
        caption = factory.create_caption("Hello", fill="#ff0000")
        updated = factory.update(caption, fill="not-a-color", stroke="rgba(0,0,0,0.5)")
        assert updated.fill == "#ff0000"
        assert updated.stroke == "rgba(0,0,0,0.5)"
