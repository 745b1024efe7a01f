"""
Test fixtures and utilities for caption_editor tests.

Provides fake loaders, encoded test images and ready-made sessions.
"""

import pytest
import numpy as np
import cv2

from caption_editor.core.editing.errors import ImageLoadError
from caption_editor.core.loading import ImageLoader


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end workflow tests")


def encode_image(image: np.ndarray, ext: str = ".png") -> bytes:
    ok, buffer = cv2.imencode(ext, image)
    assert ok
    return buffer.tobytes()


def solid_image(width, height, bgr=(255, 0, 0)) -> bytes:
    """Encoded PNG of a single color (BGR order, like cv2)."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:] = bgr
    return encode_image(image)


class InMemoryImageLoader(ImageLoader):
    """Serves bytes from a dict and reports before ``load`` returns."""

    def __init__(self, images):
        super().__init__()
        self.images = dict(images)
        self.requested = []

    def fetch(self, ref):
        self.requested.append(ref)
        if ref not in self.images:
            raise ImageLoadError(f"No such image: {ref}")
        return self.images[ref]

    def load(self, ref, on_loaded, on_failed):
        try:
            data = self.fetch(ref)
        except ImageLoadError as e:
            on_failed(e)
            return
        on_loaded(data)


class DeferredImageLoader(ImageLoader):
    """Keeps every request pending until the test resolves it."""

    def __init__(self):
        super().__init__()
        self.pending = []

    def load(self, ref, on_loaded, on_failed):
        self.pending.append((ref, on_loaded, on_failed))

    def resolve(self, ref, data):
        for index, (pending_ref, on_loaded, _) in enumerate(self.pending):
            if pending_ref == ref:
                del self.pending[index]
                on_loaded(data)
                return
        raise AssertionError(f"No pending load for {ref}")

    def fail(self, ref, error=None):
        for index, (pending_ref, _, on_failed) in enumerate(self.pending):
            if pending_ref == ref:
                del self.pending[index]
                on_failed(error or ImageLoadError(f"Could not fetch {ref}"))
                return
        raise AssertionError(f"No pending load for {ref}")


@pytest.fixture
def image_a():
    """400x400 blue test image."""
    return solid_image(400, 400, (255, 0, 0))


@pytest.fixture
def image_b():
    """200x100 green test image."""
    return solid_image(200, 100, (0, 255, 0))


@pytest.fixture
def loader(image_a, image_b):
    return InMemoryImageLoader(
        {"https://img.test/a.png": image_a, "https://img.test/b.png": image_b}
    )


@pytest.fixture
def deferred_loader():
    return DeferredImageLoader()


@pytest.fixture
def session(loader):
    """Session with image A installed as background."""
    from caption_editor.core.editing import EditingSession

    editing_session = EditingSession(loader)
    editing_session.set_source_image("https://img.test/a.png")
    yield editing_session
    editing_session.close()


@pytest.fixture
def factory():
    from caption_editor.core.editing import ObjectFactory

    return ObjectFactory()
