"""
Tests for image loaders.
"""

import base64
import threading
from unittest.mock import Mock

import pytest
import requests

from caption_editor.core.editing import ImageLoadError
from caption_editor.core.loading import ImageLoader, ImmediateImageLoader, ThreadedImageLoader


@pytest.fixture
def image_file(tmp_path, image_a):
    path = tmp_path / "photo.png"
    path.write_bytes(image_a)
    return path


class TestFetch:
    def test_local_path(self, image_file, image_a):
        assert ImageLoader().fetch(str(image_file)) == image_a

    def test_file_uri(self, image_file, image_a):
        assert ImageLoader().fetch(image_file.as_uri()) == image_a

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError):
            ImageLoader().fetch(str(tmp_path / "missing.png"))

    def test_empty_reference(self):
        with pytest.raises(ImageLoadError):
            ImageLoader().fetch("")

    def test_base64_data_uri(self, image_a):
        ref = "data:image/png;base64," + base64.b64encode(image_a).decode("ascii")
        assert ImageLoader().fetch(ref) == image_a

    def test_plain_data_uri(self):
        assert ImageLoader().fetch("data:text/plain,hello%20there") == b"hello there"

    def test_malformed_data_uri(self):
        with pytest.raises(ImageLoadError):
            ImageLoader().fetch("data:image/png;base64")
        with pytest.raises(ImageLoadError):
            ImageLoader().fetch("data:image/png;base64,@@@")

    def test_http(self, image_a):
        response = Mock(content=image_a)
        http = Mock()
        http.get.return_value = response

        loader = ImageLoader(timeout=5, session=http)

        assert loader.fetch("https://img.test/a.png") == image_a
        http.get.assert_called_once_with("https://img.test/a.png", timeout=5.0)
        response.raise_for_status.assert_called_once()

    def test_http_failure(self):
        http = Mock()
        http.get.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(ImageLoadError):
            ImageLoader(session=http).fetch("https://img.test/a.png")

    def test_http_error_status(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        http = Mock()
        http.get.return_value = response
        with pytest.raises(ImageLoadError):
            ImageLoader(session=http).fetch("https://img.test/a.png")


class TestImmediateImageLoader:
    def test_reports_before_returning(self, image_file, image_a):
        on_loaded, on_failed = Mock(), Mock()
        ImmediateImageLoader().load(str(image_file), on_loaded, on_failed)
        on_loaded.assert_called_once_with(image_a)
        on_failed.assert_not_called()

    def test_reports_failure(self, tmp_path):
        on_loaded, on_failed = Mock(), Mock()
        ImmediateImageLoader().load(str(tmp_path / "nope.png"), on_loaded, on_failed)
        on_loaded.assert_not_called()
        assert isinstance(on_failed.call_args[0][0], ImageLoadError)

    def test_context_manager_closes_http_session(self):
        http = Mock()
        with ImmediateImageLoader(session=http) as loader:
            assert loader.http is http
        http.close.assert_called_once_with()


class TestThreadedImageLoader:
    def test_delivers_on_caller_thread(self, image_file, image_a):
        delivered = []
        loader = ThreadedImageLoader(max_workers=1)
        try:
            loader.load(
                str(image_file),
                lambda data: delivered.append((data, threading.current_thread())),
                Mock(),
            )
            assert loader.wait(timeout=10) == 1
        finally:
            loader.close()

        assert delivered == [(image_a, threading.current_thread())]
        assert loader.in_flight == 0

    def test_nothing_delivered_until_processed(self, image_file):
        on_loaded = Mock()
        loader = ThreadedImageLoader(max_workers=1)
        try:
            loader.load(str(image_file), on_loaded, Mock())
            on_loaded.assert_not_called()
            loader.wait(timeout=10)
            on_loaded.assert_called_once()
            assert loader.process_pending() == 0
        finally:
            loader.close()

    def test_failure(self, tmp_path):
        on_failed = Mock()
        loader = ThreadedImageLoader(max_workers=1)
        try:
            loader.load(str(tmp_path / "nope.png"), Mock(), on_failed)
            loader.wait(timeout=10)
        finally:
            loader.close()
        assert isinstance(on_failed.call_args[0][0], ImageLoadError)

    def test_session_with_threaded_loader(self, image_file, image_a):
        from caption_editor.core.editing import EditingSession, LoadState

        loader = ThreadedImageLoader(max_workers=2)
        with EditingSession(loader) as editing_session:
            editing_session.set_source_image(str(image_file))
            assert editing_session.load_state is LoadState.LOADING
            loader.wait(timeout=10)
            assert editing_session.load_state is LoadState.READY
            assert len(editing_session.stack) == 1
        loader.close()
