"""
Image loaders.

Fetching the source image is the only asynchronous step of an editing
session. Loaders resolve a reference (URL, data URI or path) to raw bytes
and report the outcome through completion callbacks, which always run on
the thread that drives the session.
"""

import base64
import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, unquote_to_bytes, urlparse

import requests

from ..editing.errors import ImageLoadError

logger = logging.getLogger(__name__)

LoadedCallback = Callable[[bytes], None]
FailedCallback = Callable[[Exception], None]


def _read_data_uri(ref: str) -> bytes:
    header, sep, payload = ref[len("data:"):].partition(",")
    if not sep:
        raise ImageLoadError("Malformed data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except ValueError as e:
            raise ImageLoadError(f"Malformed base64 payload: {e}") from e
    return unquote_to_bytes(payload)


class ImageLoader:
    """
    Base loader: resolves references synchronously in ``fetch``.

    Subclasses decide when ``load`` reports back.
    """

    def __init__(self, timeout: Optional[float] = None, session=None):
        self.timeout = float(timeout) if timeout is not None else None
        self.http = session if session is not None else requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def fetch(self, ref: str) -> bytes:
        """
        Resolve a reference to raw bytes.

        Raises:
            ImageLoadError: if the resource cannot be read
        """
        if not ref:
            raise ImageLoadError("Empty image reference")
        if ref.startswith("data:"):
            return _read_data_uri(ref)

        parsed = urlparse(ref)
        if parsed.scheme in ("http", "https"):
            try:
                response = self.http.get(ref, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise ImageLoadError(f"Could not fetch {ref}: {e}") from e
            return response.content

        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(ref)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageLoadError(f"Could not read {path}: {e}") from e

    def load(self, ref: str, on_loaded: LoadedCallback, on_failed: FailedCallback):
        raise NotImplementedError

    def close(self):
        self.http.close()


class ImmediateImageLoader(ImageLoader):
    """Fetches inline and reports before ``load`` returns."""

    def load(self, ref: str, on_loaded: LoadedCallback, on_failed: FailedCallback):
        try:
            data = self.fetch(ref)
        except ImageLoadError as e:
            on_failed(e)
            return
        on_loaded(data)


class ThreadedImageLoader(ImageLoader):
    """
    Fetches on a worker pool and queues the outcomes.

    Completions are handed to the callbacks only from ``process_pending``
    or ``wait``, so they run on the caller's thread, one at a time.
    """

    def __init__(self, max_workers: int = 2, timeout: Optional[float] = None, session=None):
        super().__init__(timeout=timeout, session=session)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="image-loader"
        )
        self._completed: "queue.Queue" = queue.Queue()
        self._in_flight = 0
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def load(self, ref: str, on_loaded: LoadedCallback, on_failed: FailedCallback):
        with self._lock:
            self._in_flight += 1
        future = self._executor.submit(self.fetch, ref)
        future.add_done_callback(
            lambda f: self._completed.put((f, on_loaded, on_failed))
        )

    def process_pending(self) -> int:
        """Deliver every completed load. Returns how many were delivered."""
        delivered = 0
        while True:
            try:
                item = self._completed.get_nowait()
            except queue.Empty:
                return delivered
            self._deliver(*item)
            delivered += 1

    def wait(self, timeout: Optional[float] = None) -> int:
        """Block until every in-flight load has been delivered."""
        delivered = 0
        while self.in_flight:
            try:
                item = self._completed.get(timeout=timeout)
            except queue.Empty:
                break
            self._deliver(*item)
            delivered += 1
        return delivered

    def close(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
        super().close()

    def _deliver(self, future: Future, on_loaded: LoadedCallback, on_failed: FailedCallback):
        with self._lock:
            self._in_flight -= 1
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            on_loaded(future.result())
        elif isinstance(error, ImageLoadError):
            on_failed(error)
        else:
            on_failed(ImageLoadError(str(error)))
