"""
Loading module - the asynchronous boundary of an editing session.
"""

from .loaders import ImageLoader, ImmediateImageLoader, ThreadedImageLoader

__all__ = [
    "ImageLoader",
    "ImmediateImageLoader",
    "ThreadedImageLoader",
]
