"""
View adapter for editing sessions.

Bridges the EditingSession with an editor view: entry parameters, the
caption draft style, the emoji palette, the layers log toggle and the
download action.
"""

from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Union
import logging

import numpy as np

from ..core.editing import EditingSession, EditorEvent, EventType, TextObject

logger = logging.getLogger(__name__)

EMOJI_SETS: Dict[str, List[str]] = {
    "Faces": ["😀", "😂", "😍", "😎", "🤔", "😴", "😱", "🥳"],
    "Animals": ["🐶", "🐱", "🐼", "🦁", "🐸", "🦊", "🐢", "🦄"],
    "Food": ["🍕", "🍔", "🍦", "🍩", "🍓", "🍌", "🥑", "🍰"],
    "Symbols": ["❤️", "⭐", "✨", "💯", "🔥", "🎉", "💥", "🌈"],
}


class EditorViewAdapter:
    """
    Adapter connecting EditingSession to an editor view.

    Provides a view-facing layer that:
    - Resolves the source image from the view's entry parameters
    - Keeps the caption draft style and the active emoji set
    - Translates session events to a single view refresh callback
    - Shows or hides the layers log and performs the download
    """

    def __init__(
        self,
        session: EditingSession,
        update_view_callback: Optional[Callable] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core editing session
            update_view_callback: Called with no arguments whenever the
                view should be redrawn
        """
        self.session = session
        self.update_view_callback = update_view_callback

        caption = session.cfg.CAPTION
        self._font_size = caption.FONT_SIZE
        self.text_color = caption.FILL
        self.stroke_color = caption.STROKE
        self.active_emoji_set = next(iter(EMOJI_SETS))
        self.layers_log_visible = False

        # Subscribe to session events
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        for event_type in (
            EventType.SNAPSHOT_UPDATED,
            EventType.SELECTION_CHANGED,
            EventType.IMAGE_LOADED,
            EventType.IMAGE_LOAD_FAILED,
        ):
            self.session.events.on(event_type, self._on_view_changed)

    def _on_view_changed(self, event: EditorEvent):
        """Refresh the view after any visible change."""
        if self.update_view_callback:
            self.update_view_callback()

    def open(self, entry_params: Optional[Mapping[str, str]] = None) -> bool:
        """
        Start editing the image named by the view's entry parameters.

        Falls back to the placeholder image when ``imageUrl`` is absent.
        """
        entry_params = entry_params or {}
        image_url = entry_params.get("imageUrl") or self.session.cfg.IMAGE.PLACEHOLDER_URL
        return self.session.set_source_image(image_url)

    @property
    def font_size(self) -> int:
        return self._font_size

    @font_size.setter
    def font_size(self, value):
        caption = self.session.cfg.CAPTION
        clamped = min(max(int(value), caption.MIN_FONT_SIZE), caption.MAX_FONT_SIZE)
        if clamped != int(value):
            logger.debug("Font size %s clamped to %s", value, clamped)
        self._font_size = clamped

    def add_caption(self, text: str) -> Optional[TextObject]:
        """Add a caption in the current draft style."""
        return self.session.add_caption(
            text,
            font_size=self.font_size,
            fill=self.text_color,
            stroke=self.stroke_color,
        )

    @property
    def emoji_sets(self) -> List[str]:
        return list(EMOJI_SETS)

    @property
    def emojis(self) -> List[str]:
        return list(EMOJI_SETS[self.active_emoji_set])

    def select_emoji_set(self, name: str):
        if name not in EMOJI_SETS:
            raise KeyError(f"Unknown emoji set: {name}")
        self.active_emoji_set = name

    def add_emoji(self, emoji: Union[str, int]) -> Optional[TextObject]:
        """Add a glyph, or the glyph at an index of the active set."""
        if isinstance(emoji, int):
            emoji = self.emojis[emoji]
        return self.session.add_emoji(emoji)

    def add_shape(self, kind):
        return self.session.add_shape(kind)

    def clear_canvas(self) -> int:
        return self.session.clear_overlays()

    def toggle_layers_log(self) -> bool:
        """Refresh the layers log and flip its visibility."""
        self.session.introspector.refresh()
        self.layers_log_visible = not self.layers_log_visible
        return self.layers_log_visible

    def layers_log_text(self) -> str:
        records = self.session.snapshot()
        return f"Canvas Layers ({len(records)}):\n{self.session.introspector.dump()}"

    def download(self, directory: Union[str, Path] = ".") -> Path:
        """Save the flattened canvas as ``edited-image.png``."""
        return self.session.save(directory)

    def get_visualization(self) -> np.ndarray:
        """Current canvas as an RGB array, without selection decorations."""
        return self.session.render()
