"""
Interfaces module - view adapters for the editing core.

Provides adapters to connect the core editing logic
with different front ends (desktop, Web, CLI).
"""

from .editor_adapter import EMOJI_SETS, EditorViewAdapter

__all__ = ['EMOJI_SETS', 'EditorViewAdapter']
