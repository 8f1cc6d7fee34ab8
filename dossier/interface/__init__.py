"""Terminal inspection for dossier records."""

from .panels import render_character_card, render_tag_library

__all__ = ["render_character_card", "render_tag_library"]
