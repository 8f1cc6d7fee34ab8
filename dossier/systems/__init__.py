"""
Layer-aware editing core.

- fields: scalar resolution across public/secret layers
- affiliations: merged tag list with virtual projections
- tags: cross-campaign tag library
- reveal: secret-visibility state
- comments: per-layer comment ledger
- files: extra files and portrait override
- uploads: image upload wrapper
- editor: single-draft editing session
"""

from .affiliations import (
    add_affiliation,
    effective_list,
    move_affiliation,
    remove_affiliation,
    reorder,
    set_rank,
    toggle_hidden,
    toggle_strikethrough,
)
from .comments import CommentLedger, canonical_timestamp
from .editor import CharacterEditor, new_character
from .errors import (
    AffiliationNotFoundError,
    CommentNotFoundError,
    CommentPermissionError,
    DuplicateAffiliationError,
    EditorError,
    EmptyCommentError,
    EmptyNameError,
    NotEditingError,
    ReorderError,
    UploadError,
)
from .fields import resolve
from .reveal import PerEntityReveal, RevealGate, SessionOverride
from .tags import grouped_tags, search_tags

__all__ = [
    "add_affiliation",
    "effective_list",
    "move_affiliation",
    "remove_affiliation",
    "reorder",
    "set_rank",
    "toggle_hidden",
    "toggle_strikethrough",
    "CommentLedger",
    "canonical_timestamp",
    "CharacterEditor",
    "new_character",
    "AffiliationNotFoundError",
    "CommentNotFoundError",
    "CommentPermissionError",
    "DuplicateAffiliationError",
    "EditorError",
    "EmptyCommentError",
    "EmptyNameError",
    "NotEditingError",
    "ReorderError",
    "UploadError",
    "resolve",
    "PerEntityReveal",
    "RevealGate",
    "SessionOverride",
    "grouped_tags",
    "search_tags",
]
