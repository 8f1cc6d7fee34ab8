"""
Affiliation (tag) merging between the public and secret layers.

The secret layer never copies public tags up front. Instead, the merged
secret view projects every public tag that the secret list does not
already name as a VirtualAffiliation. A virtual entry only becomes a
real secret entry (reified, with its own id) when it is mutated, so:

- untouched public tags stay single-sourced in the public list
- the secret layer can shadow a tag (same name, different rank/flags)
- the secret layer can hide a public tag without deleting it
- secret-only tags extend the list

All mutations build a new list and assign it in one step; a rejected
operation leaves the character untouched.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from ..state.schema import (
    Affiliation,
    Character,
    EffectiveAffiliation,
    Layer,
    ViewMode,
    VirtualAffiliation,
)
from .errors import (
    AffiliationNotFoundError,
    DuplicateAffiliationError,
    EditorError,
    EmptyNameError,
    ReorderError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Reading
# -----------------------------------------------------------------------------

def _secret_entries(character: Character) -> list[Affiliation]:
    profile = character.secret_profile
    if profile is None or not profile.affiliations:
        return []
    return profile.affiliations


def effective_list(character: Character, mode: ViewMode) -> list[EffectiveAffiliation]:
    """
    Tag list to show or edit for the given mode.

    Editing the public layer (or viewing unrevealed) returns the public
    list itself. Otherwise returns the secret entries followed by virtual
    projections of public tags the secret list does not name. Hidden
    entries are dropped when viewing.
    """
    public = character.affiliations
    if not mode.shows_secret:
        return public

    secret = _secret_entries(character)
    secret_names = {entry.name for entry in secret}

    merged: list[EffectiveAffiliation] = list(secret)
    for entry in public:
        if entry.name not in secret_names:
            merged.append(VirtualAffiliation.project(entry))

    if not mode.is_editing:
        merged = [entry for entry in merged if not entry.is_hidden]
    return merged


def affiliation_names(character: Character, mode: ViewMode) -> set[str]:
    """Names already present, for marking tag suggestions as added."""
    return {entry.name for entry in effective_list(character, mode)}


def count_virtual(entries: list[EffectiveAffiliation]) -> int:
    return sum(1 for entry in entries if entry.is_virtual)


# -----------------------------------------------------------------------------
# Internal helpers
# -----------------------------------------------------------------------------

def _working_list(character: Character, layer: Layer) -> list[EffectiveAffiliation]:
    return effective_list(character, ViewMode.editing(layer))


def _persist(character: Character, layer: Layer, entries: list[EffectiveAffiliation]) -> None:
    """Write a layer's list back. Virtual entries are not stored."""
    if layer == Layer.PUBLIC:
        character.affiliations = list(entries)
        return
    real = [entry for entry in entries if not entry.is_virtual]
    character.ensure_secret_profile().affiliations = real


def _index_of(entries: list[EffectiveAffiliation], name: str) -> int:
    wanted = name.strip()
    for index, entry in enumerate(entries):
        if entry.name == wanted:
            return index
    raise AffiliationNotFoundError(wanted)


def _replace(
    entries: list[EffectiveAffiliation], index: int, **changes
) -> list[EffectiveAffiliation]:
    """Copy of entries with one item updated, reifying it if virtual."""
    target = entries[index]
    if target.is_virtual:
        updated = target.reify(**changes)
    else:
        updated = target.model_copy(update=changes)
    return entries[:index] + [updated] + entries[index + 1:]


def _shadows_public(character: Character, name: str) -> bool:
    return any(entry.name == name for entry in character.affiliations)


def _clean_rank(rank: str | None) -> str | None:
    if rank is None:
        return None
    rank = rank.strip()
    return rank or None


# -----------------------------------------------------------------------------
# Mutations
# -----------------------------------------------------------------------------

def add_affiliation(
    character: Character,
    layer: Layer,
    name: str,
    rank: str | None = None,
) -> Affiliation:
    """
    Append a new real tag to the layer.

    Rejected if the trimmed name is blank or already present in the
    layer's effective list (virtual projections included).
    """
    clean = (name or "").strip()
    if not clean:
        raise EmptyNameError("affiliation")

    entries = _working_list(character, layer)
    if any(entry.name == clean for entry in entries):
        logger.info("Rejected duplicate affiliation %r on %s", clean, character.id)
        raise DuplicateAffiliationError(clean)

    added = Affiliation(name=clean, rank=_clean_rank(rank))
    _persist(character, layer, entries + [added])
    return added


def remove_affiliation(
    character: Character,
    layer: Layer,
    name: str,
) -> Affiliation | None:
    """
    Remove a tag. Returns the hidden entry, or None if it was deleted.

    Public layer: deleted outright.
    Secret layer:
    - virtual projection: reified and hidden (the public fact is kept)
    - real entry shadowing a public tag: hidden first, deleted on a
      second removal
    - secret-only entry: deleted
    """
    entries = _working_list(character, layer)
    index = _index_of(entries, name)
    target = entries[index]

    if layer == Layer.SECRET:
        hide_first = target.is_virtual or (
            _shadows_public(character, target.name) and not target.is_hidden
        )
        if hide_first:
            updated = _replace(entries, index, is_hidden=True)
            _persist(character, layer, updated)
            return updated[index]

    _persist(character, layer, entries[:index] + entries[index + 1:])
    return None


def toggle_strikethrough(character: Character, layer: Layer, name: str) -> Affiliation:
    entries = _working_list(character, layer)
    index = _index_of(entries, name)
    updated = _replace(entries, index, is_strikethrough=not entries[index].is_strikethrough)
    _persist(character, layer, updated)
    return updated[index]


def toggle_hidden(character: Character, layer: Layer, name: str) -> Affiliation:
    """Flip the hidden flag. Only meaningful on the secret layer."""
    if layer != Layer.SECRET:
        raise EditorError("Hiding a tag only applies to the secret layer.")

    entries = _working_list(character, layer)
    index = _index_of(entries, name)
    updated = _replace(entries, index, is_hidden=not entries[index].is_hidden)
    _persist(character, layer, updated)
    return updated[index]


def set_rank(
    character: Character,
    layer: Layer,
    name: str,
    rank: str | None,
) -> Affiliation:
    entries = _working_list(character, layer)
    index = _index_of(entries, name)
    updated = _replace(entries, index, rank=_clean_rank(rank))
    _persist(character, layer, updated)
    return updated[index]


def reorder(items: list[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy with the item at from_index moved to to_index."""
    length = len(items)
    if not (0 <= from_index < length and 0 <= to_index < length):
        raise ReorderError(from_index, to_index, length)

    result = list(items)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def move_affiliation(
    character: Character,
    layer: Layer,
    from_index: int,
    to_index: int,
) -> list[EffectiveAffiliation]:
    """
    Move a tag within the layer's effective list and persist the order.

    On the secret layer every virtual entry is reified, since the new
    order can only be stored with real entries.
    """
    entries = reorder(_working_list(character, layer), from_index, to_index)
    if layer == Layer.SECRET:
        entries = [entry.reify() if entry.is_virtual else entry for entry in entries]
    _persist(character, layer, entries)
    return entries
