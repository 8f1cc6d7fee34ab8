"""
Secret-visibility state for a viewing session.

Two independent mechanisms:
- Secret reveal: session-wide override OR a per-character flag.
  The override wins and cannot be locally suppressed.
- One-way reveals: blurred true names and secret extra files stay
  masked until the viewer reveals them, and cannot be re-hidden.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..state.schema import Character, Layer, ViewMode


@dataclass
class SessionOverride:
    """Global reveal switch for the whole session."""
    enabled: bool = False


@dataclass
class PerEntityReveal:
    """Per-character reveal flags."""
    flags: dict[str, bool] = field(default_factory=dict)

    def get(self, entity_id: str) -> bool:
        return self.flags.get(entity_id, False)

    def set(self, entity_id: str, revealed: bool) -> None:
        self.flags[entity_id] = revealed


class RevealGate:
    """
    Answers "is this character's secret layer visible right now?".

    Callers never thread raw booleans around; they ask is_revealed(id)
    or mode_for(...) instead.
    """

    def __init__(
        self,
        override: SessionOverride | None = None,
        per_entity: PerEntityReveal | None = None,
    ):
        self.override = override or SessionOverride()
        self.per_entity = per_entity or PerEntityReveal()
        self._revealed_names: set[str] = set()
        self._revealed_files: set[str] = set()

    # -------------------------------------------------------------------------
    # Secret layer
    # -------------------------------------------------------------------------

    def is_revealed(self, character_id: str) -> bool:
        return self.override.enabled or self.per_entity.get(character_id)

    def set_global(self, enabled: bool) -> None:
        self.override.enabled = enabled

    def toggle(self, character_id: str) -> bool:
        """
        Flip the per-character flag. Returns the effective state.

        No-op while the session override is on.
        """
        if self.override.enabled:
            return True
        self.per_entity.set(character_id, not self.per_entity.get(character_id))
        return self.is_revealed(character_id)

    def mode_for(
        self,
        character_id: str,
        is_editing: bool = False,
        layer: Layer = Layer.PUBLIC,
    ) -> ViewMode:
        return ViewMode(
            is_editing=is_editing,
            active_layer=layer,
            is_secret_revealed=self.is_revealed(character_id),
        )

    # -------------------------------------------------------------------------
    # One-way reveals
    # -------------------------------------------------------------------------

    def is_name_obscured(self, character: Character, is_editing: bool = False) -> bool:
        """True name stays blurred behind a non-empty alias until revealed."""
        if is_editing or not character.is_name_blurred:
            return False
        if not (character.alias or "").strip():
            return False
        return character.id not in self._revealed_names

    def reveal_name(self, character_id: str) -> None:
        self._revealed_names.add(character_id)

    def is_file_revealed(self, file_id: str) -> bool:
        return file_id in self._revealed_files

    def reveal_file(self, file_id: str) -> None:
        self._revealed_files.add(file_id)

    @property
    def revealed_file_ids(self) -> frozenset[str]:
        return frozenset(self._revealed_files)
