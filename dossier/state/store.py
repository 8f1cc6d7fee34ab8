"""
Dossier storage abstraction.

Separates persistence from the editing core for testability.
"""

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import Campaign, Character

logger = logging.getLogger(__name__)


@runtime_checkable
class DossierStore(Protocol):
    """
    Abstract storage interface for characters and campaigns.

    Implementations:
    - JsonDossierStore: File-based persistence (production)
    - MemoryDossierStore: In-memory storage (testing)
    """

    def save_character(self, character: Character) -> None:
        """Persist a finished character as a whole record."""
        ...

    def load_character(self, character_id: str) -> Character | None:
        """Load a character by ID. Returns None if not found."""
        ...

    def delete_character(self, character_id: str) -> bool:
        """Delete a character. Returns True if deleted."""
        ...

    def list_characters(self, campaign_id: str | None = None) -> list[Character]:
        """All characters, optionally limited to one campaign."""
        ...

    def exists(self, character_id: str) -> bool:
        ...

    def save_campaign(self, campaign: Campaign) -> None:
        ...

    def load_campaign(self, campaign_id: str) -> Campaign | None:
        ...

    def list_campaigns(self) -> list[Campaign]:
        ...


class JsonDossierStore:
    """
    File-based storage using one JSON file per record.

    Layout:
        <data_dir>/characters/<id>.json
        <data_dir>/campaigns/<id>.json

    Features:
    - Backup of the previous version on save
    - Whole-record writes via temp file + replace
    """

    def __init__(self, data_dir: Path | str = "dossier_data"):
        self.data_dir = Path(data_dir)
        self.characters_dir = self.data_dir / "characters"
        self.campaigns_dir = self.data_dir / "campaigns"
        self.characters_dir.mkdir(parents=True, exist_ok=True)
        self.campaigns_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, path: Path, payload: str) -> None:
        """Write a record so readers see either the old or the new version."""
        if path.exists():
            backup = path.with_suffix(".json.bak")
            backup.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")

        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(path)

    def _read(self, path: Path, model):
        if not path.exists():
            return None
        try:
            return model.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Skipping unreadable record %s: %s", path.name, e)
            return None

    # -------------------------------------------------------------------------
    # Characters
    # -------------------------------------------------------------------------

    def save_character(self, character: Character) -> None:
        path = self.characters_dir / f"{character.id}.json"
        self._write(path, character.model_dump_json(indent=2, exclude_none=True))

    def load_character(self, character_id: str) -> Character | None:
        return self._read(self.characters_dir / f"{character_id}.json", Character)

    def delete_character(self, character_id: str) -> bool:
        path = self.characters_dir / f"{character_id}.json"
        if path.exists():
            path.unlink()
            return True
        return False

    def list_characters(self, campaign_id: str | None = None) -> list[Character]:
        """List characters sorted by most recently updated."""
        characters = []
        for f in self.characters_dir.glob("*.json"):
            character = self._read(f, Character)
            if character is None:
                continue
            if campaign_id is not None and character.campaign_id != campaign_id:
                continue
            characters.append(character)

        characters.sort(key=lambda c: c.updated_at, reverse=True)
        return characters

    def exists(self, character_id: str) -> bool:
        return (self.characters_dir / f"{character_id}.json").exists()

    # -------------------------------------------------------------------------
    # Campaigns
    # -------------------------------------------------------------------------

    def save_campaign(self, campaign: Campaign) -> None:
        path = self.campaigns_dir / f"{campaign.id}.json"
        self._write(path, campaign.model_dump_json(indent=2, exclude_none=True))

    def load_campaign(self, campaign_id: str) -> Campaign | None:
        return self._read(self.campaigns_dir / f"{campaign_id}.json", Campaign)

    def list_campaigns(self) -> list[Campaign]:
        """List campaigns sorted by name."""
        campaigns = [
            c for c in (self._read(f, Campaign) for f in self.campaigns_dir.glob("*.json"))
            if c is not None
        ]
        campaigns.sort(key=lambda c: c.name)
        return campaigns


class MemoryDossierStore:
    """
    In-memory storage for testing.

    Records are copied on the way in and out so callers never share
    instances with the store.
    """

    def __init__(self):
        self.characters: dict[str, Character] = {}
        self.campaigns: dict[str, Campaign] = {}

    def save_character(self, character: Character) -> None:
        self.characters[character.id] = character.model_copy(deep=True)

    def load_character(self, character_id: str) -> Character | None:
        character = self.characters.get(character_id)
        return character.model_copy(deep=True) if character else None

    def delete_character(self, character_id: str) -> bool:
        if character_id in self.characters:
            del self.characters[character_id]
            return True
        return False

    def list_characters(self, campaign_id: str | None = None) -> list[Character]:
        characters = [
            c.model_copy(deep=True)
            for c in self.characters.values()
            if campaign_id is None or c.campaign_id == campaign_id
        ]
        characters.sort(key=lambda c: c.updated_at, reverse=True)
        return characters

    def exists(self, character_id: str) -> bool:
        return character_id in self.characters

    def save_campaign(self, campaign: Campaign) -> None:
        self.campaigns[campaign.id] = campaign.model_copy(deep=True)

    def load_campaign(self, campaign_id: str) -> Campaign | None:
        campaign = self.campaigns.get(campaign_id)
        return campaign.model_copy(deep=True) if campaign else None

    def list_campaigns(self) -> list[Campaign]:
        return sorted(
            (c.model_copy(deep=True) for c in self.campaigns.values()),
            key=lambda c: c.name,
        )

    def clear(self) -> None:
        """Clear all records (test utility)."""
        self.characters.clear()
        self.campaigns.clear()
