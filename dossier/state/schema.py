"""
Pydantic models for campaign dossier records.

Characters carry a public record plus an optional secret overlay.
Designed to serialize to JSON but structured like database tables.
"""

import time
from enum import Enum
from typing import ClassVar, Literal
from pydantic import BaseModel, Field
from uuid import uuid4


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class Layer(str, Enum):
    """Which overlay of a character's data is being read or edited."""
    PUBLIC = "public"
    SECRET = "secret"


class SystemType(str, Enum):
    DND5E = "DND5E"
    CYBERPUNK_RED = "CPRED"
    COC7 = "COC7"
    BAND_OF_BLADES = "BAND_OF_BLADES"
    OTHER = "OTHER"


class FileType(str, Enum):
    REGULAR = "REGULAR"
    COMBAT = "COMBAT"        # Carries combat_stats ratings


class CommentStyle(str, Enum):
    NOTE = "NOTE"
    STAMP = "STAMP"
    WARNING = "WARNING"
    MEMO = "MEMO"


ImageFit = Literal["cover", "contain"]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def generate_id() -> str:
    return str(uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _is_populated(value) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list)) and len(value) == 0:
        return False
    return True


# -----------------------------------------------------------------------------
# Affiliations
# -----------------------------------------------------------------------------

class Affiliation(BaseModel):
    """A persisted tag on one layer of a character."""
    is_virtual: ClassVar[bool] = False

    id: str = Field(default_factory=generate_id)
    name: str
    rank: str | None = None
    is_strikethrough: bool = False
    is_hidden: bool = False  # Secret view only: a public fact secretly suppressed


class VirtualAffiliation(BaseModel):
    """
    A public tag projected into the merged secret view.

    Has no durable id of its own. It must be reified before any
    mutation is written back to the secret layer.
    """
    is_virtual: ClassVar[bool] = True

    from_public_id: str
    name: str
    rank: str | None = None
    is_strikethrough: bool = False
    is_hidden: bool = False

    @classmethod
    def project(cls, public: Affiliation) -> "VirtualAffiliation":
        return cls(
            from_public_id=public.id,
            name=public.name,
            rank=public.rank,
            is_strikethrough=public.is_strikethrough,
        )

    def reify(self, **changes) -> Affiliation:
        """Turn this projection into a secret-layer entry with a fresh id."""
        fields = {
            "name": self.name,
            "rank": self.rank,
            "is_strikethrough": self.is_strikethrough,
            "is_hidden": self.is_hidden,
        }
        fields.update(changes)
        return Affiliation(**fields)


EffectiveAffiliation = Affiliation | VirtualAffiliation


# -----------------------------------------------------------------------------
# Files and comments
# -----------------------------------------------------------------------------

class CombatStat(BaseModel):
    name: str
    value: int = Field(default=1, ge=1, le=5)


class ExtraFile(BaseModel):
    """Additional dossier page: notes, secrets, or a combat sheet."""
    id: str = Field(default_factory=generate_id)
    title: str
    content: str = ""
    image_url: str | None = None
    use_as_portrait: bool = False
    is_secret: bool = False  # Masked in view mode until revealed
    file_type: FileType = FileType.REGULAR
    combat_stats: list[CombatStat] = Field(default_factory=list)
    image_fit: ImageFit = "cover"


class Comment(BaseModel):
    """Timestamped annotation left on a character."""
    id: str = Field(default_factory=generate_id)
    character_id: str
    user_name: str
    content: str
    style_variant: CommentStyle = CommentStyle.NOTE
    font: str | None = None
    created_at: int  # Epoch ms, date-only precision
    author_id: str | None = None  # Stable identity for edit/delete checks


# -----------------------------------------------------------------------------
# Characters
# -----------------------------------------------------------------------------

class SecretProfile(BaseModel):
    """
    Secret overlay with alternate values for a character's fields.

    Every field is optional; an overlay with nothing populated is
    equivalent to having no overlay at all.
    """
    name: str | None = None
    alias: str | None = None
    real_name: str | None = None
    image_url: str | None = None
    summary: str | None = None
    description: str | None = None
    age: str | None = None
    gender: str | None = None
    height: str | None = None
    weight: str | None = None
    appearance: str | None = None
    level_or_exp: str | None = None
    affiliations: list[Affiliation] | None = None
    extra_files: list[ExtraFile] | None = None
    comments: list[Comment] | None = None

    def is_empty(self) -> bool:
        """True if no key holds a populated value."""
        return not any(
            _is_populated(getattr(self, name)) for name in type(self).model_fields
        )


class Character(BaseModel):
    """Public character record, optionally carrying a secret overlay."""
    id: str = Field(default_factory=generate_id)
    campaign_id: str
    name: str
    alias: str | None = None
    is_name_blurred: bool = False
    real_name: str | None = None
    player_name: str | None = None
    is_npc: bool = False
    image_url: str | None = None
    image_fit: ImageFit = "cover"
    summary: str = ""

    # Bio
    description: str | None = None
    age: str | None = None
    gender: str | None = None
    height: str | None = None
    weight: str | None = None
    appearance: str | None = None
    level_or_exp: str | None = None

    # System-specific class fields
    dnd_class: str | None = None
    dnd_subclass: str | None = None
    cpred_role: str | None = None
    cpred_origin: str | None = None
    custom_class: str | None = None
    custom_subclass: str | None = None

    affiliations: list[Affiliation] = Field(default_factory=list)
    extra_files: list[ExtraFile] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    secret_profile: SecretProfile | None = None
    updated_at: int = Field(default_factory=now_ms)

    def ensure_secret_profile(self) -> SecretProfile:
        """Return the secret overlay, creating an empty one if absent."""
        if self.secret_profile is None:
            self.secret_profile = SecretProfile()
        return self.secret_profile

    def normalize_secret_profile(self) -> None:
        """Collapse an overlay with no populated keys to None."""
        if self.secret_profile is not None and self.secret_profile.is_empty():
            self.secret_profile = None


# -----------------------------------------------------------------------------
# Campaigns
# -----------------------------------------------------------------------------

class Campaign(BaseModel):
    """Campaign context. Read-only for the editing core."""
    id: str = Field(default_factory=generate_id)
    name: str
    sub_title: str | None = None
    system: SystemType = SystemType.OTHER
    logo_url: str | None = None
    background_images: list[str] = Field(default_factory=list)
    description: str | None = None
    theme: str | None = None
    alias_label: str | None = None


# -----------------------------------------------------------------------------
# Editing context
# -----------------------------------------------------------------------------

class ViewMode(BaseModel):
    """How a character is currently being looked at."""
    model_config = {"frozen": True}

    is_editing: bool = False
    active_layer: Layer = Layer.PUBLIC
    is_secret_revealed: bool = False

    @classmethod
    def editing(cls, layer: Layer) -> "ViewMode":
        return cls(is_editing=True, active_layer=layer)

    @classmethod
    def viewing(cls, revealed: bool = False) -> "ViewMode":
        return cls(is_editing=False, is_secret_revealed=revealed)

    @property
    def shows_secret(self) -> bool:
        """True when the merged secret view applies."""
        if self.is_editing:
            return self.active_layer == Layer.SECRET
        return self.is_secret_revealed


class TagItem(BaseModel):
    """Suggestion entry in the tag library."""
    model_config = {"frozen": True}

    name: str
    rank: str | None = None
