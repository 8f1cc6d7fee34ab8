"""
Scalar field resolution across the public and secret layers.

Pure functions over a Character and a ViewMode. List-valued fields
(affiliations, files, comments) have their own modules.
"""

from __future__ import annotations

from ..state.schema import (
    Campaign,
    Character,
    Layer,
    SecretProfile,
    SystemType,
    ViewMode,
)
from .errors import NotEditingError

SCALAR_TYPES = (str, int, float, bool)


def _as_text(value) -> str:
    if value is None or not isinstance(value, SCALAR_TYPES):
        return ""
    return value if isinstance(value, str) else str(value)


def _secret_value(character: Character, secret_key: str | None):
    if secret_key is None or character.secret_profile is None:
        return None
    return getattr(character.secret_profile, secret_key, None)


def _is_present(value) -> bool:
    return value is not None and value != ""


def resolve(
    character: Character,
    public_key: str,
    secret_key: str | None,
    mode: ViewMode,
) -> str:
    """
    Effective value of one scalar field for the given mode.

    - Editing the secret layer shows the secret value verbatim, even if empty.
    - Editing the public layer shows the public value.
    - Viewing shows the secret value when revealed and present, else public.

    Non-scalar fields resolve to "".
    """
    public = getattr(character, public_key, None)
    secret = _secret_value(character, secret_key)

    if mode.is_editing:
        if mode.active_layer == Layer.SECRET:
            return _as_text(secret)
        return _as_text(public)

    if mode.is_secret_revealed and _is_present(secret) and isinstance(secret, SCALAR_TYPES):
        return _as_text(secret)
    return _as_text(public)


def write(
    character: Character,
    public_key: str,
    secret_key: str | None,
    mode: ViewMode,
    value,
) -> None:
    """
    Write a scalar into the layer being edited.

    Secret writes create the overlay on demand. A field without a secret
    counterpart (secret_key=None) is always written publicly.
    """
    if not mode.is_editing:
        raise NotEditingError(f"set {public_key}")

    if mode.active_layer == Layer.SECRET and secret_key is not None:
        if secret_key not in SecretProfile.model_fields:
            raise ValueError(f"Unknown secret field: {secret_key}")
        setattr(character.ensure_secret_profile(), secret_key, value)
        return

    if public_key not in Character.model_fields:
        raise ValueError(f"Unknown field: {public_key}")
    setattr(character, public_key, value)


def display_role(character: Character, campaign: Campaign) -> str:
    """Class/role line for the campaign's game system."""
    if campaign.system == SystemType.DND5E:
        return character.dnd_class or ""
    if campaign.system == SystemType.CYBERPUNK_RED:
        return character.cpred_role or ""
    return character.custom_class or ""
