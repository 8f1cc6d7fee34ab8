"""
Extra files: dossier pages attached to a character.

A file can lend its image to the portrait slot. Only one file per list
may do so, and a secret file only lends its image once revealed.
"""

from __future__ import annotations

from typing import Iterable

from ..state.schema import (
    Character,
    CombatStat,
    ExtraFile,
    Layer,
    ViewMode,
)
from . import fields


def layer_files(character: Character, layer: Layer) -> list[ExtraFile]:
    if layer == Layer.PUBLIC:
        return character.extra_files
    profile = character.secret_profile
    if profile is None or profile.extra_files is None:
        return []
    return profile.extra_files


def replace_files(character: Character, layer: Layer, files: list[ExtraFile]) -> None:
    if layer == Layer.PUBLIC:
        character.extra_files = files
    else:
        character.ensure_secret_profile().extra_files = files


def visible_files(character: Character, mode: ViewMode) -> list[ExtraFile]:
    """Files for the mode. A revealed, non-empty secret list replaces the public one."""
    if mode.is_editing:
        return layer_files(character, mode.active_layer)
    secret = layer_files(character, Layer.SECRET)
    if mode.is_secret_revealed and secret:
        return secret
    return character.extra_files


def add_extra_file(
    character: Character,
    layer: Layer,
    title: str = "New entry",
    **values,
) -> ExtraFile:
    extra = ExtraFile(title=title, **values)
    replace_files(character, layer, layer_files(character, layer) + [extra])
    return extra


def update_extra_file(character: Character, layer: Layer, file_id: str, **changes) -> ExtraFile:
    """Apply field changes to one file. Raises KeyError for an unknown id."""
    files = layer_files(character, layer)
    for index, extra in enumerate(files):
        if extra.id == file_id:
            updated = ExtraFile.model_validate({**extra.model_dump(), **changes})
            replace_files(character, layer, files[:index] + [updated] + files[index + 1:])
            return updated
    raise KeyError(file_id)


def remove_extra_file(character: Character, layer: Layer, file_id: str) -> bool:
    files = layer_files(character, layer)
    remaining = [f for f in files if f.id != file_id]
    if len(remaining) == len(files):
        return False
    replace_files(character, layer, remaining)
    return True


def set_portrait(files: list[ExtraFile], file_id: str, enabled: bool) -> list[ExtraFile]:
    """Exclusive toggle: at most one file is flagged as portrait."""
    return [
        f.model_copy(update={"use_as_portrait": enabled and f.id == file_id})
        for f in files
    ]


def set_combat_stat(extra: ExtraFile, name: str, value: int) -> ExtraFile:
    """Set or add a 1..5 rating. Invalid values raise pydantic's ValidationError."""
    stat = CombatStat(name=name, value=value)
    stats = list(extra.combat_stats)
    for index, current in enumerate(stats):
        if current.name == name:
            stats[index] = stat
            break
    else:
        stats.append(stat)
    return extra.model_copy(update={"combat_stats": stats})


def active_portrait(
    files: Iterable[ExtraFile],
    revealed_file_ids: Iterable[str] = (),
) -> ExtraFile | None:
    """Last portrait-flagged file with an image that is visible."""
    revealed = set(revealed_file_ids)
    candidates = [f for f in files if f.use_as_portrait and f.image_url]
    for extra in reversed(candidates):
        if not extra.is_secret or extra.id in revealed:
            return extra
    return None


def display_image_url(
    character: Character,
    mode: ViewMode,
    revealed_file_ids: Iterable[str] = (),
) -> str:
    """Portrait override if any, else the resolved image field."""
    portrait = active_portrait(visible_files(character, mode), revealed_file_ids)
    if portrait is not None:
        return portrait.image_url
    return fields.resolve(character, "image_url", "image_url", mode)


def is_masked(extra: ExtraFile, mode: ViewMode, revealed_file_ids: Iterable[str] = ()) -> bool:
    """Secret files are masked in view mode until revealed."""
    return not mode.is_editing and extra.is_secret and extra.id not in set(revealed_file_ids)
