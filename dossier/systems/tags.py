"""
Tag library: affiliation suggestions aggregated across campaigns.

Pure function: grouped_tags(characters, campaigns, draft) -> groups.
No state mutation, no caching. Cheap enough to recompute on every
keystroke at table-group scale.

Tags whose name occurs under two or more distinct campaigns are
"Universal" and listed once without rank, since ranks are campaign
specific. Everything else stays grouped under its campaign name.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from ..state.schema import Campaign, Character, TagItem

UNIVERSAL_LABEL = "Universal"
UNKNOWN_CAMPAIGN_LABEL = "Unknown Campaign"

TagPair = tuple[str, str | None]


def _effective_characters(
    all_characters: Iterable[Character],
    editing_draft: Character | None,
) -> list[Character]:
    """Snapshot with the live draft standing in for its stored version."""
    characters = list(all_characters)
    if editing_draft is None:
        return characters

    for index, character in enumerate(characters):
        if character.id == editing_draft.id:
            characters[index] = editing_draft
            return characters

    characters.append(editing_draft)
    return characters


def _tag_pairs(character: Character) -> set[TagPair]:
    """Trimmed (name, rank) pairs from both layers; blank names skipped."""
    entries = list(character.affiliations)
    if character.secret_profile is not None and character.secret_profile.affiliations:
        entries.extend(character.secret_profile.affiliations)

    pairs: set[TagPair] = set()
    for entry in entries:
        name = (entry.name or "").strip()
        if not name:
            continue
        rank = (entry.rank or "").strip() or None
        pairs.add((name, rank))
    return pairs


def _sort_key(pair: TagPair) -> tuple[str, str]:
    return pair[0], pair[1] or ""


def _group_key(label: str, taken) -> str:
    """Campaign group key that never replaces an earlier group."""
    key = label
    while key in taken:
        key = f"{key} (campaign)"
    return key


def grouped_tags(
    all_characters: Iterable[Character],
    all_campaigns: Iterable[Campaign],
    editing_draft: Character | None = None,
    universal_label: str = UNIVERSAL_LABEL,
) -> dict[str, list[TagItem]]:
    """
    Build the grouped tag library.

    Returns an ordered mapping: the universal group first (if any), then
    one group per campaign in campaign order, then characters whose
    campaign is unknown. Empty groups are omitted.
    A campaign named like an earlier group gets a " (campaign)" suffix.
    """
    campaign_order: list[str] = []
    campaign_names: dict[str, str] = {}
    for campaign in all_campaigns:
        campaign_names[campaign.id] = campaign.name
        if campaign.name not in campaign_order:
            campaign_order.append(campaign.name)

    pairs_by_group: dict[str, set[TagPair]] = defaultdict(set)
    for character in _effective_characters(all_characters, editing_draft):
        label = campaign_names.get(character.campaign_id, UNKNOWN_CAMPAIGN_LABEL)
        pairs_by_group[label].update(_tag_pairs(character))

    groups_by_name: dict[str, set[str]] = defaultdict(set)
    for label, pairs in pairs_by_group.items():
        for name, _rank in pairs:
            groups_by_name[name].add(label)

    universal = {name for name, labels in groups_by_name.items() if len(labels) >= 2}

    result: dict[str, list[TagItem]] = {}
    if universal:
        result[universal_label] = [TagItem(name=name) for name in sorted(universal)]

    for label in dict.fromkeys(campaign_order + [UNKNOWN_CAMPAIGN_LABEL]):
        pairs = [p for p in pairs_by_group.get(label, ()) if p[0] not in universal]
        if not pairs:
            continue
        result[_group_key(label, result)] = [
            TagItem(name=name, rank=rank)
            for name, rank in sorted(pairs, key=_sort_key)
        ]

    return result


def search_tags(groups: dict[str, list[TagItem]], term: str) -> dict[str, list[TagItem]]:
    """Case-insensitive name filter. Groups left empty are dropped."""
    needle = (term or "").strip().lower()
    if not needle:
        return dict(groups)

    filtered: dict[str, list[TagItem]] = {}
    for label, items in groups.items():
        matches = [item for item in items if needle in item.name.lower()]
        if matches:
            filtered[label] = matches
    return filtered


def tag_names(groups: dict[str, list[TagItem]]) -> set[str]:
    return {item.name for items in groups.values() for item in items}
