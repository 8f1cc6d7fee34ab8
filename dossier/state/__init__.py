"""State management for campaign dossiers."""

from .schema import (
    Affiliation,
    VirtualAffiliation,
    EffectiveAffiliation,
    Campaign,
    Character,
    CombatStat,
    Comment,
    CommentStyle,
    ExtraFile,
    FileType,
    Layer,
    SecretProfile,
    SystemType,
    TagItem,
    ViewMode,
)
from .store import DossierStore, JsonDossierStore, MemoryDossierStore
from .event_bus import (
    EventBus,
    EventType,
    DossierEvent,
    get_event_bus,
    reset_event_bus,
)
from .config import Config, DEFAULT_CONFIG, load_config, save_config

__all__ = [
    # Schema
    "Affiliation",
    "VirtualAffiliation",
    "EffectiveAffiliation",
    "Campaign",
    "Character",
    "CombatStat",
    "Comment",
    "CommentStyle",
    "ExtraFile",
    "FileType",
    "Layer",
    "SecretProfile",
    "SystemType",
    "TagItem",
    "ViewMode",
    # Store
    "DossierStore",
    "JsonDossierStore",
    "MemoryDossierStore",
    # Event Bus
    "EventBus",
    "EventType",
    "DossierEvent",
    "get_event_bus",
    "reset_event_bus",
    # Config
    "Config",
    "DEFAULT_CONFIG",
    "load_config",
    "save_config",
]
