"""
Pytest fixtures for dossier tests.

Provides in-memory stores, a fresh event bus and sample records.
"""

import pytest
from pathlib import Path

# Add project root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from dossier.state import (
    Affiliation,
    Campaign,
    Character,
    EventBus,
    EventType,
    MemoryDossierStore,
    SecretProfile,
    SystemType,
    reset_event_bus,
)
from dossier.systems import CharacterEditor, RevealGate


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Each test gets a clean global event bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def memory_store():
    """In-memory dossier store for testing."""
    return MemoryDossierStore()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    """Every event published on the test bus, in order."""
    received = []
    for event_type in EventType:
        bus.on(event_type, received.append)
    return received


@pytest.fixture
def gate():
    return RevealGate()


@pytest.fixture
def editor(memory_store, gate, bus):
    """Editor wired to in-memory collaborators."""
    return CharacterEditor(memory_store, gate=gate, bus=bus)


@pytest.fixture
def campaign_a():
    return Campaign(id="camp-a", name="Ashen Vale", system=SystemType.DND5E)


@pytest.fixture
def campaign_b():
    return Campaign(id="camp-b", name="Neon Drift", system=SystemType.CYBERPUNK_RED)


@pytest.fixture
def thief():
    """Character X: public guild tag, no secret overlay."""
    return Character(
        id="char-x",
        campaign_id="camp-a",
        name="Wren",
        summary="A quiet fence.",
        affiliations=[Affiliation(id="pub-guild", name="Thieves' Guild")],
    )


@pytest.fixture
def spy():
    """Character with a secret overlay that shadows and extends public tags."""
    return Character(
        id="char-s",
        campaign_id="camp-a",
        name="Marta",
        alias="The Widow",
        is_name_blurred=True,
        summary="Innkeeper.",
        affiliations=[
            Affiliation(id="pub-inn", name="Innkeepers", rank="Member"),
            Affiliation(id="pub-watch", name="City Watch", rank="Informant"),
        ],
        secret_profile=SecretProfile(
            summary="Spymaster of the Crown.",
            affiliations=[
                Affiliation(id="sec-watch", name="City Watch", rank="Handler"),
                Affiliation(id="sec-crown", name="Crown Intelligence", rank="Spymaster"),
            ],
        ),
    )
