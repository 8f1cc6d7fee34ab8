"""
Tests for public/secret affiliation merging.

The merged secret view projects public tags as virtual entries; any
mutation of a virtual reifies it into the secret list.
"""

import pytest

from dossier.state.schema import (
    Affiliation,
    Character,
    Layer,
    SecretProfile,
    ViewMode,
    VirtualAffiliation,
)
from dossier.systems.affiliations import (
    add_affiliation,
    count_virtual,
    effective_list,
    move_affiliation,
    remove_affiliation,
    reorder,
    set_rank,
    toggle_hidden,
    toggle_strikethrough,
)
from dossier.systems.errors import (
    AffiliationNotFoundError,
    DuplicateAffiliationError,
    EditorError,
    EmptyNameError,
    ReorderError,
)

PUBLIC_EDIT = ViewMode.editing(Layer.PUBLIC)
SECRET_EDIT = ViewMode.editing(Layer.SECRET)


def secret_names(character: Character) -> list[str]:
    if character.secret_profile is None or character.secret_profile.affiliations is None:
        return []
    return [a.name for a in character.secret_profile.affiliations]


def secret_ids(character: Character) -> list[str]:
    if character.secret_profile is None or character.secret_profile.affiliations is None:
        return []
    return [a.id for a in character.secret_profile.affiliations]


class TestEffectiveList:
    """Test which tag list each mode sees."""

    def test_public_edit_returns_public_list_itself(self, spy):
        """Editing the public layer returns the very same list object."""
        result = effective_list(spy, PUBLIC_EDIT)

        assert result is spy.affiliations
        assert not any(entry.is_virtual for entry in result)

    def test_view_unrevealed_returns_public(self, spy):
        result = effective_list(spy, ViewMode.viewing(revealed=False))

        assert result is spy.affiliations

    def test_secret_edit_lists_secret_then_virtuals(self, spy):
        """Secret entries come first, then projections of unshadowed public tags."""
        result = effective_list(spy, SECRET_EDIT)

        assert [e.name for e in result] == ["City Watch", "Crown Intelligence", "Innkeepers"]
        assert isinstance(result[2], VirtualAffiliation)
        assert result[2].from_public_id == "pub-inn"
        assert result[2].rank == "Member"
        assert result[2].is_hidden is False

    def test_virtual_count_matches_unshadowed_public_names(self, spy):
        result = effective_list(spy, SECRET_EDIT)

        public = {a.name for a in spy.affiliations}
        secret = set(secret_names(spy))
        assert count_virtual(result) == len(public - secret)

    def test_secret_entry_shadows_public_of_same_name(self, spy):
        """City Watch shows the secret rank, never the public one."""
        result = effective_list(spy, SECRET_EDIT)

        watch = [e for e in result if e.name == "City Watch"]
        assert len(watch) == 1
        assert watch[0].rank == "Handler"
        assert not watch[0].is_virtual

    def test_no_secret_profile_projects_every_public_tag(self, thief):
        result = effective_list(thief, SECRET_EDIT)

        assert len(result) == 1
        assert result[0].is_virtual
        assert result[0].name == "Thieves' Guild"

    def test_view_revealed_filters_hidden(self, spy):
        """Hidden entries show while editing but not while viewing."""
        spy.secret_profile.affiliations[0].is_hidden = True

        editing = effective_list(spy, SECRET_EDIT)
        viewing = effective_list(spy, ViewMode.viewing(revealed=True))

        assert "City Watch" in [e.name for e in editing]
        assert "City Watch" not in [e.name for e in viewing]

    def test_reading_does_not_mutate(self, spy):
        before = spy.model_dump()

        effective_list(spy, SECRET_EDIT)
        effective_list(spy, ViewMode.viewing(revealed=True))

        assert spy.model_dump() == before


class TestAddAffiliation:
    """Test adding tags."""

    def test_add_to_public(self, thief):
        added = add_affiliation(thief, Layer.PUBLIC, "  Silver Hand  ", rank=" Squire ")

        assert added.name == "Silver Hand"
        assert added.rank == "Squire"
        assert [a.name for a in thief.affiliations] == ["Thieves' Guild", "Silver Hand"]

    def test_add_to_secret_keeps_untouched_virtuals_unpersisted(self, thief):
        """Adding a secret tag stores only real entries."""
        add_affiliation(thief, Layer.SECRET, "Silver Hand")

        assert secret_names(thief) == ["Silver Hand"]
        merged = effective_list(thief, SECRET_EDIT)
        assert [e.name for e in merged] == ["Silver Hand", "Thieves' Guild"]
        assert merged[1].is_virtual

    def test_duplicate_rejected_without_change(self, thief):
        before = thief.model_dump()

        with pytest.raises(DuplicateAffiliationError):
            add_affiliation(thief, Layer.PUBLIC, "Thieves' Guild")

        assert thief.model_dump() == before

    def test_duplicate_of_virtual_rejected_on_secret(self, thief):
        """Public names count as present in the merged secret list."""
        with pytest.raises(DuplicateAffiliationError):
            add_affiliation(thief, Layer.SECRET, "Thieves' Guild")

        assert thief.secret_profile is None

    def test_names_are_case_sensitive(self, thief):
        add_affiliation(thief, Layer.PUBLIC, "thieves' guild")

        assert len(thief.affiliations) == 2

    def test_blank_name_rejected(self, thief):
        with pytest.raises(EmptyNameError):
            add_affiliation(thief, Layer.SECRET, "   ")

        assert thief.secret_profile is None

    def test_blank_rank_stored_as_none(self, thief):
        added = add_affiliation(thief, Layer.PUBLIC, "Harbor Crew", rank="  ")

        assert added.rank is None


class TestReification:
    """Test mutations on virtual entries."""

    def test_mutating_virtual_adds_exactly_one_real_id(self, spy):
        before = secret_ids(spy)

        toggle_strikethrough(spy, Layer.SECRET, "Innkeepers")

        after = secret_ids(spy)
        assert len(after) == len(before) + 1
        assert len(set(after)) == len(after)
        assert "pub-inn" not in after

    def test_reified_entry_keeps_fields(self, spy):
        reified = set_rank(spy, Layer.SECRET, "Innkeepers", "Owner")

        assert isinstance(reified, Affiliation)
        assert reified.name == "Innkeepers"
        assert reified.rank == "Owner"
        # Public entry is untouched
        assert spy.affiliations[0].rank == "Member"

    def test_each_reification_gets_fresh_id(self, thief):
        thief.affiliations.append(Affiliation(id="pub-docks", name="Dockhands"))

        toggle_strikethrough(thief, Layer.SECRET, "Thieves' Guild")
        toggle_strikethrough(thief, Layer.SECRET, "Dockhands")

        ids = secret_ids(thief)
        assert len(ids) == 2
        assert len(set(ids)) == 2
        assert not {"pub-guild", "pub-docks"} & set(ids)

    def test_touched_virtual_is_persisted(self, thief):
        """Scenario: add Silver Hand, and also touch the guild."""
        add_affiliation(thief, Layer.SECRET, "Silver Hand")
        toggle_strikethrough(thief, Layer.SECRET, "Thieves' Guild")

        assert secret_names(thief) == ["Silver Hand", "Thieves' Guild"]
        guild = thief.secret_profile.affiliations[1]
        assert guild.is_strikethrough is True

    def test_mutating_real_entry_keeps_its_id(self, spy):
        toggle_strikethrough(spy, Layer.SECRET, "Crown Intelligence")

        assert "sec-crown" in secret_ids(spy)


class TestRemoveAffiliation:
    """Test two-step removal semantics."""

    def test_remove_public_deletes(self, thief):
        result = remove_affiliation(thief, Layer.PUBLIC, "Thieves' Guild")

        assert result is None
        assert thief.affiliations == []

    def test_remove_virtual_hides_instead(self, thief):
        hidden = remove_affiliation(thief, Layer.SECRET, "Thieves' Guild")

        assert hidden is not None
        assert hidden.is_hidden is True
        assert secret_names(thief) == ["Thieves' Guild"]
        # Public fact survives
        assert [a.name for a in thief.affiliations] == ["Thieves' Guild"]
        assert effective_list(thief, ViewMode.viewing(revealed=True)) == []

    def test_remove_shadow_twice(self, spy):
        """First removal hides the shadow; second deletes it."""
        first = remove_affiliation(spy, Layer.SECRET, "City Watch")

        assert first.is_hidden is True
        assert "City Watch" in secret_names(spy)

        second = remove_affiliation(spy, Layer.SECRET, "City Watch")

        assert second is None
        assert "City Watch" not in secret_names(spy)

    def test_remove_secret_only_deletes_immediately(self, spy):
        result = remove_affiliation(spy, Layer.SECRET, "Crown Intelligence")

        assert result is None
        assert "Crown Intelligence" not in secret_names(spy)

    def test_unknown_name_raises(self, spy):
        with pytest.raises(AffiliationNotFoundError):
            remove_affiliation(spy, Layer.SECRET, "Nobody")


class TestToggles:
    """Test flag toggles."""

    def test_toggle_strikethrough_twice_restores(self, spy):
        toggle_strikethrough(spy, Layer.PUBLIC, "Innkeepers")
        toggle_strikethrough(spy, Layer.PUBLIC, "Innkeepers")

        assert spy.affiliations[0].is_strikethrough is False

    def test_toggle_hidden_on_virtual_reifies(self, thief):
        entry = toggle_hidden(thief, Layer.SECRET, "Thieves' Guild")

        assert entry.is_hidden is True
        assert secret_names(thief) == ["Thieves' Guild"]

    def test_toggle_hidden_rejected_on_public(self, thief):
        with pytest.raises(EditorError):
            toggle_hidden(thief, Layer.PUBLIC, "Thieves' Guild")


class TestReorder:
    """Test pure reorder and persisted moves."""

    def test_reorder_moves_item(self):
        assert reorder(["a", "b", "c"], 0, 2) == ["b", "c", "a"]
        assert reorder(["a", "b", "c"], 2, 0) == ["c", "a", "b"]

    def test_reorder_returns_copy(self):
        items = ["a", "b"]

        reorder(items, 0, 1)

        assert items == ["a", "b"]

    @pytest.mark.parametrize("from_index,to_index", [(-1, 0), (0, 3), (3, 0)])
    def test_reorder_out_of_bounds(self, from_index, to_index):
        with pytest.raises(ReorderError):
            reorder(["a", "b", "c"], from_index, to_index)

    def test_move_on_secret_reifies_all_virtuals(self, spy):
        entries = move_affiliation(spy, Layer.SECRET, 2, 0)

        assert [e.name for e in entries] == ["Innkeepers", "City Watch", "Crown Intelligence"]
        assert secret_names(spy) == ["Innkeepers", "City Watch", "Crown Intelligence"]
        assert count_virtual(effective_list(spy, SECRET_EDIT)) == 0

    def test_move_on_public(self, spy):
        move_affiliation(spy, Layer.PUBLIC, 1, 0)

        assert [a.name for a in spy.affiliations] == ["City Watch", "Innkeepers"]

    def test_failed_move_leaves_state(self, spy):
        before = spy.model_dump()

        with pytest.raises(ReorderError):
            move_affiliation(spy, Layer.SECRET, 0, 9)

        assert spy.model_dump() == before


class TestScenario:
    """Character X walkthrough."""

    def test_guild_stays_virtual_when_untouched(self):
        character = Character(
            id="x",
            campaign_id="c",
            name="X",
            affiliations=[Affiliation(name="Thieves' Guild")],
        )

        viewed = effective_list(character, ViewMode.viewing(revealed=False))
        assert [(e.name, e.is_hidden) for e in viewed] == [("Thieves' Guild", False)]

        add_affiliation(character, Layer.SECRET, "Silver Hand")

        assert isinstance(character.secret_profile, SecretProfile)
        assert secret_names(character) == ["Silver Hand"]
