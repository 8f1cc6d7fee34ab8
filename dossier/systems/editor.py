"""
Character editing session.

Holds one draft and the current mode, and wires the layer-aware
operations (fields, affiliations, files, comments, uploads) to it.
Storage is delegated to a DossierStore; collaborators hear about
finished records through the event bus.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable

from ..state.config import DEFAULT_CONFIG, Config, load_config
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import (
    Affiliation,
    Campaign,
    Character,
    Comment,
    CommentStyle,
    EffectiveAffiliation,
    ExtraFile,
    Layer,
    SecretProfile,
    SystemType,
    TagItem,
    ViewMode,
    now_ms,
)
from ..state.store import DossierStore, JsonDossierStore
from . import affiliations, fields, files
from .comments import CommentLedger, visible_comments
from .errors import (
    DuplicateAffiliationError,
    EditorError,
    EmptyNameError,
    NotEditingError,
    UploadError,
)
from .reveal import RevealGate
from .tags import grouped_tags
from .uploads import Uploader, upload_image

logger = logging.getLogger(__name__)


# Class field defaults for a freshly created character, per game system
DEFAULT_CLASS_FIELDS: dict[SystemType, dict[str, str]] = {
    SystemType.DND5E: {"dnd_class": "Barbarian"},
    SystemType.CYBERPUNK_RED: {"cpred_role": "Rockerboy"},
    SystemType.BAND_OF_BLADES: {"custom_class": "Commander"},
}


def new_character(campaign: Campaign) -> Character:
    """Blank character for a campaign, with system-specific defaults."""
    return Character(
        campaign_id=campaign.id,
        name="",
        **DEFAULT_CLASS_FIELDS.get(campaign.system, {}),
    )


def _check_unique_names(entries: list[Affiliation] | None) -> None:
    seen: set[str] = set()
    for entry in entries or []:
        if entry.name in seen:
            raise DuplicateAffiliationError(entry.name)
        seen.add(entry.name)


class CharacterEditor:
    """
    Single-draft editor for one character at a time.

    Lifecycle:
    - open(character, campaign) -> view an existing character
    - open(None, campaign) -> start a new one in edit mode
    - start_editing() / set_layer() / ... -> mutate the draft
    - save() -> validate, normalize, store, emit
    - cancel_editing() -> drop unsaved changes
    """

    def __init__(
        self,
        store: DossierStore | Path | str = "dossier_data",
        gate: RevealGate | None = None,
        bus: EventBus | None = None,
        config: Config | None = None,
    ):
        if isinstance(store, (Path, str)):
            self.store = JsonDossierStore(store)
            config = config or load_config(store)
        else:
            self.store = store

        self.gate = gate or RevealGate()
        self.bus = bus or get_event_bus()
        self.config: Config = {**DEFAULT_CONFIG, **(config or {})}

        self.draft: Character | None = None
        self.campaign: Campaign | None = None
        self._original: Character | None = None
        self.is_editing = False
        self.layer = Layer.PUBLIC
        self.pending_uploads: set[str] = set()

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def open(self, character: Character | None, campaign: Campaign) -> Character:
        """Open a character for viewing, or a new blank one for editing."""
        self.campaign = campaign
        self.layer = Layer.PUBLIC
        self.pending_uploads.clear()

        if character is None:
            self.draft = new_character(campaign)
            self._original = None
            self.is_editing = True
        else:
            self.draft = character.model_copy(deep=True)
            self._original = character.model_copy(deep=True)
            self.is_editing = False

        return self.draft

    def close(self) -> None:
        self.draft = None
        self._original = None
        self.campaign = None
        self.is_editing = False

    def _require_draft(self) -> Character:
        if self.draft is None:
            raise EditorError("No character is open.")
        return self.draft

    def _require_editing(self, attempted: str) -> Character:
        draft = self._require_draft()
        if not self.is_editing:
            raise NotEditingError(attempted)
        return draft

    def start_editing(self) -> None:
        self._require_draft()
        self.is_editing = True

    def cancel_editing(self) -> None:
        """Discard unsaved changes. A never-saved character is closed."""
        if self._original is None:
            self.close()
            return
        self.draft = self._original.model_copy(deep=True)
        self.is_editing = False
        self.layer = Layer.PUBLIC

    def set_layer(self, layer: Layer) -> None:
        self.layer = layer

    @property
    def mode(self) -> ViewMode:
        draft = self._require_draft()
        return self.gate.mode_for(draft.id, self.is_editing, self.layer)

    # -------------------------------------------------------------------------
    # Scalar fields
    # -------------------------------------------------------------------------

    @staticmethod
    def _secret_key(public_key: str, secret_key: str | None) -> str | None:
        if secret_key is not None:
            return secret_key
        return public_key if public_key in SecretProfile.model_fields else None

    def field(self, public_key: str, secret_key: str | None = None) -> str:
        return fields.resolve(
            self._require_draft(), public_key, self._secret_key(public_key, secret_key), self.mode
        )

    def set_field(self, public_key: str, value, secret_key: str | None = None) -> None:
        draft = self._require_editing(f"set {public_key}")
        fields.write(draft, public_key, self._secret_key(public_key, secret_key), self.mode, value)

    def display_name(self) -> str:
        """Headline name; the alias stands in while the true name is blurred."""
        draft = self._require_draft()
        if self.gate.is_name_obscured(draft, self.is_editing):
            return self.field("alias")
        return self.field("name")

    def display_role(self) -> str:
        if self.campaign is None:
            return ""
        return fields.display_role(self._require_draft(), self.campaign)

    # -------------------------------------------------------------------------
    # Affiliations
    # -------------------------------------------------------------------------

    def affiliations(self) -> list[EffectiveAffiliation]:
        return affiliations.effective_list(self._require_draft(), self.mode)

    def add_affiliation(self, name: str, rank: str | None = None) -> Affiliation:
        draft = self._require_editing("add an affiliation")
        return affiliations.add_affiliation(draft, self.layer, name, rank)

    def remove_affiliation(self, name: str) -> Affiliation | None:
        draft = self._require_editing("remove an affiliation")
        return affiliations.remove_affiliation(draft, self.layer, name)

    def toggle_strikethrough(self, name: str) -> Affiliation:
        draft = self._require_editing("strike an affiliation")
        return affiliations.toggle_strikethrough(draft, self.layer, name)

    def toggle_hidden(self, name: str) -> Affiliation:
        draft = self._require_editing("hide an affiliation")
        return affiliations.toggle_hidden(draft, self.layer, name)

    def set_rank(self, name: str, rank: str | None) -> Affiliation:
        draft = self._require_editing("change a rank")
        return affiliations.set_rank(draft, self.layer, name, rank)

    def move_affiliation(self, from_index: int, to_index: int) -> list[EffectiveAffiliation]:
        draft = self._require_editing("reorder affiliations")
        return affiliations.move_affiliation(draft, self.layer, from_index, to_index)

    def assigned_tag_names(self) -> set[str]:
        """Names on the current list, shown as already added in the library."""
        return affiliations.affiliation_names(self._require_draft(), self.mode)

    def tag_suggestions(
        self,
        all_characters: list[Character] | None = None,
        all_campaigns: list[Campaign] | None = None,
    ) -> dict[str, list[TagItem]]:
        """Tag library reflecting the live draft. Defaults to the store snapshot."""
        if all_characters is None:
            all_characters = self.store.list_characters()
        if all_campaigns is None:
            all_campaigns = self.store.list_campaigns()
        return grouped_tags(
            all_characters,
            all_campaigns,
            self.draft,
            universal_label=self.config["universal_label"],
        )

    # -------------------------------------------------------------------------
    # Extra files
    # -------------------------------------------------------------------------

    def visible_files(self) -> list[ExtraFile]:
        return files.visible_files(self._require_draft(), self.mode)

    def add_file(self, title: str = "New entry", **values) -> ExtraFile:
        draft = self._require_editing("add a file")
        return files.add_extra_file(draft, self.layer, title, **values)

    def update_file(self, file_id: str, **changes) -> ExtraFile:
        draft = self._require_editing("edit a file")
        return files.update_extra_file(draft, self.layer, file_id, **changes)

    def remove_file(self, file_id: str) -> bool:
        draft = self._require_editing("remove a file")
        return files.remove_extra_file(draft, self.layer, file_id)

    def set_portrait(self, file_id: str, enabled: bool) -> None:
        draft = self._require_editing("set a portrait")
        updated = files.set_portrait(files.layer_files(draft, self.layer), file_id, enabled)
        files.replace_files(draft, self.layer, updated)

    def portrait_url(self) -> str:
        return files.display_image_url(
            self._require_draft(), self.mode, self.gate.revealed_file_ids
        )

    # -------------------------------------------------------------------------
    # Save / delete
    # -------------------------------------------------------------------------

    def save(self) -> Character:
        """
        Validate and store the draft. All-or-nothing.

        Raises EmptyNameError / DuplicateAffiliationError before anything
        is written; store errors propagate with the draft untouched.
        """
        draft = self._require_draft()
        name = (draft.name or "").strip()
        if not name:
            raise EmptyNameError()

        finished = draft.model_copy(deep=True)
        finished.name = name
        _check_unique_names(finished.affiliations)
        if finished.secret_profile is not None:
            _check_unique_names(finished.secret_profile.affiliations)
        finished.normalize_secret_profile()
        finished.updated_at = now_ms()

        self.store.save_character(finished)

        self.draft = finished
        self._original = finished.model_copy(deep=True)
        self.is_editing = False
        self.layer = Layer.PUBLIC

        logger.info("Saved character %s (%s)", finished.id, finished.name)
        self.bus.emit(EventType.CHARACTER_SAVED, character_id=finished.id, character=finished)
        return finished

    def delete(self) -> bool:
        draft = self._require_draft()
        deleted = self.store.delete_character(draft.id)
        if deleted:
            logger.info("Deleted character %s", draft.id)
            self.bus.emit(EventType.CHARACTER_DELETED, character_id=draft.id)
        self.close()
        return deleted

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    @property
    def comment_layer(self) -> Layer:
        """
        Layer comments go to.

        Only an editor of the secret layer writes secret comments. Viewers
        always comment publicly, revealed or not.
        """
        if self.is_editing:
            return self.layer
        return Layer.PUBLIC

    def comments(self) -> list[Comment]:
        return visible_comments(self._require_draft(), self.mode)

    def _apply_comment_change(self, change: Callable[[CommentLedger], object]):
        """
        Run a ledger change on a copy, persist it, then adopt it.

        Comments are written to the stored record right away, unlike the
        rest of the draft which waits for save().
        """
        draft = self._require_draft()
        layer = self.comment_layer

        working = draft.model_copy(deep=True)
        ledger = CommentLedger(working, layer, self.config)
        result = change(ledger)
        comments = list(ledger.comments)

        if self.store.exists(draft.id):
            stored = self.store.load_character(draft.id)
            if stored is not None:
                CommentLedger(stored, layer).replace_all(comments)
                stored.normalize_secret_profile()
                self.store.save_character(stored)

        for target in (draft, self._original):
            if target is not None:
                CommentLedger(target, layer).replace_all(list(comments))
        return result

    def add_comment(
        self,
        content: str,
        user_name: str | None = None,
        style: CommentStyle | str | None = None,
        font: str | None = None,
        entered_on: date | str | None = None,
        author_id: str | None = None,
    ) -> Comment:
        comment = self._apply_comment_change(
            lambda ledger: ledger.add(content, user_name, style, font, entered_on, author_id)
        )
        self.bus.emit(EventType.COMMENT_ADDED, character_id=comment.character_id, comment=comment)
        return comment

    def update_comment(
        self,
        comment: Comment,
        actor_id: str | None = None,
        entered_on: date | str | None = None,
    ) -> Comment:
        updated = self._apply_comment_change(
            lambda ledger: ledger.update(comment, actor_id, entered_on)
        )
        self.bus.emit(EventType.COMMENT_UPDATED, character_id=updated.character_id, comment=updated)
        return updated

    def delete_comment(self, comment_id: str, actor_id: str | None = None) -> bool:
        draft = self._require_draft()
        deleted = self._apply_comment_change(lambda ledger: ledger.delete(comment_id, actor_id))
        if deleted:
            self.bus.emit(EventType.COMMENT_DELETED, character_id=draft.id, comment_id=comment_id)
        return deleted

    # -------------------------------------------------------------------------
    # Uploads
    # -------------------------------------------------------------------------

    async def _upload(self, target: str, uploader: Uploader, data: bytes, filename: str) -> str:
        if target in self.pending_uploads:
            raise UploadError(f"An upload for {target} is already in progress.")

        self.pending_uploads.add(target)
        try:
            return await upload_image(uploader, data, filename, self.config["max_upload_bytes"])
        except UploadError as e:
            self.bus.emit(
                EventType.UPLOAD_FAILED,
                character_id=self._require_draft().id,
                target=target,
                error=str(e),
            )
            raise
        finally:
            self.pending_uploads.discard(target)

    async def set_image(
        self,
        uploader: Uploader,
        data: bytes,
        filename: str,
        public_key: str = "image_url",
        secret_key: str | None = None,
    ) -> str:
        """
        Upload an image into a field of the layer being edited.

        Only this field is marked pending. On failure it keeps its
        previous value.
        """
        draft = self._require_editing("upload an image")
        mode = self.mode
        url = await self._upload(f"{mode.active_layer.value}:{public_key}", uploader, data, filename)

        fields.write(draft, public_key, self._secret_key(public_key, secret_key), mode, url)
        self.bus.emit(EventType.IMAGE_UPLOADED, character_id=draft.id, field=public_key, url=url)
        return url

    async def set_file_image(
        self,
        file_id: str,
        uploader: Uploader,
        data: bytes,
        filename: str,
    ) -> str:
        """Upload an image into one extra file of the layer being edited."""
        draft = self._require_editing("upload an image")
        layer = self.layer
        url = await self._upload(f"{layer.value}:file:{file_id}", uploader, data, filename)

        files.update_extra_file(draft, layer, file_id, image_url=url)
        self.bus.emit(EventType.IMAGE_UPLOADED, character_id=draft.id, file_id=file_id, url=url)
        return url
