"""
Comment ledger for one layer of one character.

Comments are entered with a date only. They are pinned to midnight of
that date in a single canonical zone (UTC unless configured) so the
same entry produces the same timestamp on every machine.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..state.config import DEFAULT_CONFIG, Config
from ..state.schema import Character, Comment, CommentStyle, Layer, ViewMode
from .errors import (
    CommentNotFoundError,
    CommentPermissionError,
    EditorError,
    EmptyCommentError,
)

logger = logging.getLogger(__name__)


def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise EditorError(f"Unknown comment timezone: {name!r}") from None


def canonical_timestamp(
    entered_on: date | str | None = None,
    zone: str = "UTC",
) -> int:
    """
    Epoch ms for midnight of the given day in the canonical zone.

    Accepts a date, a datetime (time part dropped) or an ISO
    "YYYY-MM-DD" string. None means today in that zone.
    """
    tz = _zone(zone)

    if entered_on is None:
        day = datetime.now(tz).date()
    elif isinstance(entered_on, datetime):
        day = entered_on.date()
    elif isinstance(entered_on, date):
        day = entered_on
    else:
        try:
            day = date.fromisoformat(entered_on.strip())
        except ValueError:
            raise EditorError(f"Invalid comment date: {entered_on!r}") from None

    return int(datetime.combine(day, time.min, tzinfo=tz).timestamp() * 1000)


class CommentLedger:
    """
    Add, edit and delete comments on one layer of a character.

    The public layer lives in character.comments, the secret layer in
    character.secret_profile.comments (created on first write).
    """

    def __init__(
        self,
        character: Character,
        layer: Layer = Layer.PUBLIC,
        config: Config | None = None,
    ):
        self.character = character
        self.layer = layer
        self.config: Config = {**DEFAULT_CONFIG, **(config or {})}

    @property
    def comments(self) -> list[Comment]:
        if self.layer == Layer.PUBLIC:
            return self.character.comments
        profile = self.character.secret_profile
        if profile is None or profile.comments is None:
            return []
        return profile.comments

    def replace_all(self, comments: list[Comment]) -> None:
        if self.layer == Layer.PUBLIC:
            self.character.comments = comments
        else:
            self.character.ensure_secret_profile().comments = comments

    def get(self, comment_id: str) -> Comment | None:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None

    def _require_owner(self, comment: Comment, actor_id: str | None) -> None:
        if comment.author_id is not None and comment.author_id != actor_id:
            logger.warning("Refused change to comment %s by %r", comment.id, actor_id)
            raise CommentPermissionError(comment.id)

    def add(
        self,
        content: str,
        user_name: str | None = None,
        style: CommentStyle | str | None = None,
        font: str | None = None,
        entered_on: date | str | None = None,
        author_id: str | None = None,
    ) -> Comment:
        """Create a comment dated at canonical midnight of entered_on."""
        if not (content or "").strip():
            raise EmptyCommentError()

        comment = Comment(
            character_id=self.character.id,
            user_name=(user_name or "").strip() or self.config["default_comment_author"],
            content=content,
            style_variant=CommentStyle(style or self.config["default_comment_style"]),
            font=font,
            created_at=canonical_timestamp(entered_on, self.config["comment_timezone"]),
            author_id=author_id,
        )
        self.replace_all(self.comments + [comment])
        return comment

    def update(
        self,
        comment: Comment,
        actor_id: str | None = None,
        entered_on: date | str | None = None,
    ) -> Comment:
        """Replace the comment with the same id, keeping its identity fields."""
        existing = self.get(comment.id)
        if existing is None:
            raise CommentNotFoundError(comment.id)
        self._require_owner(existing, actor_id)
        if not (comment.content or "").strip():
            raise EmptyCommentError()

        changes = {
            "id": existing.id,
            "character_id": existing.character_id,
            "author_id": existing.author_id,
        }
        if entered_on is not None:
            changes["created_at"] = canonical_timestamp(
                entered_on, self.config["comment_timezone"]
            )
        updated = comment.model_copy(update=changes)

        self.replace_all([updated if c.id == existing.id else c for c in self.comments])
        return updated

    def delete(self, comment_id: str, actor_id: str | None = None) -> bool:
        """Remove a comment by id. Returns False if it was not there."""
        existing = self.get(comment_id)
        if existing is None:
            return False
        self._require_owner(existing, actor_id)

        self.replace_all([c for c in self.comments if c.id != comment_id])
        return True

    def ordered(self) -> list[Comment]:
        """Newest first; ties keep their insertion order."""
        return sorted(self.comments, key=lambda c: c.created_at, reverse=True)


def visible_comments(character: Character, mode: ViewMode) -> list[Comment]:
    """Comments for the mode, newest first. Revealed secret comments replace public ones."""
    if mode.is_editing:
        return CommentLedger(character, mode.active_layer).ordered()
    if mode.is_secret_revealed:
        secret = CommentLedger(character, Layer.SECRET).ordered()
        if secret:
            return secret
    return CommentLedger(character).ordered()
