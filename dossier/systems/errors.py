"""Errors raised by the editing core. Every one leaves state unchanged."""


class EditorError(Exception):
    """Base error for rejected editor operations."""
    pass


class NotEditingError(EditorError):
    """Attempted a write while the character is in view mode."""
    def __init__(self, attempted: str):
        self.attempted = attempted
        super().__init__(f"Cannot {attempted} outside edit mode.")


class EmptyNameError(EditorError):
    """A name was blank after trimming."""
    def __init__(self, what: str = "character"):
        self.what = what
        super().__init__(f"A {what} name is required.")


class DuplicateAffiliationError(EditorError):
    """Tag name already present in the effective list."""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Affiliation '{name}' is already listed.")


class AffiliationNotFoundError(EditorError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No affiliation named '{name}'.")


class ReorderError(EditorError):
    """Move indices outside the current list."""
    def __init__(self, from_index: int, to_index: int, length: int):
        self.from_index = from_index
        self.to_index = to_index
        self.length = length
        super().__init__(
            f"Cannot move {from_index} -> {to_index} in a list of {length}."
        )


class EmptyCommentError(EditorError):
    def __init__(self):
        super().__init__("Comment content is empty.")


class CommentNotFoundError(EditorError):
    def __init__(self, comment_id: str):
        self.comment_id = comment_id
        super().__init__(f"No comment with id '{comment_id}'.")


class CommentPermissionError(EditorError):
    """Actor does not own the comment."""
    def __init__(self, comment_id: str):
        self.comment_id = comment_id
        super().__init__(f"Not allowed to modify comment '{comment_id}'.")


class UploadError(EditorError):
    """Image upload rejected or failed. The target field keeps its value."""
    pass
