"""Edit and edit-result data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class EditAction(str, Enum):
    """Kind of change an edit makes."""

    INSERT = "insert"
    DELETE = "delete"
    WRITE = "write"
    DELETE_FILE = "delete_file"


LINE_ACTIONS = (EditAction.INSERT, EditAction.DELETE)

# Inserting past the end pads with empty lines; this bounds the padding
MAX_LINE = 100_000


class Edit(BaseModel):
    """
    One proposed change to a repository file.

    ``line`` is 1-based and refers to the file as it stands after the
    previously applied edits of the same file. It is required for insert and
    delete and ignored for write and delete_file.
    """

    file_name: str = Field(min_length=1)
    action: EditAction
    line: Optional[int] = Field(default=None, le=MAX_LINE)
    content: str = ""

    @model_validator(mode="after")
    def _check_line(self) -> "Edit":
        if self.action in LINE_ACTIONS and (self.line is None or self.line < 1):
            raise ValueError(f"'{self.action.value}' edits need a positive line number")
        return self

    def describe(self) -> str:
        """Short human-readable form used in commit messages."""
        if self.action in LINE_ACTIONS:
            return f"{self.action.value} at line {self.line}"
        return self.action.value


class ApplyEditsRequest(BaseModel):
    """Body of an apply-edits request."""

    edits: List[Edit]


class ReconcileAction(str, Enum):
    """What happened to a file after its edits were applied."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class FileEditResult(BaseModel):
    """Per-file outcome of applying an edit batch."""

    file: str
    success: bool
    action: Optional[ReconcileAction] = None
    content: Optional[str] = None
    version_token: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class ApplyEditsResponse(BaseModel):
    """Response of an apply-edits request."""

    success: bool
    results: List[FileEditResult]


class ErrorResponse(BaseModel):
    """Body returned when a request fails as a whole."""

    error: str
    details: Optional[str] = None
