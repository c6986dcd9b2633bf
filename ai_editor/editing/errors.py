"""Errors raised while applying edits to a single file."""

from typing import Optional


class EditError(Exception):
    """Base exception for edits that cannot be applied to a file."""
    pass


class DeleteMismatchError(EditError):
    """The line to delete is missing or does not hold the expected text."""

    def __init__(self, line: int, expected: str, actual: Optional[str]):
        self.line = line
        self.expected = expected
        self.actual = actual
        if actual is None:
            message = f"Delete mismatch at line {line}: line does not exist (expected {expected!r})"
        else:
            message = f"Delete mismatch at line {line}: expected {expected!r}, found {actual!r}"
        super().__init__(message)


class FileNotFoundForDeletionError(EditError):
    """A delete_file edit targets a file that does not exist."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__(f"File not found: {file_name}")
