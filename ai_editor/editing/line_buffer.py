"""
Line-oriented view of a file's content.

A buffer is the file split on ``\n``. The empty string maps to the buffer
with no lines, so ``LineBuffer.from_text(s).to_text() == s`` for every ``s``.
"""

from typing import Iterable, List, Tuple

from ai_editor.editing.errors import DeleteMismatchError
from ai_editor.models.edit import Edit, EditAction

LINE_BREAK = "\n"


class LineBuffer:
    """Mutable, ordered sequence of lines with 1-based editing operations."""

    def __init__(self, lines: Iterable[str] = ()):
        self._lines: List[str] = list(lines)

    @classmethod
    def from_text(cls, text: str) -> "LineBuffer":
        """Split text on line breaks, keeping empty leading and trailing lines."""
        if not text:
            return cls()
        return cls(text.split(LINE_BREAK))

    def to_text(self) -> str:
        return LINE_BREAK.join(self._lines)

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineBuffer):
            return NotImplemented
        return self._lines == other._lines

    def __repr__(self) -> str:
        return f"LineBuffer({self._lines!r})"

    def insert_at(self, line: int, text: str) -> None:
        """
        Insert ``text`` so that it becomes line ``line``.

        Inserting past the end pads the gap with empty lines instead of
        failing.

        Raises:
            ValueError: If ``line`` is not positive
        """
        if line < 1:
            raise ValueError(f"Line numbers start at 1, got {line}")

        if line > len(self._lines) + 1:
            self._lines.extend([""] * (line - 1 - len(self._lines)))
            self._lines.append(text)
        else:
            self._lines.insert(line - 1, text)

    def delete_at(self, line: int, expected: str) -> None:
        """
        Remove line ``line`` if it holds exactly ``expected``.

        Raises:
            DeleteMismatchError: If the line does not exist or its text differs.
                The buffer is left unchanged.
        """
        if line < 1 or line > len(self._lines):
            raise DeleteMismatchError(line, expected, None)

        actual = self._lines[line - 1]
        if actual != expected:
            raise DeleteMismatchError(line, expected, actual)

        del self._lines[line - 1]

    def replace_all(self, text: str) -> None:
        """Discard the current lines and load ``text`` instead."""
        self._lines = LineBuffer.from_text(text)._lines

    def apply(self, edit: Edit) -> None:
        """
        Apply one edit to the buffer.

        Raises:
            DeleteMismatchError: For a delete whose expected text does not match
            ValueError: For delete_file, which is not a buffer operation
        """
        if edit.action == EditAction.INSERT:
            self.insert_at(edit.line, edit.content)
        elif edit.action == EditAction.DELETE:
            self.delete_at(edit.line, edit.content)
        elif edit.action == EditAction.WRITE:
            self.replace_all(edit.content)
        elif edit.action == EditAction.DELETE_FILE:
            raise ValueError("delete_file removes the whole file and cannot be applied to a buffer")
        else:
            raise ValueError(f"Unsupported edit action: {edit.action}")
