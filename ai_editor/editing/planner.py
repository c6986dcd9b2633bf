"""Deterministic ordering of one file's edits."""

from typing import List

from ai_editor.models.edit import Edit, EditAction


def plan_edits(edits: List[Edit]) -> List[Edit]:
    """
    Order the edits of a single file for left-to-right application.

    - A delete_file edit wins outright: only the first one is returned.
    - Otherwise deletes come first, highest line number first, so removing a
      line never shifts a delete that is still pending. Ties keep input order.
    - Inserts and writes follow in their original order. Their line numbers
      refer to the buffer after the deletes.

    Args:
        edits: Unordered edits targeting the same file

    Returns:
        New list in application order
    """
    for edit in edits:
        if edit.action == EditAction.DELETE_FILE:
            return [edit]

    deletes = [edit for edit in edits if edit.action == EditAction.DELETE]
    others = [edit for edit in edits if edit.action != EditAction.DELETE]

    # sorted() is stable with reverse=True as well
    deletes = sorted(deletes, key=lambda edit: edit.line, reverse=True)

    return deletes + others
