"""
File Reconciler.

Turns one file's planned edits plus its current content in the store into a
single commit: create, update or delete.
"""

from typing import List, Optional

from ai_editor.editing.errors import EditError, FileNotFoundForDeletionError
from ai_editor.editing.line_buffer import LineBuffer
from ai_editor.models.edit import Edit, EditAction, FileEditResult, ReconcileAction
from ai_editor.models.repository import StoredFile
from ai_editor.services.content_store import ContentStore, NotFoundError, VersionConflictError
from ai_editor.utils.logging import get_logger, log_edit_result

logger = get_logger(__name__)


class FileReconciler:
    """
    Applies planned edits to one file and persists the result.

    Per-file problems (delete mismatch, missing file on delete, stale version
    token) come back as a failed ``FileEditResult`` and nothing is committed.
    Transport failures are not per-file and propagate to the caller.
    """

    def __init__(self, store: ContentStore):
        self.store = store

    async def reconcile(self, file_name: str, planned_edits: List[Edit]) -> FileEditResult:
        """
        Apply already planned edits to ``file_name``.

        Args:
            file_name: Repository-relative path
            planned_edits: Edits in application order (see ``plan_edits``)

        Returns:
            Result describing what was committed, or why nothing was

        Raises:
            TransportError: If the store cannot be reached
        """
        file_logger = logger.with_context(file_name=file_name)

        current = await self._fetch_current(file_name)

        try:
            if planned_edits and planned_edits[0].action == EditAction.DELETE_FILE:
                result = await self._delete(file_name, current)
            else:
                result = await self._write(file_name, current, planned_edits)
        except (EditError, VersionConflictError) as e:
            result = FileEditResult(
                file=file_name,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )

        log_edit_result(
            file_logger,
            file_name=file_name,
            success=result.success,
            action=result.action.value if result.action else None,
            error=result.error,
        )
        return result

    async def _fetch_current(self, file_name: str) -> Optional[StoredFile]:
        try:
            return await self.store.get_file(file_name)
        except NotFoundError:
            logger.debug(f"{file_name} does not exist yet")
            return None

    async def _delete(self, file_name: str, current: Optional[StoredFile]) -> FileEditResult:
        if current is None:
            raise FileNotFoundForDeletionError(file_name)

        try:
            commit = await self.store.delete_file(
                file_name,
                current.version_token,
                message=f"AI: delete file {file_name}",
            )
        except NotFoundError as e:
            raise FileNotFoundForDeletionError(file_name) from e
        return FileEditResult(
            file=file_name,
            success=True,
            action=ReconcileAction.DELETED,
            version_token=commit.version_token,
        )

    async def _write(
        self,
        file_name: str,
        current: Optional[StoredFile],
        planned_edits: List[Edit]
    ) -> FileEditResult:
        buffer = LineBuffer.from_text(current.content if current else "")
        for edit in planned_edits:
            buffer.apply(edit)

        new_content = buffer.to_text()
        commit = await self.store.put_file(
            file_name,
            new_content,
            current.version_token if current else None,
            message=self._commit_message(file_name, planned_edits),
        )

        return FileEditResult(
            file=file_name,
            success=True,
            action=ReconcileAction.UPDATED if current else ReconcileAction.CREATED,
            content=new_content,
            version_token=commit.version_token,
        )

    @staticmethod
    def _commit_message(file_name: str, edits: List[Edit]) -> str:
        return f"AI: {file_name} - " + ", ".join(edit.describe() for edit in edits)
