"""
Edit Batch Orchestrator.

Splits a flat, cross-file list of edits into per-file batches and reconciles
them one file at a time.
"""

from typing import Dict, List, Optional

from ai_editor.editing.planner import plan_edits
from ai_editor.editing.reconciler import FileReconciler
from ai_editor.models.edit import Edit, FileEditResult
from ai_editor.services.content_store import ContentStore
from ai_editor.utils.logging import get_logger
from ai_editor.utils.resilience import ErrorRecoveryManager

logger = get_logger(__name__)


def group_by_file(edits: List[Edit]) -> Dict[str, List[Edit]]:
    """Group edits by file name, keeping the order in which files first appear."""
    batches: Dict[str, List[Edit]] = {}
    for edit in edits:
        batches.setdefault(edit.file_name, []).append(edit)
    return batches


class EditBatchOrchestrator:
    """
    Applies an edit batch across files.

    Files are processed sequentially: each update is a read-then-write
    exchange of version tokens with the store. A failed file does not stop
    the others and committed files are never rolled back.
    """

    def __init__(self, store: ContentStore, reconciler: Optional[FileReconciler] = None):
        self.store = store
        self.reconciler = reconciler or FileReconciler(store)

    async def apply(self, edits: List[Edit]) -> List[FileEditResult]:
        """
        Apply all edits, one file at a time.

        Args:
            edits: Edits for any number of files

        Returns:
            One result per file, in order of first appearance

        Raises:
            TransportError: If the store fails in a way that is not specific to
                one file. Files committed before the failure stay committed.
        """
        batches = group_by_file(edits)
        logger.info(f"Applying {len(edits)} edits across {len(batches)} files")

        results: List[FileEditResult] = []
        for file_name, file_edits in batches.items():
            planned = plan_edits(file_edits)
            results.append(await self.reconciler.reconcile(file_name, planned))

        ErrorRecoveryManager.handle_partial_failure(
            operation_name="apply_edits",
            total_items=len(results),
            successful_items=sum(1 for result in results if result.success),
            errors=[f"{result.file}: {result.error}" for result in results if not result.success],
            context={"files": list(batches)},
        )
        return results
