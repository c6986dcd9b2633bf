"""Edit-application engine: line buffer, planner, reconciler and orchestrator."""

from ai_editor.editing.errors import (
    EditError,
    DeleteMismatchError,
    FileNotFoundForDeletionError,
)
from ai_editor.editing.line_buffer import LineBuffer
from ai_editor.editing.planner import plan_edits
from ai_editor.editing.reconciler import FileReconciler
from ai_editor.editing.orchestrator import EditBatchOrchestrator, group_by_file

__all__ = [
    'EditError',
    'DeleteMismatchError',
    'FileNotFoundForDeletionError',
    'LineBuffer',
    'plan_edits',
    'FileReconciler',
    'EditBatchOrchestrator',
    'group_by_file',
]
