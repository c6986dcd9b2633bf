"""Data models for the AI repository editor."""

from .chat import ChatMessage, ChatRequest, ChatResponse, ChatRole, Suggestion
from .edit import (
    ApplyEditsRequest,
    ApplyEditsResponse,
    Edit,
    EditAction,
    ErrorResponse,
    FileEditResult,
    ReconcileAction,
)
from .repository import (
    CommitResult,
    FileContentResponse,
    InitRepositoryRequest,
    NodeType,
    RepositoryStatus,
    StoredFile,
    TreeNode,
)

__all__ = [
    # Edit models
    "Edit",
    "EditAction",
    "ApplyEditsRequest",
    "ApplyEditsResponse",
    "ReconcileAction",
    "FileEditResult",
    "ErrorResponse",
    # Repository models
    "StoredFile",
    "CommitResult",
    "NodeType",
    "TreeNode",
    "RepositoryStatus",
    "FileContentResponse",
    "InitRepositoryRequest",
    # Chat models
    "ChatRole",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Suggestion",
]
