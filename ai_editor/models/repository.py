"""Repository content data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class StoredFile(BaseModel):
    """File content as read from the content store."""

    path: str
    content: str
    version_token: str
    size: int


class CommitResult(BaseModel):
    """Result of writing or deleting a file in the content store."""

    path: str
    version_token: str
    commit_id: str


class NodeType(str, Enum):
    """Tree entry type."""

    FILE = "file"
    DIR = "dir"


class TreeNode(BaseModel):
    """Entry in the repository file tree."""

    name: str
    path: str
    type: NodeType
    children: List["TreeNode"] = []


class RepositoryStatus(BaseModel):
    """Reachability and emptiness of the configured repository."""

    exists: bool
    empty: bool
    default_branch: Optional[str] = None


class FileContentResponse(BaseModel):
    """Response of the file content endpoint."""

    content: str
    path: str
    size: int


class InitRepositoryRequest(BaseModel):
    """Request to create the first file of an empty repository."""

    filename: str = "README.md"
    content: str = (
        "# AI Code Editor Project\n\n"
        "This repository was initialized by the AI Code Editor.\n\n"
        "Start by asking the AI to create or modify files!"
    )
