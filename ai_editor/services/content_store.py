"""
Repository content store interface.

The edit engine talks to the remote repository only through this interface,
so the backing service (Azure Repos in production, an in-memory double in
tests) can be swapped without touching the engine.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ai_editor.models.repository import CommitResult, RepositoryStatus, StoredFile, TreeNode


class ContentStoreError(Exception):
    """Base exception for content store errors."""
    pass


class NotFoundError(ContentStoreError):
    """The file or repository does not exist."""
    pass


class VersionConflictError(ContentStoreError):
    """The version token is stale or the file changed concurrently."""
    pass


class TransportError(ContentStoreError):
    """Network, authentication or rate-limit failure talking to a remote service."""
    pass


class ContentStore(ABC):
    """
    Remote, versioned file storage.

    Every read returns a version token. Writes must present the token of the
    content they are based on; a missing token means the file is created.
    """

    @abstractmethod
    async def get_file(self, path: str) -> StoredFile:
        """
        Read a file and its version token.

        Raises:
            NotFoundError: If the file does not exist
            TransportError: On any other failure
        """
        pass

    @abstractmethod
    async def get_tree(self) -> List[TreeNode]:
        """Return the nested file tree, empty for an empty repository."""
        pass

    @abstractmethod
    async def put_file(
        self,
        path: str,
        content: str,
        version_token: Optional[str],
        message: str
    ) -> CommitResult:
        """
        Create (``version_token=None``) or update a file.

        Raises:
            VersionConflictError: If the token is stale or the file already exists on create
            TransportError: On any other failure
        """
        pass

    @abstractmethod
    async def delete_file(self, path: str, version_token: str, message: str) -> CommitResult:
        """
        Delete a file.

        Raises:
            NotFoundError: If the file does not exist
            VersionConflictError: If the token is stale
            TransportError: On any other failure
        """
        pass

    @abstractmethod
    async def get_status(self) -> RepositoryStatus:
        """Report whether the repository is reachable and whether it is empty."""
        pass
