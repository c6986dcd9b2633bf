"""
Shared test configuration.

Sets the environment the settings module requires and provides an in-memory
ContentStore double with the same version-token rules as the real store.
"""

import os

os.environ.setdefault('REDIS_URL', 'redis://localhost:6379/0')
os.environ.setdefault('AZURE_DEVOPS_PAT', 'test_pat')
os.environ.setdefault('AZURE_DEVOPS_ORG', 'test_org')
os.environ.setdefault('AZURE_DEVOPS_PROJECT', 'test_project')
os.environ.setdefault('AZURE_DEVOPS_REPOSITORY', 'test_repo')
os.environ.setdefault('OPENAI_API_KEY', 'test_key')

from typing import Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402

from ai_editor.models.repository import (  # noqa: E402
    CommitResult,
    RepositoryStatus,
    StoredFile,
    TreeNode,
)
from ai_editor.services.azure_repos import build_tree  # noqa: E402
from ai_editor.services.content_store import (  # noqa: E402
    ContentStore,
    NotFoundError,
    VersionConflictError,
)


class InMemoryContentStore(ContentStore):
    """ContentStore double keeping files in a dict, one version per write."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = {}
        self.versions: Dict[str, str] = {}
        self.commits: List[dict] = []
        self.failures: Dict[str, Exception] = {}
        self._counter = 0
        for path, content in (files or {}).items():
            self.files[path] = content
            self.versions[path] = self._next_version()

    def _next_version(self) -> str:
        self._counter += 1
        return f"v{self._counter}"

    def fail_on(self, path: str, error: Exception) -> None:
        """Make every write or delete of ``path`` raise ``error``."""
        self.failures[path] = error

    async def get_file(self, path: str) -> StoredFile:
        if path not in self.files:
            raise NotFoundError(f"{path} not found")
        content = self.files[path]
        return StoredFile(
            path=path,
            content=content,
            version_token=self.versions[path],
            size=len(content.encode("utf-8")),
        )

    async def get_tree(self) -> List[TreeNode]:
        entries = set()
        for path in self.files:
            entries.add((path, False))
            parts = path.split("/")[:-1]
            for depth in range(1, len(parts) + 1):
                entries.add(("/".join(parts[:depth]), True))
        return build_tree(list(entries))

    async def put_file(self, path, content, version_token, message) -> CommitResult:
        if path in self.failures:
            raise self.failures[path]
        if version_token is None and path in self.files:
            raise VersionConflictError(f"{path} already exists")
        if version_token is not None and self.versions.get(path) != version_token:
            raise VersionConflictError(f"{path} has been updated by another client")

        self.files[path] = content
        self.versions[path] = self._next_version()
        self.commits.append({"op": "put", "path": path, "message": message, "base": version_token})
        return CommitResult(path=path, version_token=self.versions[path], commit_id=self.versions[path])

    async def delete_file(self, path, version_token, message) -> CommitResult:
        if path in self.failures:
            raise self.failures[path]
        if path not in self.files:
            raise NotFoundError(f"{path} not found")
        if self.versions[path] != version_token:
            raise VersionConflictError(f"{path} has been updated by another client")

        del self.files[path]
        del self.versions[path]
        commit_id = self._next_version()
        self.commits.append({"op": "delete", "path": path, "message": message, "base": version_token})
        return CommitResult(path=path, version_token=commit_id, commit_id=commit_id)

    async def get_status(self) -> RepositoryStatus:
        return RepositoryStatus(
            exists=True,
            empty=not self.files,
            default_branch="main" if self.files else None,
        )


@pytest.fixture
def empty_store() -> InMemoryContentStore:
    """Store for a repository with no files."""
    return InMemoryContentStore()


@pytest.fixture
def store() -> InMemoryContentStore:
    """Store with a few files."""
    return InMemoryContentStore({
        "a.txt": "one\ntwo\nthree",
        "README.md": "# Project",
        "src/app.py": "print('hi')\n",
    })


@pytest.fixture
def make_store():
    """Factory for stores with custom files."""
    return InMemoryContentStore
