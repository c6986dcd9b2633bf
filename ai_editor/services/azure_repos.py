"""
Azure Repos content store.

This module implements the ContentStore interface on top of an Azure DevOps
Git repository using the Azure DevOps Python SDK. Every write is a single
push to the configured branch.
"""

import asyncio
import re
import time
from typing import Dict, List, Optional, Tuple, Type

from azure.devops.connection import Connection
from azure.devops.exceptions import AzureDevOpsAuthenticationError
from azure.devops.v7_1.git import GitClient
from azure.devops.v7_1.git.models import (
    Change,
    GitCommitRef,
    GitPush,
    GitRefUpdate,
    GitVersionDescriptor,
    ItemContent,
)
from msrest.authentication import BasicAuthentication

from ai_editor.models.repository import (
    CommitResult,
    NodeType,
    RepositoryStatus,
    StoredFile,
    TreeNode,
)
from ai_editor.services.content_store import (
    ContentStore,
    ContentStoreError,
    NotFoundError,
    TransportError,
    VersionConflictError,
)
from ai_editor.utils.logging import get_logger, log_api_call
from ai_editor.utils.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    create_azure_devops_circuit_breaker,
)


logger = get_logger(__name__)

# Object id used as old_object_id when the branch does not exist yet
EMPTY_OBJECT_ID = "0" * 40

NOT_FOUND_MARKERS = (
    'not found', 'could not be found', 'does not exist', 'could not be resolved',
    'tf401174', 'tf401175', 'tf401019',
)
CONFLICT_MARKERS = (
    'tf401028', 'already been updated', 'already exists', 'conflict', 'stale',
)
# TF400813: not authorized, TF401027: missing permission
PERMANENT_MARKERS = ('tf400813', 'tf401027')
_PERMANENT_WORDS = re.compile(r'\b(unauthorized|forbidden)\b')


def classify_error(error: Exception) -> Type[ContentStoreError]:
    """
    Map an SDK exception to the content store error taxonomy.

    Returns:
        NotFoundError, VersionConflictError or TransportError. Anything that is
        not recognised is a TransportError and is considered retryable.
    """
    status_code = getattr(error, 'status_code', None)
    message = str(error).lower()

    if status_code == 404 or any(marker in message for marker in NOT_FOUND_MARKERS):
        return NotFoundError
    if status_code == 409 or any(marker in message for marker in CONFLICT_MARKERS):
        return VersionConflictError
    return TransportError


def is_permanent(error: Exception) -> bool:
    """Transport errors that will not succeed on retry (auth, bad request)."""
    if isinstance(error, AzureDevOpsAuthenticationError):
        return True
    status_code = getattr(error, 'status_code', None)
    if status_code in (400, 401, 403):
        return True
    message = str(error).lower()
    if any(marker in message for marker in PERMANENT_MARKERS):
        return True
    return _PERMANENT_WORDS.search(message) is not None


def to_azure_path(path: str) -> str:
    """Repository-relative path to the rooted form the SDK expects."""
    return "/" + path.strip("/")


def build_tree(entries: List[Tuple[str, bool]]) -> List[TreeNode]:
    """
    Build a nested tree from flat ``(path, is_folder)`` entries.

    Directories come before files at every level, each group sorted by name.
    """
    roots: List[TreeNode] = []
    folders: Dict[str, TreeNode] = {}

    for path, is_folder in sorted(entries, key=lambda entry: entry[0]):
        relative = path.strip("/")
        if not relative:
            continue

        parent_path, _, name = relative.rpartition("/")
        node = TreeNode(
            name=name,
            path=relative,
            type=NodeType.DIR if is_folder else NodeType.FILE,
        )
        if is_folder:
            folders[relative] = node

        parent = folders.get(parent_path)
        (parent.children if parent else roots).append(node)

    def _sort(nodes: List[TreeNode]) -> None:
        nodes.sort(key=lambda node: (node.type != NodeType.DIR, node.name))
        for node in nodes:
            _sort(node.children)

    _sort(roots)
    return roots


class AzureReposContentStore(ContentStore):
    """
    Reads and writes files in one branch of an Azure DevOps Git repository.

    The version token of a file is the branch head commit observed when the
    file was read. A write pushes one commit with that commit as
    ``old_object_id``, so Azure DevOps rejects it if the branch moved in the
    meantime.

    SDK calls are blocking; they run in the default executor behind a circuit
    breaker, and transient failures are retried with exponential backoff.
    """

    def __init__(
        self,
        organization_url: str,
        personal_access_token: str,
        project: str,
        repository: str,
        branch: str = "main",
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Initialize the store. No network call is made until first use.

        Args:
            organization_url: Azure DevOps organization URL
            personal_access_token: PAT for authentication
            project: Project containing the repository
            repository: Repository name or id
            branch: Branch that is read and pushed to
            max_retries: Maximum attempts for transient failures
            base_delay: Base delay in seconds for exponential backoff
            max_delay: Maximum delay in seconds between retries
            circuit_breaker: Optional CircuitBreaker instance
        """
        self.organization_url = organization_url
        self.pat = personal_access_token
        self.project = project
        self.repository = repository
        self.branch = branch
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.circuit_breaker = circuit_breaker or create_azure_devops_circuit_breaker()
        self._git_client: Optional[GitClient] = None

    @property
    def ref_name(self) -> str:
        return f"refs/heads/{self.branch}"

    @property
    def git_client(self) -> GitClient:
        if self._git_client is None:
            credentials = BasicAuthentication('', self.pat)
            connection = Connection(base_url=self.organization_url, creds=credentials)
            self._git_client = connection.clients.get_git_client()
            logger.info(
                f"Connected to Azure Repos {self.project}/{self.repository} "
                f"on branch {self.branch}"
            )
        return self._git_client

    async def _call(self, func, *args, method: str = "GET", **kwargs):
        """
        Run a blocking SDK call with circuit breaker, retries and logging.

        Raises:
            NotFoundError: The item, branch or repository does not exist
            VersionConflictError: The push was rejected as stale or conflicting
            TransportError: Permanent failure, or retries exhausted
        """
        async def _execute():
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, lambda: func(*args, **kwargs))

        def _counts_as_failure(error: Exception) -> bool:
            return classify_error(error) is TransportError

        endpoint = getattr(func, '__name__', 'azure_devops')
        start_time = time.time()
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                result = await self.circuit_breaker.call(_execute, is_failure=_counts_as_failure)

                log_api_call(
                    logger,
                    service="azure_devops",
                    endpoint=endpoint,
                    method=method,
                    status_code=200,
                    duration_ms=(time.time() - start_time) * 1000
                )
                if attempt > 0:
                    logger.info(f"Retry succeeded on attempt {attempt + 1}")
                return result

            except CircuitBreakerOpenError as e:
                raise TransportError(str(e)) from e

            except Exception as e:
                last_exception = e
                error_class = classify_error(e)

                if error_class is not TransportError:
                    raise error_class(str(e)) from e

                if is_permanent(e):
                    log_api_call(
                        logger,
                        service="azure_devops",
                        endpoint=endpoint,
                        method=method,
                        duration_ms=(time.time() - start_time) * 1000,
                        error=str(e)
                    )
                    raise TransportError(f"Permanent error: {e}") from e

                if attempt < self.max_retries - 1:
                    delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                    logger.warning(
                        f"Attempt {attempt + 1}/{self.max_retries} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    log_api_call(
                        logger,
                        service="azure_devops",
                        endpoint=endpoint,
                        method=method,
                        duration_ms=(time.time() - start_time) * 1000,
                        error=str(e)
                    )

        raise TransportError(
            f"Failed after {self.max_retries} attempts: {last_exception}"
        ) from last_exception

    async def _branch_head(self) -> str:
        """Commit id at the tip of the configured branch."""
        branch = await self._call(
            self.git_client.get_branch,
            repository_id=self.repository,
            name=self.branch,
            project=self.project,
        )
        return branch.commit.commit_id

    async def get_file(self, path: str) -> StoredFile:
        logger.debug(f"Retrieving file content: {path}")

        head = await self._branch_head()
        item = await self._call(
            self.git_client.get_item,
            repository_id=self.repository,
            path=to_azure_path(path),
            project=self.project,
            include_content=True,
            version_descriptor=GitVersionDescriptor(version=head, version_type="commit"),
        )

        if item.is_folder:
            raise NotFoundError(f"{path} is a folder, not a file")

        content = item.content or ""
        return StoredFile(
            path=path,
            content=content,
            version_token=head,
            size=len(content.encode("utf-8")),
        )

    async def get_tree(self) -> List[TreeNode]:
        try:
            head = await self._branch_head()
        except NotFoundError:
            logger.info(f"Branch {self.branch} does not exist yet; repository is empty")
            return []

        items = await self._call(
            self.git_client.get_items,
            repository_id=self.repository,
            project=self.project,
            scope_path="/",
            recursion_level="Full",
            version_descriptor=GitVersionDescriptor(version=head, version_type="commit"),
        )
        return build_tree([(item.path, bool(item.is_folder)) for item in items or []])

    async def put_file(
        self,
        path: str,
        content: str,
        version_token: Optional[str],
        message: str
    ) -> CommitResult:
        if version_token is None:
            change_type = "add"
            try:
                old_object_id = await self._branch_head()
            except NotFoundError:
                old_object_id = EMPTY_OBJECT_ID
        else:
            change_type = "edit"
            old_object_id = version_token

        change = Change(
            change_type=change_type,
            item={"path": to_azure_path(path)},
            new_content=ItemContent(content=content, content_type="rawtext"),
        )
        try:
            return await self._push(path, old_object_id, message, change)
        except NotFoundError as e:
            # The file vanished between read and write
            raise VersionConflictError(f"{path} changed since it was read: {e}") from e

    async def delete_file(self, path: str, version_token: str, message: str) -> CommitResult:
        change = Change(change_type="delete", item={"path": to_azure_path(path)})
        return await self._push(path, version_token, message, change)

    async def _push(
        self,
        path: str,
        old_object_id: str,
        message: str,
        change: Change
    ) -> CommitResult:
        push = GitPush(
            ref_updates=[GitRefUpdate(name=self.ref_name, old_object_id=old_object_id)],
            commits=[GitCommitRef(comment=message, changes=[change])],
        )
        result = await self._call(
            self.git_client.create_push,
            push,
            repository_id=self.repository,
            project=self.project,
            method="POST",
        )

        commit_id = result.commits[-1].commit_id
        logger.info(f"Pushed {change.change_type} of {path} as {commit_id[:8]}")
        return CommitResult(path=path, version_token=commit_id, commit_id=commit_id)

    async def get_status(self) -> RepositoryStatus:
        try:
            repository = await self._call(
                self.git_client.get_repository,
                repository_id=self.repository,
                project=self.project,
            )
        except NotFoundError:
            return RepositoryStatus(exists=False, empty=True)

        default_branch = repository.default_branch
        if default_branch:
            default_branch = default_branch.replace("refs/heads/", "")

        return RepositoryStatus(
            exists=True,
            empty=default_branch is None,
            default_branch=default_branch,
        )


def get_content_store() -> AzureReposContentStore:
    """
    Factory function to create the content store with settings from config.

    Returns:
        AzureReposContentStore configured with application settings
    """
    from ai_editor.config import settings

    return AzureReposContentStore(
        organization_url=f"https://dev.azure.com/{settings.azure_devops_org}",
        personal_access_token=settings.azure_devops_pat,
        project=settings.azure_devops_project,
        repository=settings.azure_devops_repository,
        branch=settings.azure_devops_branch,
        max_retries=settings.store_max_retries,
    )
