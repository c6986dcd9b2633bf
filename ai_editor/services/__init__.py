"""Services talking to the repository, the LLM and Redis."""

from ai_editor.services.content_store import (
    ContentStore,
    ContentStoreError,
    NotFoundError,
    VersionConflictError,
    TransportError,
)
from ai_editor.services.azure_repos import (
    AzureReposContentStore,
    get_content_store,
)
from ai_editor.services.redis_client import (
    RedisClient,
    RedisConnectionError,
    get_redis_client,
)
from ai_editor.services.conversation import (
    ConversationSession,
    ConversationStore,
)
from ai_editor.services.repo_context import RepositoryContextBuilder
from ai_editor.services.suggestion_service import (
    SuggestionService,
    SuggestionServiceError,
)

__all__ = [
    'ContentStore',
    'ContentStoreError',
    'NotFoundError',
    'VersionConflictError',
    'TransportError',
    'AzureReposContentStore',
    'get_content_store',
    'RedisClient',
    'RedisConnectionError',
    'get_redis_client',
    'ConversationSession',
    'ConversationStore',
    'RepositoryContextBuilder',
    'SuggestionService',
    'SuggestionServiceError',
]
