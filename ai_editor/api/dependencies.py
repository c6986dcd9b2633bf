"""
FastAPI dependency providers.

Long-lived clients are created once per process; request-scoped objects
(orchestrator, context builder) are built per request around them. Tests
replace any of these through ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from ai_editor.config import settings
from ai_editor.editing.orchestrator import EditBatchOrchestrator
from ai_editor.services.azure_repos import get_content_store
from ai_editor.services.content_store import ContentStore
from ai_editor.services.conversation import ConversationStore
from ai_editor.services.redis_client import get_redis_client
from ai_editor.services.repo_context import RepositoryContextBuilder
from ai_editor.services.suggestion_service import SuggestionService


@lru_cache
def get_store() -> ContentStore:
    return get_content_store()


@lru_cache
def get_suggestion_service() -> SuggestionService:
    return SuggestionService()


def get_conversation_store() -> ConversationStore:
    return ConversationStore(
        get_redis_client(),
        history_limit=settings.history_limit,
        ttl_seconds=settings.session_ttl_seconds,
    )


def get_orchestrator(store: ContentStore = Depends(get_store)) -> EditBatchOrchestrator:
    return EditBatchOrchestrator(store)


def get_context_builder(store: ContentStore = Depends(get_store)) -> RepositoryContextBuilder:
    return RepositoryContextBuilder(
        store,
        max_files=settings.context_max_files,
        max_file_bytes=settings.context_max_file_bytes,
    )
