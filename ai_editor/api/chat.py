"""
Chat REST API endpoint.
"""

from fastapi import APIRouter, Depends

from ai_editor.api.dependencies import (
    get_context_builder,
    get_conversation_store,
    get_suggestion_service,
)
from ai_editor.api.edits import error_response
from ai_editor.models.chat import ChatRequest, ChatResponse, ChatRole
from ai_editor.models.edit import ErrorResponse
from ai_editor.services.content_store import ContentStoreError
from ai_editor.services.conversation import ConversationStore
from ai_editor.services.redis_client import RedisConnectionError
from ai_editor.services.repo_context import RepositoryContextBuilder
from ai_editor.services.suggestion_service import SuggestionService, SuggestionServiceError
from ai_editor.utils.logging import get_logger, log_error_with_context

logger = get_logger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ChatResponse, responses={500: {"model": ErrorResponse}})
async def chat(
    request: ChatRequest,
    conversations: ConversationStore = Depends(get_conversation_store),
    context_builder: RepositoryContextBuilder = Depends(get_context_builder),
    suggestions: SuggestionService = Depends(get_suggestion_service),
):
    """
    Answer a chat message with text and proposed edits.

    The reply is based on the current repository content and the session's
    recent history. Nothing is applied here; the client previews the edits
    and posts them to ``/apply-edits``.
    """
    try:
        session = await conversations.load(request.session_id)
        session_logger = logger.with_context(session_id=session.session_id)

        repo_context = await context_builder.build()
        suggestion = await suggestions.complete(request.message, repo_context, session.history)

        session.add(ChatRole.USER, request.message)
        session.add(ChatRole.ASSISTANT, suggestion.text)
        await conversations.save(session)
    except (ContentStoreError, SuggestionServiceError, RedisConnectionError) as e:
        log_error_with_context(logger, f"Chat request failed: {e}", e)
        return error_response("Failed to get AI response", str(e))
    except Exception as e:
        log_error_with_context(logger, f"Unexpected error in chat request: {e}", e)
        return error_response("Failed to get AI response", "Internal server error")

    session_logger.info(f"Chat reply with {len(suggestion.edits)} proposed edits")
    return ChatResponse(
        message=suggestion.text,
        edits=suggestion.edits,
        session_id=session.session_id,
    )
