"""
AI Suggestion Service.

Asks an OpenAI-compatible chat model (DeepSeek by default) for a reply to the
user's message and extracts the structured edit list the model is instructed
to include.
"""

import json
import logging
import re
from typing import List, Optional, Sequence

from openai import (
    APIConnectionError,
    AsyncAzureOpenAI,
    AsyncOpenAI,
    OpenAIError,
    RateLimitError,
)
from pydantic import ValidationError

from ai_editor.models.chat import ChatMessage, Suggestion
from ai_editor.models.edit import Edit
from ai_editor.utils.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    create_llm_circuit_breaker,
    retry_with_backoff,
)

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an AI coding assistant working on a Git repository. When providing code changes, respond with JSON in this exact format:

{
  "files": [
    {
      "file_name": "path/to/file.js",
      "action": "insert|delete|write|delete_file",
      "line": 15,
      "content": "code to insert or delete"
    }
  ]
}

Rules:
- For "insert": add content as a new line at the specified line number
- For "delete": remove the line at the specified line number (content must match that line exactly)
- For "write": replace the entire file with content (creates the file if it doesn't exist)
- For "delete_file": delete the whole file (line and content are ignored)
- Line numbers are 1-based and refer to the current file content shown in the repository context
- Always include line numbers
- Process edits from highest to lowest line numbers
- For the same line: delete before insert
"""

_JSON_BLOCK = re.compile(r'\{[\s\S]*\}')


class SuggestionServiceError(Exception):
    """The LLM could not be reached, refused the request or returned no reply."""
    pass


def extract_edits(text: str) -> List[Edit]:
    """
    Pull the proposed edits out of a model reply.

    The outermost ``{...}`` block is parsed as JSON and its ``files`` list is
    validated entry by entry. Invalid entries are skipped; a reply without
    parseable JSON yields no edits.
    """
    match = _JSON_BLOCK.search(text)
    if not match:
        return []

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Model reply contains malformed JSON: {e}")
        return []

    files = payload.get("files") if isinstance(payload, dict) else None
    if not isinstance(files, list):
        return []

    edits = []
    for index, entry in enumerate(files):
        try:
            edits.append(Edit.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping invalid edit #{index} in model reply: {e.errors()}")

    return edits


class SuggestionService:
    """Chat completion client that returns text plus proposed edits."""

    def __init__(
        self,
        settings=None,
        client=None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        """Initialize the LLM client based on configuration."""
        if settings is None:
            from ai_editor.config import settings as app_settings
            settings = app_settings

        self.circuit_breaker = circuit_breaker or create_llm_circuit_breaker()
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens

        if client is not None:
            self.client = client
            self.model = settings.openai_model
        elif settings.azure_openai_endpoint and settings.azure_openai_api_key:
            self.client = AsyncAzureOpenAI(
                api_key=settings.azure_openai_api_key,
                api_version="2024-02-15-preview",
                azure_endpoint=settings.azure_openai_endpoint,
            )
            self.model = settings.azure_openai_deployment or "gpt-4"
            logger.info("Initialized Azure OpenAI client")
        else:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
            )
            self.model = settings.openai_model
            logger.info(f"Initialized OpenAI-compatible client for model {self.model}")

    async def complete(
        self,
        user_message: str,
        repo_context: str,
        history: Sequence[ChatMessage] = ()
    ) -> Suggestion:
        """
        Ask the model for a reply and proposed edits.

        Args:
            user_message: The user's chat message
            repo_context: Rendered repository tree and file contents
            history: Earlier messages of the session, oldest first

        Returns:
            Suggestion with the raw reply text and the parsed edits

        Raises:
            SuggestionServiceError: If the model cannot be reached
        """
        messages = self._build_messages(user_message, repo_context, history)

        try:
            text = await self.circuit_breaker.call(lambda: self._request(messages))
        except (OpenAIError, CircuitBreakerOpenError) as e:
            logger.error(f"LLM API call failed: {e}")
            raise SuggestionServiceError(f"Failed to get AI response: {e}") from e

        edits = extract_edits(text)
        logger.info(f"Model proposed {len(edits)} edits")
        return Suggestion(text=text, edits=edits)

    def _build_messages(
        self,
        user_message: str,
        repo_context: str,
        history: Sequence[ChatMessage]
    ) -> List[dict]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "system", "content": f"Current repository state:\n\n{repo_context}"},
        ]
        messages.extend({"role": message.role.value, "content": message.content} for message in history)
        messages.append({"role": "user", "content": user_message})
        return messages

    @retry_with_backoff(max_retries=3, base_delay=1.0, exceptions=(APIConnectionError, RateLimitError))
    async def _request(self, messages: List[dict]) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=False,
        )
        if not response.choices:
            raise SuggestionServiceError("Model returned no choices")
        return (response.choices[0].message.content or "").strip()
