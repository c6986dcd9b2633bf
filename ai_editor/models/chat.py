"""Chat data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .edit import Edit


class ChatRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Single message of a conversation."""

    role: ChatRole
    content: str


class Suggestion(BaseModel):
    """Reply of the suggestion service: free text plus proposed edits."""

    text: str
    edits: List[Edit] = []


class ChatRequest(BaseModel):
    """Chat request from the client."""

    message: str = Field(min_length=1)
    session_id: Optional[str] = None


class ChatResponse(BaseModel):
    """Chat response with the assistant's text and proposed edits."""

    message: str
    edits: List[Edit]
    session_id: str
