"""
Chatbot Data Models

Payload and metadata types exchanged by the chatbot plugins.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class Message(BaseModel):
    """An incoming user message; the payload at the start of the chatbot pipeline."""

    text: str
    user_id: str = "anonymous"
    session_id: str = "default-session"
    timestamp: datetime = Field(default_factory=datetime.now)


class Intent(BaseModel):
    """Classification of a message: greeting, question, command, farewell or unknown."""

    type: str = "unknown"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class Entity(BaseModel):
    """A piece of information extracted from a message, with its character span."""

    type: str
    value: str
    start: int
    end: int


class Response(BaseModel):
    """The bot's reply; replaces the Message payload once generated."""

    text: str
    intent: Intent = Field(default_factory=Intent)
    entities: List[Entity] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class ConversationState(BaseModel):
    """History of a session, kept in the context state between runs."""

    history: List[Message] = Field(default_factory=list)
    user_prefs: Dict[str, Any] = Field(default_factory=dict)
    last_intent: Optional[Intent] = None
