"""
Example HTTP Servers

FastAPI applications serving the chatbot and moderation pipelines.

The chatbot server keeps each session's ConversationState between requests:
the stored state is copied into the fresh context before the run and read
back afterwards, so conversation history survives across pipeline runs while
each run still owns its context exclusively.
"""

import logging
import threading
import time
from datetime import datetime
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError

from plugpipe.chatbot import ConversationState, Entity, Intent, Message, Response, build_chatbot_pipeline
from plugpipe.chatbot.plugins import conversation_key
from plugpipe.core.config.models import AppConfig
from plugpipe.core.exceptions import PipelineStageError
from plugpipe.core.pipeline import Pipeline, PluginContext
from plugpipe.moderation import Content, ModerationResult, ModerationScore, build_moderation_pipeline
from .adapter import error_response, read_json_object


logger = logging.getLogger("plugpipe.http.servers")


class ChatRequest(BaseModel):
    text: str = ""
    user_id: str = ""
    session_id: str = ""


class ChatResponse(BaseModel):
    text: str
    intent: Intent
    entities: List[Entity]
    timestamp: datetime


class ModerationRequest(BaseModel):
    id: str = ""
    text: str = ""
    author_id: str = ""


class ModerationResponse(BaseModel):
    content_id: str
    action: str
    flagged: bool
    reason: str
    score: ModerationScore
    timestamp: datetime


class SessionStore:
    """
    Thread-safe map of session id to conversation state.

    ``get`` and ``put`` are individually atomic. A request that reads, updates
    and writes back a session must hold ``lock(session_id)`` for the whole
    sequence so concurrent turns of one conversation are applied in turn.
    """

    def __init__(self):
        self._sessions: Dict[str, ConversationState] = {}
        self._session_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        """Hold the per-session lock for the block."""
        with self._lock:
            session_lock = self._session_locks.setdefault(session_id, threading.Lock())
        with session_lock:
            yield

    def get(self, session_id: str) -> Optional[ConversationState]:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session_id: str, state: ConversationState) -> None:
        with self._lock:
            self._sessions[session_id] = state

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def health() -> Dict[str, str]:
    return {"status": "healthy", "time": datetime.now().astimezone().isoformat(timespec="seconds")}


async def _parse(request: Request, model: type):
    data = await read_json_object(request)
    return model(**data)


def create_chatbot_app(config: Optional[AppConfig] = None,
                       pipeline: Optional[Pipeline] = None,
                       sessions: Optional[SessionStore] = None) -> FastAPI:
    """
    Create the chatbot application.

    Routes:
        POST /chat: run the chatbot pipeline on ``{"text", "user_id", "session_id"}``
        GET /health: liveness check
    """
    config = config or AppConfig()
    pipeline = pipeline or build_chatbot_pipeline(config.chatbot)
    sessions = sessions if sessions is not None else SessionStore()

    app = FastAPI(title="plugpipe chatbot")
    app.state.pipeline = pipeline
    app.state.sessions = sessions

    def converse(context: PluginContext, session_id: str) -> None:
        # Runs in a worker thread; the session lock covers read, run and write-back.
        state_key = conversation_key(session_id)
        with sessions.lock(session_id):
            stored = sessions.get(session_id)
            if stored is not None:
                context.set_state(state_key, stored)

            pipeline.execute(context)

            updated = context.get_state(state_key)
            if isinstance(updated, ConversationState):
                sessions.put(session_id, updated)

    @app.post("/chat")
    async def chat(request: Request):
        try:
            chat_request = await _parse(request, ChatRequest)
        except (ValueError, ValidationError):
            return error_response(400, "Invalid request body")

        if not chat_request.text:
            return error_response(400, "Text field is required")

        message = Message(
            text=chat_request.text,
            user_id=chat_request.user_id or "anonymous",
            session_id=chat_request.session_id or "default-session",
        )
        context = PluginContext(message)

        try:
            await run_in_threadpool(converse, context, message.session_id)
        except PipelineStageError as e:
            logger.error(f"Chat pipeline failed for session {message.session_id}: {e}")
            return error_response(500, f"Pipeline error: {e}")

        response = context.get_data()
        if not isinstance(response, Response):
            return error_response(500, "Unexpected response type")

        return ChatResponse(
            text=response.text,
            intent=response.intent,
            entities=response.entities,
            timestamp=response.timestamp,
        )

    @app.get("/health")
    async def chat_health():
        return health()

    return app


def create_moderation_app(config: Optional[AppConfig] = None,
                          pipeline: Optional[Pipeline] = None) -> FastAPI:
    """
    Create the moderation application.

    Routes:
        POST /moderate: run the moderation pipeline on ``{"id", "text", "author_id"}``
        GET /health: liveness check
    """
    config = config or AppConfig()
    pipeline = pipeline or build_moderation_pipeline(config.moderation)

    app = FastAPI(title="plugpipe moderation")
    app.state.pipeline = pipeline

    @app.post("/moderate")
    async def moderate(request: Request):
        try:
            moderation_request = await _parse(request, ModerationRequest)
        except (ValueError, ValidationError):
            return error_response(400, "Invalid request body")

        if not moderation_request.text:
            return error_response(400, "Text field is required")

        content = Content(
            id=moderation_request.id or f"content-{int(time.time())}",
            text=moderation_request.text,
            author_id=moderation_request.author_id or "anonymous",
        )

        context = PluginContext(content)
        try:
            await run_in_threadpool(pipeline.execute, context)
        except PipelineStageError as e:
            logger.error(f"Moderation pipeline failed for {content.id}: {e}")
            return error_response(500, f"Pipeline error: {e}")

        result = context.get_data()
        if not isinstance(result, ModerationResult):
            return error_response(500, "Unexpected result type")

        if context.has_errors:
            logger.warning(f"Moderation of {content.id} completed with {len(context.errors)} errors")

        return ModerationResponse(
            content_id=result.content.id,
            action=result.decision.action,
            flagged=result.decision.flagged,
            reason=result.decision.reason,
            score=result.decision.score,
            timestamp=result.content.timestamp,
        )

    @app.get("/health")
    async def moderation_health():
        return health()

    return app
