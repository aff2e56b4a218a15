"""
rulebot API — FastAPI endpoints.

Hosts many conversations at once. Each session owns a ConversationEngine
over its own clone of the template StateSource, so what one session learns
never leaks into another, and each session's turns are serialized by a lock.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from rulebot.config import load_config
from rulebot.engine.conversation import ConversationEngine
from rulebot.engine.factory import build_source
from rulebot.handlers.registry import HandlerRegistry, UnknownHandler, default_registry
from rulebot.models.config import BotConfig
from rulebot.models.state import StateDefinition
from rulebot.state_source.store import StateSource, UnknownState

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class SendRequest(BaseModel):
    text: str


class SessionCreated(BaseModel):
    session_id: str
    message: str
    level: str


class SendResponse(BaseModel):
    reply: str
    level: str
    message: str


@dataclass
class Session:
    engine: ConversationEngine
    lock: threading.Lock = field(default_factory=threading.Lock)


# --- Application Factory ---

def create_app(
    definition: Optional[StateDefinition] = None,
    registry: Optional[HandlerRegistry] = None,
    config: Optional[BotConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="rulebot API",
        description="Rule-driven conversational agent",
        version="0.1.0",
    )

    cfg = config or BotConfig()
    template: StateSource = build_source(cfg, definition)
    handlers = registry or default_registry(cfg)
    sessions: Dict[str, Session] = {}

    app.state.config = cfg
    app.state.template = template
    app.state.registry = handlers
    app.state.sessions = sessions

    def _get_session(session_id: str) -> Session:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(404, "Session not found")
        return session

    # === SESSIONS ===

    @app.post("/sessions", response_model=SessionCreated)
    def create_session():
        """Start a conversation at the configured entry state."""
        session_id = f"sess_{uuid4().hex[:12]}"
        engine = ConversationEngine(
            initial_level=cfg.initial_level,
            source=template.clone(),
            registry=handlers,
            config=cfg,
        )
        sessions[session_id] = Session(engine=engine)
        logger.info("Created session %s", session_id)
        return SessionCreated(
            session_id=session_id,
            message=engine.get_message(),
            level=engine.current_level,
        )

    @app.get("/sessions/{session_id}/message")
    def get_message(session_id: str):
        """The current prompt."""
        session = _get_session(session_id)
        with session.lock:
            return {
                "message": session.engine.get_message(),
                "level": session.engine.current_level,
            }

    @app.post("/sessions/{session_id}/send", response_model=SendResponse)
    def send(session_id: str, req: SendRequest):
        """Send one utterance and get the reply."""
        session = _get_session(session_id)
        with session.lock:
            try:
                reply = session.engine.send(req.text)
                message = session.engine.get_message()
            except (UnknownState, UnknownHandler) as e:
                logger.error("Turn failed in session %s: %s", session_id, e)
                raise HTTPException(500, str(e))
            return SendResponse(
                reply=reply,
                level=session.engine.current_level,
                message=message,
            )

    @app.get("/sessions/{session_id}/variables")
    def get_variables(session_id: str):
        """Captured session variables."""
        session = _get_session(session_id)
        with session.lock:
            return session.engine.variables

    @app.get("/sessions/{session_id}/history")
    def get_history(session_id: str):
        """Turn records for the session."""
        session = _get_session(session_id)
        with session.lock:
            return [t.model_dump(mode="json") for t in session.engine.history]

    @app.get("/sessions/{session_id}/learned")
    def get_learned(session_id: str, by_subject: bool = False):
        """Facts this session has taught the bot, optionally grouped by subject."""
        session = _get_session(session_id)
        with session.lock:
            learning = session.engine.learning
            if by_subject:
                return {
                    subject: [f.model_dump(mode="json") for f in facts]
                    for subject, facts in learning.facts_by_subject().items()
                }
            return [f.model_dump(mode="json") for f in learning.get_all_facts()]

    @app.delete("/sessions/{session_id}")
    def end_session(session_id: str):
        """Discard a session and everything it learned."""
        if sessions.pop(session_id, None) is None:
            raise HTTPException(404, "Session not found")
        return {"status": "ended", "session_id": session_id}

    # === DEFINITION ===

    @app.get("/definition")
    def get_definition():
        """The template graph new sessions start from."""
        return template.snapshot()

    @app.get("/handlers")
    def get_handlers():
        """Registered response handler names."""
        return handlers.names()

    return app


# Default application instance
app = create_app(config=load_config())
