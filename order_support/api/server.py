"""
HTTP transport for the order support assistant.

Endpoints:
    POST /api/chat         one user turn
    POST /api/end-session  elapsed-time summary when the participant leaves
    GET  /health           liveness probe

The transport only marshals requests; all conversation logic lives in
``SessionStateMachine``.
"""

from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from order_support.config import settings
from order_support.conversation.session_store import SessionNotFoundError
from order_support.conversation.state_machine import SessionStateMachine
from order_support.logging_context import get_session_logger
from order_support.schemas.turn_schema import ChatRequest, EndSessionRequest, TurnResult
from order_support.tools.audit_log import build_audit_logger
from order_support.tools.model_client import ModelCallError, OpenAIModelClient

logger = get_session_logger(__name__)


def build_state_machine() -> SessionStateMachine:
    """Wire the state machine to the configured model and audit backends."""
    return SessionStateMachine(
        model_client=OpenAIModelClient(settings.model),
        audit_logger=build_audit_logger(settings.audit),
    )


def create_app(machine: Optional[SessionStateMachine] = None) -> FastAPI:
    """Build the FastAPI app around a state machine."""
    machine = machine or build_state_machine()
    app = FastAPI(title="Order Support Assistant")
    app.state.machine = machine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/chat", response_model=TurnResult, response_model_by_alias=True)
    async def chat(request: ChatRequest) -> TurnResult:
        try:
            return await machine.handle_turn(request.user_id, request.message)
        except ModelCallError as exc:
            logger.error("Error processing the request: %s", exc)
            raise HTTPException(
                status_code=503,
                detail="Error processing the request",
                headers={"Retry-After": "5"},
            ) from exc

    @app.post("/api/end-session", response_class=PlainTextResponse)
    async def end_session(request: EndSessionRequest) -> str:
        if not request.user_id or request.session_end is not True:
            raise HTTPException(
                status_code=400, detail="Invalid request: missing userId or sessionEnd flag."
            )
        try:
            await machine.end_session(request.user_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail="User session not found.") from exc
        return "Session End logged."

    return app
