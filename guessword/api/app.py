"""
FastAPI Application - REST API for the mobile app.

Endpoints:
    GET    /api/v1/words                      Vocabulary
    POST   /api/v1/sessions                   Create session, start first round
    GET    /api/v1/sessions                   List active sessions
    GET    /api/v1/sessions/{id}              Get session status
    DELETE /api/v1/sessions/{id}              End session
    GET    /api/v1/sessions/{id}/state        Get round state
    POST   /api/v1/sessions/{id}/correct      Word guessed
    POST   /api/v1/sessions/{id}/skip         Word skipped
    POST   /api/v1/sessions/{id}/play-again   New round from the score screen
    GET    /api/v1/sessions/{id}/buzzes       Drain pending haptic cues
    WS     /api/v1/sessions/{id}/ws           Real-time state updates

Countdown ticks run on the server's event loop, the same loop that serves the
requests, so player actions and ticks never interleave.

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Annotated, Optional
import asyncio
import json
import logging

from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from ..config import ALLOWED_ORIGINS
from ..engine_core.errors import (
    PreconditionError,
    RoundAlreadyRunning,
    RoundOverNotAcknowledged,
    SessionNotFound,
)
from .service import APIService
from .schemas import (
    # Request models
    CreateSessionRequest,
    # Response models
    SessionResponse,
    RoundStateResponse,
    BuzzQueueResponse,
    VocabularyResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    api_service = service or APIService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Shutdown: cancel every running countdown
        api_service.session_manager.shutdown()

    app = FastAPI(
        title="Guessword API",
        description="""
Word-guessing party game: guess as many words as possible before the countdown ends.

## Round Flow

1. `POST /sessions` starts a round and returns the first word
2. `POST /correct` (+1, buzz) or `POST /skip` (-1) for each word
3. Poll `GET /buzzes` (or listen for `buzz` messages on the WebSocket) and play the patterns
4. When `status` becomes `score`, show `result.final_score`
5. `POST /play-again` for another round, `DELETE` the session when done

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `ROUND_NOT_ACTIVE` | No round running for Correct/Skip |
| `ROUND_ALREADY_RUNNING` | Play again during a round |
| `ROUND_OVER_PENDING` | Last round not handled yet |
| `VALIDATION_ERROR` | Invalid request values |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # CORS for mobile app
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFound)
    async def session_not_found(request: Request, exc: SessionNotFound) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            str(exc),
            status_code=404,
            details={"session_id": exc.session_id},
        )

    @app.exception_handler(PreconditionError)
    async def precondition_failed(request: Request, exc: PreconditionError) -> JSONResponse:
        if isinstance(exc, RoundAlreadyRunning):
            code = ErrorCode.ROUND_ALREADY_RUNNING
        elif isinstance(exc, RoundOverNotAcknowledged):
            code = ErrorCode.ROUND_OVER_PENDING
        else:
            code = ErrorCode.ROUND_NOT_ACTIVE
        return make_error_response(
            code,
            str(exc),
            status_code=409,
            details={"operation": exc.operation, "phase": exc.phase},
        )

    @app.exception_handler(ValidationError)
    async def invalid_config(request: Request, exc: ValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid round configuration",
            status_code=422,
            details={"errors": [e["msg"] for e in exc.errors()]},
        )

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    # =========================================================================
    # Vocabulary
    # =========================================================================

    @app.get(
        "/api/v1/words",
        response_model=VocabularyResponse,
        tags=["Words"],
        summary="List the words of the game",
    )
    async def list_words() -> VocabularyResponse:
        return api_service.get_vocabulary()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        status_code=201,
        responses={422: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a session and start the first round",
    )
    async def create_session(body: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """
        Create a new game session. The countdown starts immediately.

        All timing fields are optional. The default round (unless the server
        is configured otherwise) lasts 60 seconds and buzzes every second
        during the last 10.
        """
        return api_service.create_session(body or CreateSessionRequest())

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "completed",
    ) -> EndSessionResponse:
        """End a game session and cancel its countdown."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Round Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=RoundStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Get the current round state",
    )
    async def get_state(session_id: str) -> RoundStateResponse:
        return api_service.get_state(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/correct",
        response_model=RoundStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="The current word was guessed",
    )
    async def correct(session_id: str) -> RoundStateResponse:
        return api_service.correct(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/skip",
        response_model=RoundStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Skip the current word",
    )
    async def skip(session_id: str) -> RoundStateResponse:
        return api_service.skip(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/play-again",
        response_model=RoundStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Start a new round from the score screen",
    )
    async def play_again(session_id: str) -> RoundStateResponse:
        return api_service.play_again(session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/buzzes",
        response_model=BuzzQueueResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Round"],
        summary="Fetch and clear pending haptic cues",
    )
    async def get_buzzes(session_id: str) -> BuzzQueueResponse:
        return api_service.get_buzzes(session_id)

    # =========================================================================
    # WebSocket
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: word, score, remaining time or round-over changed
        - buzz: haptic cues to play (drained from the session's queue)
        - pong: Reply to ping
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        session = api_service.session_manager.get_session(session_id)
        if session is None:
            await websocket.send_json({
                "type": "error",
                "payload": {"error_code": ErrorCode.SESSION_NOT_FOUND.value},
            })
            await websocket.close()
            return

        loop = asyncio.get_running_loop()
        # Engine listeners may fire outside the loop thread
        outbox: asyncio.Queue[str] = asyncio.Queue()

        def push_state(_value) -> None:
            loop.call_soon_threadsafe(outbox.put_nowait, "state_update")

        def push_buzz(ticket) -> None:
            if ticket.fired:
                loop.call_soon_threadsafe(outbox.put_nowait, "buzz")

        async def send_update(kind: str) -> None:
            if kind == "buzz":
                buzzes = api_service.get_buzzes(session_id)
                if not buzzes.buzzes:
                    return
                payload = buzzes.model_dump(mode="json")
            else:
                payload = api_service.get_state(session_id).model_dump(mode="json")
            await websocket.send_json({"type": kind, "payload": payload})

        async def sender() -> None:
            while True:
                kind = await outbox.get()
                try:
                    await send_update(kind)
                except SessionNotFound:
                    return
                except (RuntimeError, WebSocketDisconnect):
                    logger.debug("Dropped update for closed socket (session %s)", session_id)
                    return

        unsubscribe = [
            session.engine.word.observe(push_state),
            session.engine.score.observe(push_state),
            session.engine.remaining.observe(push_state),
            session.engine.round_over.observe(push_state),
            session.engine.buzz.observe(push_buzz),
        ]
        await send_update("state_update")
        sender_task = asyncio.create_task(sender())

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    message = None
                if not isinstance(message, dict):
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"error_code": ErrorCode.VALIDATION_ERROR.value},
                    })
                    continue
                if message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            pass
        finally:
            for remove in unsubscribe:
                remove()
            sender_task.cancel()

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="guessword",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Guessword API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn guessword.api.app:app
app = create_app()
