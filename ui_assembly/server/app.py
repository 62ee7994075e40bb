"""FastAPI application exposing the assembly engine over HTTP and WebSocket.

WHY: The intent classifier and the rendering surface live in other
processes. They need an HTTP API to push intents and instructions into
a session, read snapshots back, and a WebSocket stream that delivers a
snapshot after every applied instruction.

HOW: A single FastAPI app holds a module-level SessionStore. Stateless
endpoints map intents; session endpoints create engines, apply intents
or raw wire instructions, and return snapshots. The stream endpoint
subscribes to the session's engine and forwards each snapshot; it also
accepts wire instructions from the client and applies them.

RULES:
- Instructions and snapshots cross the boundary only through the codec
- ProtocolError → 422, unknown session → 404, session limit → 429,
  animation failure → 500
- The session store is a singleton created at import
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import Body, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import Response

from ui_assembly import __version__
from ui_assembly.config import HOST, PORT
from ui_assembly.core.engine import AnimationFailedError
from ui_assembly.core.ir import AssemblyState, Intent
from ui_assembly.protocol.codec import (
    ProtocolError,
    decode_instruction,
    encode_instruction,
    encode_state,
)
from ui_assembly.server.models import (
    ComponentInfo,
    ErrorResponse,
    HealthResponse,
    InstructionResponse,
    IntentRequest,
    IntentResultResponse,
    SessionResponse,
    StateResponse,
)
from ui_assembly.server.sessions import Session, SessionLimitError, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="UI Assembly Engine API",
    description=(
        "Maps classified conversational intents to UI assembly instructions "
        "and applies them to per-session component sets. Submit intents or "
        "raw instructions, read snapshots, or stream them over WebSocket."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require_session(session_id: str) -> Session:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _session_to_response(session: Session) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        created_at=session.created_at,
        updated_at=session.updated_at,
        component_count=len(session.engine),
        layout=session.engine.layout,
    )


def _state_to_response(state: AssemblyState) -> StateResponse:
    return StateResponse(**encode_state(state))


def _intent_from_request(request: IntentRequest) -> Intent:
    return Intent(
        type=request.type,
        confidence=request.confidence,
        entities=dict(request.entities),
        context=dict(request.context),
    )


# ---------------------------------------------------------------------------
# Endpoints: Mapping
# ---------------------------------------------------------------------------


@app.post(
    "/map",
    response_model=InstructionResponse,
    tags=["mapping"],
    summary="Map an intent to an instruction",
    description="Runs the rule mapper without touching any session.",
)
async def map_intent(request: IntentRequest) -> InstructionResponse:
    instruction = session_store.mapper.map_to_instruction(_intent_from_request(request))
    return InstructionResponse(instruction=encode_instruction(instruction))


@app.get(
    "/components",
    response_model=List[ComponentInfo],
    tags=["mapping"],
    summary="List registered component types",
)
async def list_components() -> List[ComponentInfo]:
    result = []
    for name in session_store.registry.list_names():
        metadata = session_store.registry.get_metadata(name)
        if metadata is None:
            result.append(ComponentInfo(name=name))
        else:
            result.append(ComponentInfo(
                name=name,
                category=metadata.category,
                description=metadata.description,
                required_props=list(metadata.required_props),
                optional_props=list(metadata.optional_props),
            ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Create an assembly session",
    responses={429: {"model": ErrorResponse, "description": "Too many sessions"}},
)
async def create_session() -> SessionResponse:
    try:
        session = session_store.create_session()
    except SessionLimitError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return _session_to_response(session)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session metadata",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_require_session(session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Delete a session",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


@app.get(
    "/sessions/{session_id}/state",
    response_model=StateResponse,
    tags=["sessions"],
    summary="Get the current snapshot",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
async def get_state(session_id: str) -> StateResponse:
    session = _require_session(session_id)
    return _state_to_response(session.engine.get_state())


@app.post(
    "/sessions/{session_id}/intents",
    response_model=IntentResultResponse,
    tags=["sessions"],
    summary="Map an intent and apply it to the session",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        500: {"model": ErrorResponse, "description": "Animation executor failed"},
    },
)
async def submit_intent(session_id: str, request: IntentRequest) -> IntentResultResponse:
    session = _require_session(session_id)
    try:
        instruction, state = await session.handle_intent(_intent_from_request(request))
    except AnimationFailedError as exc:
        logger.exception("Intent application failed in session %s", session_id)
        raise HTTPException(status_code=500, detail=str(exc))
    return IntentResultResponse(
        instruction=encode_instruction(instruction),
        state=_state_to_response(state),
    )


@app.post(
    "/sessions/{session_id}/instructions",
    response_model=StateResponse,
    tags=["sessions"],
    summary="Apply a wire instruction to the session",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
        422: {"model": ErrorResponse, "description": "Instruction does not match the wire schema"},
        500: {"model": ErrorResponse, "description": "Animation executor failed"},
    },
)
async def submit_instruction(
    session_id: str,
    payload: Dict[str, Any] = Body(..., description="Wire-format assembly instruction."),
) -> StateResponse:
    session = _require_session(session_id)
    try:
        instruction = decode_instruction(payload)
    except ProtocolError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    try:
        state = await session.apply(instruction)
    except AnimationFailedError as exc:
        logger.exception("Instruction failed in session %s", session_id)
        raise HTTPException(status_code=500, detail=str(exc))
    return _state_to_response(state)


@app.websocket("/sessions/{session_id}/stream")
async def stream_session(websocket: WebSocket, session_id: str) -> None:
    """Push a snapshot after every applied instruction; accept instructions back.

    The first message is the current snapshot. Each text frame received
    is decoded as a wire instruction and applied; decoding or animation
    errors are answered with ``{"error": ...}`` and the stream stays open.
    Every frame, errors included, is written by the one sender task.
    """
    session = session_store.get_session(session_id)
    if session is None:
        await websocket.close(code=4404)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    outbox: asyncio.Queue = asyncio.Queue()
    outbox.put_nowait(encode_state(session.engine.get_state()))

    def _on_state(state: AssemblyState) -> None:
        loop.call_soon_threadsafe(outbox.put_nowait, encode_state(state))

    unsubscribe = session.engine.subscribe(_on_state)

    async def _pump() -> None:
        while True:
            payload = await outbox.get()
            await websocket.send_json(payload)

    sender = asyncio.create_task(_pump())
    try:
        while True:
            message = await websocket.receive_text()
            try:
                await session.apply(decode_instruction(message))
            except (ProtocolError, AnimationFailedError) as exc:
                outbox.put_nowait({"error": str(exc)})
    except WebSocketDisconnect:
        logger.info("Stream for session %s disconnected", session_id)
    finally:
        unsubscribe()
        sender.cancel()


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = HOST, port: int = PORT) -> None:
    """Entry point for the ui-assembly-api console script."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)
