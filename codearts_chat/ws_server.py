"""WebSocket server — chat channel connection lifecycle + message routing.

All orchestration logic (intent/validate/invoke/synthesize) lives in pipeline.py.
Session state lives in session.py.
"""
import asyncio
import functools
import json
import logging
from typing import Dict, Optional

import websockets
from pydantic import ValidationError
from websockets.asyncio.server import ServerConnection, serve

from .config import settings
from .pipeline import Orchestrator
from .protocol import Ack, ErrorMsg, Pong, SendMessage
from .session import Session

logger = logging.getLogger(__name__)

WS_SEND_TIMEOUT = 2.0  # seconds
DISCONNECT_GRACE_S = 30.0


async def ws_send_safe(ws: ServerConnection, data, session: Session, label: str = "") -> bool:
    """Send data via WebSocket with timeout. Returns True on success."""
    try:
        await asyncio.wait_for(ws.send(data), timeout=WS_SEND_TIMEOUT)
        return True
    except asyncio.TimeoutError:
        logger.error(f"[{session.session_id}] ws.send() timed out ({WS_SEND_TIMEOUT}s) {label}")
        return False
    except Exception as e:
        logger.warning(f"[{session.session_id}] ws.send() failed {label}: {type(e).__name__}: {e}")
        return False


class ConnectionHub:
    """Live chat connections; broadcasts go to every one of them."""

    def __init__(self):
        self._connections: Dict[ServerConnection, Session] = {}

    def register(self, ws: ServerConnection, session: Session):
        self._connections[ws] = session

    def unregister(self, ws: ServerConnection):
        self._connections.pop(ws, None)

    def __len__(self) -> int:
        return len(self._connections)

    async def broadcast(self, event: dict) -> None:
        data = json.dumps(event, ensure_ascii=False)
        targets = list(self._connections.items())
        if not targets:
            return
        await asyncio.gather(
            *(ws_send_safe(ws, data, session, event.get("type", "")) for ws, session in targets)
        )


hub = ConnectionHub()


async def _send_error(ws: ServerConnection, session: Session, message: str):
    await ws_send_safe(ws, json.dumps(ErrorMsg(type="error", message=message).model_dump()), session, "error")


def _make_ack(ws: ServerConnection, session: Session, request_id: str):
    async def ack(status: dict):
        payload = Ack(type="ack", id=request_id, **status).model_dump(exclude_none=True)
        await ws_send_safe(ws, json.dumps(payload, ensure_ascii=False), session, "ack")
    return ack


async def handle_text_message(
    ws: ServerConnection,
    session: Session,
    text: str,
    orchestrator: Orchestrator,
    channel: ConnectionHub,
    serialize: bool = False,
) -> Optional[asyncio.Task]:
    """Route an incoming JSON frame. Returns the pipeline task, if one was started."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        await _send_error(ws, session, "invalid json")
        return None
    if not isinstance(payload, dict):
        await _send_error(ws, session, "invalid message")
        return None

    mtype = payload.get("type")
    session.touch()
    logger.debug(f"[{session.session_id}] Client {session.remote_address}: {mtype}")

    if mtype == "ping":
        await ws_send_safe(ws, json.dumps(Pong(type="pong").model_dump()), session, "pong")
        return None

    if mtype == "send_message":
        try:
            msg = SendMessage.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"[{session.session_id}] Invalid send_message: {e.errors()[:1]}")
            await _send_error(ws, session, "invalid send_message: text is required")
            return None
        return _launch_pipeline(ws, session, msg, orchestrator, channel, serialize)

    await _send_error(ws, session, f"unknown message type: {mtype}")
    return None


def _launch_pipeline(ws, session: Session, msg: SendMessage, orchestrator: Orchestrator,
                     channel: ConnectionHub, serialize: bool) -> asyncio.Task:
    """Run the message pipeline as a background task so the read loop stays responsive."""
    session.messages_received += 1
    message_id = f"{session.session_id}-{session.messages_received}"
    ack = _make_ack(ws, session, msg.id) if msg.id else None

    task = asyncio.create_task(
        _pipeline_wrapper(orchestrator, channel, session, msg.text, ack, message_id, serialize)
    )
    session.track(task)
    return task


async def _pipeline_wrapper(orchestrator, channel, session, text, ack, message_id, serialize):
    """Wrapper to catch anything escaping the pipeline (it should not)."""
    try:
        if serialize:
            async with session.lock:
                await orchestrator.handle_message(text, channel, ack=ack, message_id=message_id)
        else:
            await orchestrator.handle_message(text, channel, ack=ack, message_id=message_id)
    except asyncio.CancelledError:
        logger.info(f"[{message_id}] Pipeline cancelled")
        raise
    except Exception as e:
        logger.error(f"[{message_id}] UNHANDLED in pipeline wrapper: {type(e).__name__}: {e}", exc_info=True)


async def handle_client(ws: ServerConnection, orchestrator: Orchestrator,
                        channel: ConnectionHub = hub, serialize: bool = False):
    """Main WebSocket connection handler — register, message loop, cleanup."""
    remote = ws.remote_address
    session = Session(f"{remote[0]}:{remote[1]}" if remote else None)
    channel.register(ws, session)
    logger.info(f"[{session.session_id}] New client connected from {session.remote_address} "
                f"({len(channel)} connected)")

    try:
        async for message in ws:
            if isinstance(message, str):
                await handle_text_message(ws, session, message, orchestrator, channel, serialize)
            else:
                await _send_error(ws, session, "binary frames are not supported")
    except websockets.exceptions.ConnectionClosed:
        logger.info(f"[{session.session_id}] Client disconnected")
    except Exception as e:
        logger.error(f"[{session.session_id}] Error handling client: {e}", exc_info=True)
    finally:
        channel.unregister(ws)
        if session.pending:
            # Pipelines run to completion; their broadcasts still reach other clients
            logger.info(f"[{session.session_id}] Waiting for {len(session.pending)} pipeline(s) to finish...")
            _, pending = await asyncio.wait(set(session.pending), timeout=DISCONNECT_GRACE_S)
            if pending:
                logger.warning(f"[{session.session_id}] {len(pending)} pipeline(s) still running after disconnect")
        logger.info(f"[{session.session_id}] Session ended ({len(channel)} connected)")


async def start_websocket_server(orchestrator: Orchestrator, channel: ConnectionHub = hub):
    """Start the chat WebSocket server."""
    logger.info(f"Starting WebSocket server on {settings.ws_host}:{settings.ws_port}")

    handler = functools.partial(
        handle_client,
        orchestrator=orchestrator,
        channel=channel,
        serialize=settings.serialize_per_connection,
    )
    async with serve(handler, settings.ws_host, settings.ws_port, max_size=2 ** 20):
        logger.info(f"WebSocket server listening on ws://{settings.ws_host}:{settings.ws_port}")
        await asyncio.Future()
