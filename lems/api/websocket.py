"""
Websocket endpoint for real-time division events.

    GET /ws/{division_id}?channels=judging,field&user=<userId>

Each client gets a bounded queue fed by its notifier subscriptions and a
sender task draining it. When the queue is full new events are dropped for
that client only (at-most-once delivery). Client-emitted messages carry an
``ackId`` and are answered with ``{"type": "ack", "ackId", "payload"}``.
"""

import asyncio
import contextlib
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError as SchemaValidationError

from lems.models.schemas import CVFormBody
from lems.core.config import CHANNELS, WS_QUEUE_SIZE
from lems.core.errors import LemsError
from lems.core.logging_config import get_logger
from lems.database import crud
from lems.services.cv_forms import CVFormService
from lems.services.policy import authorize, can_access_division
from lems.api.deps import resolve_user

logger = get_logger(__name__)

router = APIRouter(tags=["websocket"])


class ClientConnection:
    """One websocket client: its outbound queue and a lock serialising sends."""

    def __init__(self, websocket: WebSocket, user: Dict[str, Any], division_id: str):
        self.websocket = websocket
        self.user = user
        self.division_id = division_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=WS_QUEUE_SIZE)
        self.send_lock = asyncio.Lock()
        self.loop = asyncio.get_running_loop()
        self.dropped = 0
        self.sender: Optional[asyncio.Task] = None

    def handle_event(self, channel: str, event_name: str, *args):
        """Notifier handler; may run on any thread."""
        message = {
            "type": "event",
            "channel": channel,
            "name": event_name,
            "args": jsonable_encoder(list(args))
        }
        self.loop.call_soon_threadsafe(self._enqueue, message)

    def _enqueue(self, message: Dict[str, Any]):
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                f"Dropping {message['channel']}/{message['name']} for user {self.user.get('_id')}: "
                f"queue full ({self.dropped} dropped)"
            )

    async def send(self, message: Dict[str, Any]):
        async with self.send_lock:
            await self.websocket.send_json(message)

    async def pump(self):
        while True:
            message = await self.queue.get()
            await self.send(message)

    def start(self):
        self.sender = asyncio.create_task(self.pump())

    async def close(self):
        """Stop the sender task and collect its outcome."""
        self.sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            try:
                await self.sender
            except Exception as e:
                logger.warning(f"Sender for user {self.user.get('_id')} failed: {e}")


def parse_channels(channels: Optional[str]) -> List[str]:
    if not channels:
        return list(CHANNELS)
    requested = [c.strip() for c in channels.split(",") if c.strip()]
    unknown = [c for c in requested if c not in CHANNELS]
    if unknown:
        logger.warning(f"Ignoring unknown channels: {unknown}")
    return [c for c in requested if c in CHANNELS]


def handle_emit(connection: ClientConnection, name: str, args: List[Any]) -> Dict[str, Any]:
    """Run a client-emitted command; returns the ack payload."""
    store = connection.websocket.app.state.store
    notifier = connection.websocket.app.state.notifier

    if name == "createCvForm":
        if len(args) < 2 or args[0] != connection.division_id:
            return {"ok": False}
        if not authorize(connection.user, ["cv-forms:write"]).allowed:
            return {"ok": False}
        try:
            form = CVFormBody.model_validate(args[1])
            CVFormService(store, notifier).create(connection.division_id, form.model_dump(by_alias=True))
        except (SchemaValidationError, LemsError) as e:
            logger.info(f"Rejected CV form from user {connection.user.get('_id')}: {e}")
            return {"ok": False}
        return {"ok": True}

    logger.warning(f"Unknown client event: {name}")
    return {"ok": False}


@router.websocket("/ws/{division_id}")
async def division_socket(websocket: WebSocket, division_id: str,
                          channels: Optional[str] = None, user: Optional[str] = None):
    store = websocket.app.state.store
    notifier = websocket.app.state.notifier

    try:
        client_user = resolve_user(store, user or websocket.headers.get("x-user-id"))
    except LemsError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if crud.events.get_division(store, {"_id": division_id}) is None \
            or not can_access_division(client_user, division_id).allowed:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    connection = ClientConnection(websocket, client_user, division_id)
    subscriptions = [
        notifier.subscribe(division_id, channel, "*", connection.handle_event)
        for channel in parse_channels(channels)
    ]
    connection.start()
    logger.info(
        f"User {client_user.get('_id')} connected to division {division_id} "
        f"({', '.join(s.channel for s in subscriptions)})"
    )

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.warning("Ignoring malformed websocket message")
                continue
            if not isinstance(message, dict) or message.get("type") != "emit":
                continue
            payload = handle_emit(connection, message.get("name"), message.get("args") or [])
            if message.get("ackId") is not None:
                await connection.send({"type": "ack", "ackId": message["ackId"], "payload": payload})
    except WebSocketDisconnect:
        logger.info(f"User {client_user.get('_id')} disconnected from division {division_id}")
    finally:
        for subscription in subscriptions:
            subscription.unsubscribe()
        await connection.close()
