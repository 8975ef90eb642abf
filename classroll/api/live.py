# classroll/api/live.py
"""WebSocket feed of presence events.

Clients send ``{"action": "subscribe", "session_id": 12}`` (or
``"unsubscribe"``) and then receive every event published on that session.
Only administrators and the session's teacher may subscribe.

Database sessions here are opened per lookup and closed straight away,
since a dashboard socket can stay open for hours.
"""
import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from jose import JWTError

from classroll.api.deps import get_hub, get_session_factory
from classroll.core import errors
from classroll.core.security import decode_access_token
from classroll.crud import class_session as crud_session
from classroll.crud import user as crud_user
from classroll.services.notifications import SessionHub, Subscriber

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass(frozen=True)
class Observer:
    id: int
    email: str
    role: str


def _load_observer(session_factory, email: str) -> Optional[Observer]:
    with session_factory() as db:
        user = crud_user.get_user_by_email(db, email)
        if user is None:
            return None
        return Observer(id=user.id, email=user.email, role=user.role)


def _check_may_observe(session_factory, observer: Observer, session_id: int) -> None:
    with session_factory() as db:
        session = crud_session.get_session(db, session_id)
        if session is None:
            raise errors.NotFoundError(f"Session {session_id} not found")
        teacher_id = session.teacher_id
    if observer.role != "admin" and teacher_id != observer.id:
        raise errors.AuthorizationError("Not allowed to observe this session")


async def _authenticate(session_factory, token: Optional[str]) -> Optional[Observer]:
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    email = payload.get("sub")
    if not email:
        return None
    return await run_in_threadpool(_load_observer, session_factory, email)


async def _forward(websocket: WebSocket, subscriber: Subscriber):
    while True:
        message = await subscriber.get()
        await websocket.send_json(message)


def _parse_control(raw: str):
    message = json.loads(raw)
    action = message.get("action")
    session_id = message.get("session_id")
    if action not in ("subscribe", "unsubscribe"):
        raise ValueError(f"unknown action {action!r}")
    if not isinstance(session_id, int) or isinstance(session_id, bool):
        raise ValueError("session_id must be an integer")
    return action, session_id


@router.websocket("/presences")
async def presence_feed(
    websocket: WebSocket,
    token: Optional[str] = Query(default=None),
    session_factory=Depends(get_session_factory),
    hub: SessionHub = Depends(get_hub),
):
    observer = await _authenticate(session_factory, token)
    if observer is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscriber = Subscriber()
    sender = asyncio.create_task(_forward(websocket, subscriber))
    logger.info(f"✅ [Live] {observer.email} connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                action, session_id = _parse_control(raw)
            except (ValueError, AttributeError) as e:
                subscriber.queue.put_nowait({"event": "error", "detail": str(e)})
                continue

            if action == "subscribe":
                try:
                    await run_in_threadpool(_check_may_observe, session_factory, observer, session_id)
                except errors.DomainError as e:
                    logger.warning(f"⚠️ [Live] {observer.email} refused on session {session_id}: {e.detail}")
                    subscriber.queue.put_nowait({
                        "event": "error", "kind": e.kind, "session_id": session_id, "detail": e.detail,
                    })
                    continue
                hub.subscribe(session_id, subscriber)
                ack = "subscribed"
            else:
                hub.unsubscribe(session_id, subscriber)
                ack = "unsubscribed"
            # acks share the queue so the client sees them in order with events
            subscriber.queue.put_nowait({"event": ack, "session_id": session_id})
    except WebSocketDisconnect:
        logger.info(f"❌ [Live] {observer.email} disconnected")
    finally:
        hub.unsubscribe_all(subscriber)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
            await sender
