# classroll/services/notifications.py
"""Live fan-out of presence events to observers of a session.

Delivery is best-effort: at most once per observer per publish, no replay,
nothing is acknowledged. ``publish`` may be called from any thread (sync
endpoints run in a threadpool); each subscriber's queue is fed on its own
event loop.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, Optional, Protocol, Set

logger = logging.getLogger(__name__)

PRESENCE_CREATED = "presence.created"
PRESENCE_DECIDED = "presence.decided"


class Publisher(Protocol):
    def publish(self, session_id: int, event_kind: str, payload: Dict[str, Any]) -> None: ...


class Subscriber:
    """One observer, typically one WebSocket connection."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()
        self.queue: asyncio.Queue = asyncio.Queue()

    def deliver(self, message: dict) -> None:
        self.loop.call_soon_threadsafe(self.queue.put_nowait, message)

    async def get(self) -> dict:
        return await self.queue.get()


class SessionHub:
    def __init__(self):
        self._topics: Dict[int, Set[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, session_id: int, subscriber: Subscriber) -> None:
        with self._lock:
            self._topics.setdefault(session_id, set()).add(subscriber)
        logger.debug(f"[Hub] subscriber joined session {session_id}")

    def unsubscribe(self, session_id: int, subscriber: Subscriber) -> None:
        with self._lock:
            subscribers = self._topics.get(session_id)
            if subscribers is None:
                return
            subscribers.discard(subscriber)
            if not subscribers:
                del self._topics[session_id]
        logger.debug(f"[Hub] subscriber left session {session_id}")

    def unsubscribe_all(self, subscriber: Subscriber) -> None:
        with self._lock:
            for session_id in [sid for sid, subs in self._topics.items() if subscriber in subs]:
                self._topics[session_id].discard(subscriber)
                if not self._topics[session_id]:
                    del self._topics[session_id]

    def subscribers(self, session_id: int) -> Set[Subscriber]:
        with self._lock:
            return set(self._topics.get(session_id, ()))

    def publish(self, session_id: int, event_kind: str, payload: Dict[str, Any]) -> None:
        message = {"event": event_kind, "session_id": session_id, "data": payload}
        for subscriber in self.subscribers(session_id):
            try:
                subscriber.deliver(message)
            except RuntimeError:
                # event loop closed under us
                logger.warning(f"⚠️ [Hub] dropping dead subscriber on session {session_id}")
                self.unsubscribe_all(subscriber)
        logger.debug(f"[Hub] {event_kind} published on session {session_id}")


hub = SessionHub()
