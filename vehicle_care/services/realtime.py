"""Owner-scoped real-time push over WebSockets.

Each owner may have several open sessions (browser tabs, devices). Events are
only ever delivered to the sessions of the owner they are addressed to.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class OwnerConnectionManager:
    def __init__(self) -> None:
        self._connections: dict[int, list[WebSocket]] = defaultdict(list)
        self._loop: asyncio.AbstractEventLoop | None = None
        # Pending pushes scheduled on the loop; held until they finish.
        self._tasks: set[asyncio.Task] = set()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Remember the server loop so worker threads can publish onto it."""
        self._loop = loop

    async def connect(self, owner_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections[owner_id].append(websocket)
        logger.info(
            "Owner %d session connected (%d open).",
            owner_id,
            len(self._connections[owner_id]),
        )

    def disconnect(self, owner_id: int, websocket: WebSocket) -> None:
        sessions = self._connections.get(owner_id)
        if not sessions:
            return
        if websocket in sessions:
            sessions.remove(websocket)
        if not sessions:
            self._connections.pop(owner_id, None)
        logger.info("Owner %d session disconnected.", owner_id)

    def session_count(self, owner_id: int) -> int:
        return len(self._connections.get(owner_id, ()))

    async def send_to_owner(self, owner_id: int, message: dict[str, Any]) -> None:
        """Push a message to every open session of one owner.

        Sessions that fail to receive are dropped.
        """
        disconnected = []
        for websocket in list(self._connections.get(owner_id, ())):
            try:
                await websocket.send_json(message)
            except Exception:
                disconnected.append(websocket)

        for websocket in disconnected:
            self.disconnect(owner_id, websocket)

    def publish_to_owner(self, owner_id: int, event_name: str, payload: dict[str, Any]) -> int:
        """Schedule ``event_name`` for the owner's sessions from any thread.

        Returns the number of sessions the event was queued for. Delivery is
        fire-and-forget; a closed loop or no open sessions is not an error.
        """
        sessions = self.session_count(owner_id)
        if sessions == 0 or self._loop is None or self._loop.is_closed():
            logger.debug("No live session for owner %d; %s not pushed.", owner_id, event_name)
            return 0

        message = {"event": event_name, "data": payload}
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            task = self._loop.create_task(self.send_to_owner(owner_id, message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            asyncio.run_coroutine_threadsafe(self.send_to_owner(owner_id, message), self._loop)
        return sessions


manager = OwnerConnectionManager()


def publish_to_owner(owner_id: int, event_name: str, payload: dict[str, Any]) -> int:
    return manager.publish_to_owner(owner_id, event_name, payload)
