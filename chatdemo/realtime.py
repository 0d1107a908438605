import asyncio
import json
import logging
import threading
import uuid
from typing import Dict, List, Optional

from fastapi import WebSocket

log = logging.getLogger("uvicorn.error")


class ConnectionLost(Exception):
    """A write was attempted on a real-time client that is already gone."""


class Connection:
    """One real-time client as seen by the hub."""

    kind = "client"

    def __init__(self, conn_id: Optional[str] = None):
        self.id = conn_id or uuid.uuid4().hex
        self.alive = True

    async def send(self, message: str):
        raise NotImplementedError

    async def close(self):
        self.alive = False


class WebSocketConnection(Connection):
    kind = "ws"

    def __init__(self, ws: WebSocket, conn_id: Optional[str] = None):
        super().__init__(conn_id)
        self.ws = ws

    async def send(self, message: str):
        if not self.alive:
            raise ConnectionLost(self.id)
        payload = json.dumps({"event": "message", "data": message}, ensure_ascii=False)
        await self.ws.send_text(payload)

    async def close(self):
        if not self.alive:
            return
        self.alive = False
        # 1001: going away
        await self.ws.close(code=1001)


class EventStreamConnection(Connection):
    """Queue-backed sink drained by the /sse response body.

    A ``None`` in the queue tells the stream to finish.
    """

    kind = "sse"

    def __init__(self, conn_id: Optional[str] = None):
        super().__init__(conn_id)
        self.queue: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str):
        if not self.alive:
            raise ConnectionLost(self.id)
        self.queue.put_nowait(message)

    async def close(self):
        if not self.alive:
            return
        self.alive = False
        self.queue.put_nowait(None)


class RealtimeHub:
    def __init__(self, write_timeout: float = 5.0):
        self.write_timeout = write_timeout
        self._clients: Dict[str, Connection] = {}
        # never held across an await
        self._lock = threading.Lock()
        self._closed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    @property
    def closed(self) -> bool:
        return self._closed

    def connection_ids(self) -> List[str]:
        with self._lock:
            return list(self._clients)

    def register(self, conn: Connection):
        with self._lock:
            if self._closed:
                raise RuntimeError("hub is closed")
            if conn.id in self._clients:
                raise ValueError(f"connection {conn.id} already registered")
            self._clients[conn.id] = conn
            total = len(self._clients)
        log.info(f"[HUB] {conn.kind} client {conn.id} connected ({total} total)")

    def unregister(self, conn_id: str) -> Optional[Connection]:
        with self._lock:
            conn = self._clients.pop(conn_id, None)
            total = len(self._clients)
        if conn is not None:
            log.info(f"[HUB] {conn.kind} client {conn_id} disconnected ({total} total)")
        return conn

    async def broadcast(self, message: str) -> int:
        """Send ``message`` to every registered client.

        Works on a snapshot of the registry, so clients joining mid-broadcast
        are either included once or not at all. Clients whose write fails or
        times out are dropped. Returns how many clients took the message.
        """
        with self._lock:
            targets = list(self._clients.values())
        if not targets:
            return 0
        results = await asyncio.gather(*(self._deliver(conn, message) for conn in targets))
        return sum(results)

    async def close(self):
        with self._lock:
            self._closed = True
            conns = list(self._clients.values())
            self._clients.clear()
        if conns:
            await asyncio.gather(*(self._close_quietly(conn) for conn in conns))
        log.info(f"[HUB] closed, {len(conns)} clients released")

    async def _deliver(self, conn: Connection, message: str) -> bool:
        try:
            await asyncio.wait_for(conn.send(message), timeout=self.write_timeout)
            return True
        except ConnectionLost:
            log.info(f"[HUB] {conn.kind} client {conn.id} already gone")
        except Exception as exc:
            log.warning(f"[HUB] dropping {conn.kind} client {conn.id}: {exc!r}")
        self.unregister(conn.id)
        await self._close_quietly(conn)
        return False

    async def _close_quietly(self, conn: Connection):
        try:
            await asyncio.wait_for(conn.close(), timeout=self.write_timeout)
        except Exception as exc:
            log.debug(f"[HUB] closing {conn.kind} client {conn.id} failed: {exc!r}")
