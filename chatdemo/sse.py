import asyncio
import logging
import re
from typing import AsyncIterator

from fastapi import Request

from .realtime import EventStreamConnection, RealtimeHub

log = logging.getLogger("uvicorn.error")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}
PING = ": ping\n\n"


def format_event(message: str) -> str:
    # only CRLF, CR and LF end a line in an event stream
    lines = re.split(r"\r\n|\r|\n", message)
    return "".join(f"data: {line}\n" for line in lines) + "\n"


async def event_stream(
    hub: RealtimeHub,
    request: Request,
    ping_interval: float,
) -> AsyncIterator[str]:
    """Body of one /sse response.

    Runs after the headers are out. The connection belongs to this response
    only and leaves the hub when the client goes away, the stream is
    cancelled or the hub closes.
    """
    conn = EventStreamConnection()
    try:
        hub.register(conn)
    except RuntimeError:
        log.info("[SSE] hub closed, refusing stream")
        return

    try:
        while True:
            try:
                message = await asyncio.wait_for(conn.queue.get(), timeout=ping_interval)
            except asyncio.TimeoutError:
                if await request.is_disconnected():
                    break
                yield PING
                continue
            if message is None:
                break
            yield format_event(message)
    finally:
        conn.alive = False
        hub.unregister(conn.id)
