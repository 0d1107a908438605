import logging

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, WebSocket
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from . import config
from .echo import EchoOut, transform
from .realtime import RealtimeHub, WebSocketConnection
from .sse import SSE_HEADERS, event_stream

log = logging.getLogger("uvicorn.error")


def create_app(
    hub: RealtimeHub | None = None,
    static_dir: str | None = None,
    ping_interval: float | None = None,
) -> FastAPI:
    app = FastAPI()
    hub = hub if hub is not None else RealtimeHub(write_timeout=config.WRITE_TIMEOUT)
    ping_interval = ping_interval if ping_interval is not None else config.SSE_PING_INTERVAL
    app.state.hub = hub

    @app.on_event("startup")
    async def startup():
        log.info(f"Server is running on port {config.PORT}")

    @app.on_event("shutdown")
    async def shutdown():
        await hub.close()
        log.info("[SHUTDOWN] realtime hub closed")

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        log.error(f"[ERROR] {request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
        return JSONResponse({"detail": "Internal Server Error"}, status_code=500)

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return "hi"

    @app.get("/json")
    def json_stub():
        return {"text": "hi", "numbers": [1, 2, 3]}

    @app.get("/echo", response_model=EchoOut)
    def echo(input: str | None = None):
        if input is None:
            raise HTTPException(status_code=400, detail="query parameter 'input' is required")
        return transform(input)

    @app.get("/chat", response_class=PlainTextResponse)
    def chat(background: BackgroundTasks, message: str | None = None):
        if message is None:
            raise HTTPException(status_code=400, detail="query parameter 'message' is required")
        # delivery happens after the response is sent
        background.add_task(hub.broadcast, message)
        return f"Message sent to chat: {message}"

    @app.get("/sse")
    async def sse(request: Request):
        return StreamingResponse(
            event_stream(hub, request, ping_interval),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @app.websocket("/ws")
    async def ws(websocket: WebSocket):
        await websocket.accept()
        conn = WebSocketConnection(websocket)
        try:
            hub.register(conn)
        except RuntimeError:
            await websocket.close(code=1001)
            return
        try:
            # client frames are not part of the protocol, just drain them
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            conn.alive = False
            hub.unregister(conn.id)

    # static assets, only reached by paths no route above matched
    app.mount("/", StaticFiles(directory=static_dir or config.STATIC_DIR), name="static")

    return app


app = create_app()
