import os
from pathlib import Path

PORT = int(os.getenv("PORT", "3000"))
HOST = os.getenv("HOST", "0.0.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

# Assets for unmatched paths, the chat page by default
STATIC_DIR = os.getenv("STATIC_DIR", str(Path(__file__).parent / "mychat"))

# Seconds a single client write may take before the client is dropped
WRITE_TIMEOUT = float(os.getenv("WRITE_TIMEOUT", "5"))

# Idle seconds before /sse sends a keep-alive comment
SSE_PING_INTERVAL = float(os.getenv("SSE_PING_INTERVAL", "15"))
