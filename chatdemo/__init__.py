"""Demo chat server: echo endpoints, static files and WebSocket/SSE broadcast."""
