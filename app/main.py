"""ASGI entry point: ``uvicorn main:server_app --host 0.0.0.0 --port 8000``."""

from server import server

server_app = server.handler
