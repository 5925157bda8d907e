"""ASGI glue between a host server and the multiplexer."""

from muxstack.server.handler import handle_request
from muxstack.server.sender import send_written

__all__ = ["handle_request", "send_written"]
