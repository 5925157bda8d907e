"""ASGI handler — translates ASGI scope/messages to muxstack types.

The only component that touches raw ASGI directly. Builds a Request and a
ResponseWriter, dispatches through the multiplexer and flushes the writer.
Exceptions raised by handlers or middleware are not caught here; the ASGI
server reports them per its own conventions.
"""

from muxstack._internal.asgi import Receive, Scope, Send
from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter
from muxstack.routing.mux import ServeMux
from muxstack.server.sender import send_written


async def handle_request(scope: Scope, receive: Receive, send: Send, *, mux: ServeMux) -> None:
    """Process a single HTTP request through the multiplexer."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    writer = ResponseWriter()
    await mux.serve(request, writer)
    await send_written(
        writer,
        send,
        method=request.method,
        default_content_type=mux.config.default_content_type,
    )
