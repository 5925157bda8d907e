"""ASGI response sending — flushes a ResponseWriter as ASGI messages."""

from muxstack._internal.asgi import Send
from muxstack.http.writer import ResponseWriter


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_written(
    writer: ResponseWriter,
    send: Send,
    *,
    method: str = "GET",
    default_content_type: str = "text/plain; charset=utf-8",
) -> None:
    """Translate everything written to *writer* into ASGI send() calls.

    ``content-length`` always reflects the written body, even for ``HEAD``
    where the body itself is dropped.
    """
    body = writer.body
    headers = writer.headers
    if body and "content-type" not in headers:
        headers.set("Content-Type", default_content_type)
    headers.delete("Content-Length")

    if not _body_allowed(writer.status):
        body = b""
    else:
        headers.set("Content-Length", str(len(body)))
    if method == "HEAD":
        body = b""

    await send(
        {
            "type": "http.response.start",
            "status": writer.status,
            "headers": headers.raw(),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
