"""Buffered response writer handed to every handler.

A handler (or middleware) sets headers, optionally calls
``write_header(status)``, then ``write()``s body chunks. Nothing reaches the
ASGI server until the request is fully handled, so middleware can still
write before and after the handler it wraps.
"""

import json
import logging
from typing import Any

from muxstack.http.headers import MutableHeaders

logger = logging.getLogger("muxstack.http")


class ResponseWriter:
    """Collects status, headers and body for one response.

    The first ``write_header`` call fixes the status; later calls are
    ignored with a warning. ``write`` without a prior ``write_header``
    implies ``200``.
    """

    __slots__ = ("_chunks", "_status", "headers")

    def __init__(self) -> None:
        self.headers = MutableHeaders()
        self._status: int | None = None
        self._chunks: list[bytes] = []

    @property
    def status(self) -> int:
        """Status that will be sent; ``200`` until something says otherwise."""
        return self._status if self._status is not None else 200

    @property
    def header_written(self) -> bool:
        return self._status is not None

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    def write_header(self, status: int) -> None:
        if self._status is not None:
            logger.warning(
                "superfluous write_header(%d) ignored; status already %d", status, self._status
            )
            return
        if not 100 <= status <= 999:
            msg = f"invalid HTTP status code: {status}"
            raise ValueError(msg)
        self._status = status

    def write(self, data: str | bytes) -> int:
        """Append *data* to the body. Returns the number of bytes written."""
        if self._status is None:
            self._status = 200
        chunk = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self._chunks.append(chunk)
        return len(chunk)

    def write_json(self, payload: Any, status: int = 200) -> int:
        """Serialize *payload* as the JSON body with the matching content type."""
        self.headers.set("Content-Type", "application/json")
        self.write_header(status)
        return self.write(json.dumps(payload))


def error(writer: ResponseWriter, detail: str, status: int) -> None:
    """Reply with a plain-text error message.

    Mirrors what the multiplexer writes for unmatched requests; handlers use
    it for their own error replies.
    """
    writer.headers.delete("Content-Length")
    writer.headers.set("Content-Type", "text/plain; charset=utf-8")
    writer.headers.set("X-Content-Type-Options", "nosniff")
    writer.write_header(status)
    writer.write(detail + "\n")
