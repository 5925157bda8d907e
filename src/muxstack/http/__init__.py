"""Request, response writer and header types."""

from muxstack.http.headers import Headers, MutableHeaders
from muxstack.http.query import QueryParams
from muxstack.http.request import Request
from muxstack.http.writer import ResponseWriter, error

__all__ = [
    "Headers",
    "MutableHeaders",
    "QueryParams",
    "Request",
    "ResponseWriter",
    "error",
]
