"""Router configuration.

RouterConfig is a frozen dataclass shared by a root router and every group
derived from it.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    Override what you need::

        config = RouterConfig(threaded_sync_handlers=False)
        router = Router(config=config)
    """

    # Content type applied when a handler writes a body without setting one
    default_content_type: str = "text/plain; charset=utf-8"

    # Bodies written by the multiplexer for unmatched requests
    not_found_body: str = "404 page not found"
    method_not_allowed_body: str = "Method Not Allowed"

    # Run plain ``def`` handlers in a worker thread instead of on the event loop
    threaded_sync_handlers: bool = True
