"""Middleware — handler-to-handler transformers.

A middleware is any callable matching::

    def mw(next: Next) -> Handler

The core ships the composition machinery only; logging, auth and the like
are written by applications.
"""

from muxstack.middleware.chain import compose
from muxstack.middleware.protocol import Handler, Middleware, Next

__all__ = ["Handler", "Middleware", "Next", "compose"]
