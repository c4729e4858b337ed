"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Middleware wraps routing and parameter resolution, so it runs before
any resolver sees the request.
"""

from tether.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
