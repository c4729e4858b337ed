"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: the current ``Request`` for this task.
- ``bound_var``: the ``RequestContext`` of resolved path parameters.

Both are set by the handler pipeline (the bound context by the
dispatcher) and reset after each request. Accessing them outside a
request raises ``LookupError``.

``ContextVar`` is task-local under asyncio, so concurrent requests never
see each other's values.
"""

from contextvars import ContextVar
from typing import Any

from tether.binding.store import RequestContext
from tether.http.request import Request

# -- Request context --

request_var: ContextVar[Request] = ContextVar("tether_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


# -- Resolved path parameters --

bound_var: ContextVar[RequestContext] = ContextVar("tether_bound")
"""Resolved values for the current request. Set by the dispatcher."""


def get_bound() -> RequestContext:
    """Return the resolved path parameters of the current request.

    Raises ``LookupError`` if no dispatch is running in this context.
    """
    return bound_var.get()


def get_bound_value(name: str, default: Any = None) -> Any:
    """Return one resolved value, or *default* when missing or outside a request."""
    try:
        return bound_var.get().get(name, default)
    except LookupError:
        return default
