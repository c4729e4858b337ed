"""Invoke helpers — call sync or async callables uniformly.

Route handlers, error handlers, and dispatch continuations can be
``def`` or ``async def``. Any code that calls a user-provided callable
must handle both cases. This module keeps that check in one place.

Usage::

    from tether._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
