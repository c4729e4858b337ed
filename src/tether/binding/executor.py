"""Resolution executor — run a binding's resolver and capture the outcome.

Resolvers can be ``def`` or ``async def``, may return a plain value or an
explicit ``Resolved``/``Failed``, and may raise. Whatever happens, the
caller gets back an ``Outcome``. The one thing never captured is
cancellation: it propagates so the dispatcher can drop the request.

Usage::

    from tether.binding.executor import resolve

    outcome = await resolve(binding, "42", request)
    match outcome:
        case Resolved(value):
            ...
        case Failed(error):
            ...
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any

import anyio.to_thread

from tether.binding.outcome import ErrorInfo, Failed, Outcome, Resolved
from tether.binding.registry import Binding

logger = logging.getLogger("tether.binding")


async def _call(binding: Binding, args: tuple[Any, ...]) -> Any:
    if binding.offload:
        result = await anyio.to_thread.run_sync(binding.resolver, *args)
    else:
        result = binding.resolver(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def resolve(
    binding: Binding,
    raw_value: str,
    request_info: Any = None,
    context: Mapping[str, Any] | None = None,
) -> Outcome:
    """Invoke ``binding.resolver`` and return its ``Outcome``.

    The resolver receives ``(raw_value, request_info, context)`` truncated
    to the arity recorded at registration. ``context`` holds the values
    resolved so far in the same request.
    """
    args = (raw_value, request_info, context if context is not None else {})[: binding.arity]
    try:
        result = await _call(binding, args)
    except Exception as exc:
        logger.debug("resolver for %r raised on %r: %r", binding.name, raw_value, exc)
        return Failed(ErrorInfo.from_exception(binding.name, raw_value, exc))

    if isinstance(result, Resolved | Failed):
        return result
    return Resolved(result)
