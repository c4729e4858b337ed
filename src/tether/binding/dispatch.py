"""Dispatch coordinator — per-request resolution state machine.

For each request the dispatcher walks the route's bound parameters in
path order. Each one moves ``PENDING -> RESOLVING -> RESOLVED | FAILED``:

- every name is looked up before any resolver runs; a missing binding
  fails the request immediately
- parameters resolve one at a time, so a resolver can read the values
  resolved before it (``context`` argument or ``get_bound()``)
- the first failure stops the walk; later resolvers never run
- exactly one continuation runs: ``proceed(context)`` after the last
  parameter resolves, or ``fail(error_info)`` on the first failure

A cancelled dispatch runs neither continuation and never writes a late
result into its context.
"""

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

import anyio

from tether._internal.invoke import invoke
from tether.binding.executor import resolve
from tether.binding.outcome import ErrorInfo, Failed, Resolved
from tether.binding.registry import Binding, BindingRegistry
from tether.binding.store import RequestContext
from tether.context import bound_var
from tether.errors import BindingNotFoundError, ConfigurationError, DispatchCancelled

logger = logging.getLogger("tether.binding")

# Continuations handed in by the routing layer (sync or async)
Proceed = Callable[[RequestContext], Any]
Fail = Callable[[ErrorInfo], Any]


class ParamState(Enum):
    PENDING = "pending"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Dispatch:
    """Resolution of one request's bound parameters.

    Created fresh per request by ``Dispatcher.begin()`` and run once.
    ``cancel()`` may be called from another task while a resolver is
    suspended; the pending result is then discarded.
    """

    __slots__ = (
        "_cancelled",
        "_context",
        "_params",
        "_registry",
        "_request_info",
        "_started",
        "_states",
    )

    def __init__(
        self,
        registry: BindingRegistry,
        params: Sequence[tuple[str, str]],
        request_info: Any = None,
    ) -> None:
        names = [name for name, _ in params]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            msg = f"Path parameters bound more than once: {', '.join(duplicates)}"
            raise ConfigurationError(msg)

        self._registry = registry
        self._params: tuple[tuple[str, str], ...] = tuple(params)
        self._request_info = request_info
        self._context = RequestContext()
        self._states: dict[str, ParamState] = dict.fromkeys(names, ParamState.PENDING)
        self._cancelled = False
        self._started = False

    @property
    def context(self) -> RequestContext:
        return self._context

    @property
    def states(self) -> dict[str, ParamState]:
        """Snapshot of each parameter's state, in path order."""
        return dict(self._states)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Abandon this dispatch. Results that arrive later are dropped."""
        if self._cancelled:
            return
        self._cancelled = True
        self._context.close()
        for name, state in self._states.items():
            if state in (ParamState.PENDING, ParamState.RESOLVING):
                self._states[name] = ParamState.CANCELLED

    async def run(self, proceed: Proceed, fail: Fail) -> Any:
        """Resolve every parameter, then run exactly one continuation.

        Returns whatever the continuation returns. Raises
        ``DispatchCancelled`` if ``cancel()`` was called, and re-raises the
        event loop's cancellation exception if the task itself is cancelled.
        """
        if self._started:
            msg = "A Dispatch can only be run once."
            raise RuntimeError(msg)
        self._started = True

        token = bound_var.set(self._context)
        try:
            bindings = self._lookup_all()
            if isinstance(bindings, ErrorInfo):
                return await invoke(fail, bindings)

            for binding, (name, raw_value) in zip(bindings, self._params, strict=True):
                error = await self._resolve_one(binding, name, raw_value)
                if error is not None:
                    logger.warning(
                        "Resolution of %r failed for %r: %s",
                        name,
                        raw_value,
                        error.message,
                    )
                    self._context.close()
                    return await invoke(fail, error)

            self._raise_if_cancelled()
            return await invoke(proceed, self._context)
        finally:
            bound_var.reset(token)

    def _lookup_all(self) -> list[Binding] | ErrorInfo:
        bindings: list[Binding] = []
        for name, raw_value in self._params:
            try:
                bindings.append(self._registry.lookup(name))
            except BindingNotFoundError as exc:
                logger.error(
                    "Route parameter %r has no registered binding; "
                    "register one with @app.param(%r).",
                    name,
                    name,
                )
                self._states[name] = ParamState.FAILED
                return ErrorInfo(name=name, raw_value=raw_value, message=str(exc), cause=exc)
        return bindings

    async def _resolve_one(self, binding: Binding, name: str, raw_value: str) -> ErrorInfo | None:
        self._raise_if_cancelled()
        self._states[name] = ParamState.RESOLVING
        logger.debug("resolving %r from %r", name, raw_value)

        try:
            outcome = await resolve(binding, raw_value, self._request_info, self._context)
        except anyio.get_cancelled_exc_class():
            self.cancel()
            raise

        # Result arrived after the request went away: drop it.
        self._raise_if_cancelled()

        match outcome:
            case Resolved(value=value):
                self._context.set(name, value)
                self._states[name] = ParamState.RESOLVED
                return None
            case Failed(error=error):
                self._states[name] = ParamState.FAILED
                return error

    def _raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise DispatchCancelled("Request cancelled while resolving path parameters")

    def __repr__(self) -> str:
        states = ", ".join(f"{name}={state.value}" for name, state in self._states.items())
        return f"<Dispatch {states}>"


class Dispatcher:
    """Resolve bound path parameters against a ``BindingRegistry``.

    Stateless apart from the registry it reads, so one instance serves
    every request concurrently::

        dispatcher = Dispatcher(registry)
        result = await dispatcher.dispatch(
            [("user", "1"), ("post", "7")],
            request,
            proceed=render,
            fail=report,
        )
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: BindingRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    def begin(self, params: Sequence[tuple[str, str]], request_info: Any = None) -> Dispatch:
        """Create the resolution state for one request."""
        return Dispatch(self._registry, params, request_info)

    async def dispatch(
        self,
        params: Sequence[tuple[str, str]],
        request_info: Any = None,
        *,
        proceed: Proceed,
        fail: Fail,
    ) -> Any:
        """Resolve *params* in order and run ``proceed`` or ``fail``."""
        return await self.begin(params, request_info).run(proceed, fail)
