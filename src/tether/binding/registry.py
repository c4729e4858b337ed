"""Binding registry — path parameter name to resolver table.

Bindings are registered during setup and the registry is frozen when
the app starts serving. After that it is read-only, so concurrent
lookups from many in-flight requests need no locking.
"""

import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from tether.errors import BindingNotFoundError, InvalidBindingError

# Resolver — ``(raw_value[, request[, context]]) -> value | Outcome``
Resolver = Callable[..., Any]

_MAX_ARITY = 3


@dataclass(frozen=True, slots=True)
class Binding:
    """A frozen association between a path parameter and its resolver.

    ``arity`` is the number of positional arguments the resolver takes
    (1: raw value, 2: plus request, 3: plus the request context).
    """

    name: str
    resolver: Resolver
    arity: int = 2
    offload: bool = False


def _resolver_arity(name: str, resolver: Resolver) -> int:
    """Count the positional arguments *resolver* accepts, capped at 3."""
    try:
        sig = inspect.signature(resolver)
    except (TypeError, ValueError):
        msg = (
            f"Cannot inspect the signature of the resolver for {name!r} ({resolver!r}). "
            "Pass arity= explicitly or wrap it, e.g. lambda raw: int(raw)."
        )
        raise InvalidBindingError(msg) from None

    positional = 0
    required = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return _MAX_ARITY
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
            if param.default is inspect.Parameter.empty:
                required += 1
        elif param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            msg = f"Resolver for {name!r} has a required keyword-only argument {param.name!r}."
            raise InvalidBindingError(msg)

    if positional == 0:
        msg = f"Resolver for {name!r} must accept the raw path value as its first argument."
        raise InvalidBindingError(msg)
    if required > _MAX_ARITY:
        msg = (
            f"Resolver for {name!r} requires {required} arguments; "
            "resolvers take (raw_value[, request[, context]])."
        )
        raise InvalidBindingError(msg)
    return min(positional, _MAX_ARITY)


class BindingRegistry:
    """Ordered, validated table of bindings keyed by name.

    Usage::

        registry = BindingRegistry()
        registry.register("user", load_user)
        registry.freeze()
        binding = registry.lookup("user")

    Registration order is kept for enumeration only. The order in which
    a request resolves its parameters comes from the route path.
    """

    __slots__ = ("_bindings", "_frozen")

    def __init__(self) -> None:
        self._bindings: dict[str, Binding] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        resolver: Resolver,
        *,
        offload: bool = False,
        arity: int | None = None,
    ) -> Binding:
        """Add a binding for *name*.

        *arity* overrides signature detection; builtins such as ``int``
        have no inspectable signature and need ``arity=1``.

        Raises ``InvalidBindingError`` when *name* is empty, *resolver* is
        missing or not callable, *name* is already taken, or the registry
        is frozen. A rejected registration leaves the table untouched.
        """
        if self._frozen:
            msg = f"Cannot register binding {name!r}: the registry is frozen."
            raise InvalidBindingError(msg)
        if not isinstance(name, str) or not name:
            msg = f"Binding name must be a non-empty string, got {name!r}."
            raise InvalidBindingError(msg)
        if resolver is None:
            msg = f"Binding {name!r} has no resolver."
            raise InvalidBindingError(msg)
        if not callable(resolver):
            msg = f"Resolver for {name!r} is not callable: {resolver!r}."
            raise InvalidBindingError(msg)
        if name in self._bindings:
            existing = self._bindings[name].resolver
            msg = (
                f"Binding {name!r} is already registered "
                f"(to {getattr(existing, '__qualname__', existing)!r})."
            )
            raise InvalidBindingError(msg)
        if arity is not None and not 1 <= arity <= _MAX_ARITY:
            msg = f"Arity for {name!r} must be 1, 2 or 3, got {arity!r}."
            raise InvalidBindingError(msg)

        binding = Binding(
            name=name,
            resolver=resolver,
            arity=arity if arity is not None else _resolver_arity(name, resolver),
            offload=offload,
        )
        self._bindings[name] = binding
        return binding

    def binding(
        self,
        name: str,
        *,
        offload: bool = False,
        arity: int | None = None,
    ) -> Callable[[Resolver], Resolver]:
        """Register a resolver via decorator."""

        def decorator(func: Resolver) -> Resolver:
            self.register(name, func, offload=offload, arity=arity)
            return func

        return decorator

    def lookup(self, name: str) -> Binding:
        """Return the binding for *name*.

        Raises ``BindingNotFoundError`` if nothing is registered under it.
        """
        try:
            return self._bindings[name]
        except KeyError:
            raise BindingNotFoundError(name) from None

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> tuple[str, ...]:
        """Registered names in registration order."""
        return tuple(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<BindingRegistry {state} {list(self._bindings)!r}>"
