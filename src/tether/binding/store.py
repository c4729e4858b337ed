"""Per-request store of resolved path parameters.

A ``RequestContext`` is created at the start of each request and only
ever grows: a key, once set, is never replaced or removed. Handlers and
later resolvers read it as a plain ``Mapping``.
"""

from collections.abc import Iterator, Mapping
from typing import Any


class RequestContext(Mapping[str, Any]):
    """Additive, request-scoped mapping of parameter name to resolved value.

    Only the dispatcher writes to it (via ``set``). Once ``close()`` is
    called the context refuses further writes; the dispatcher closes it
    when the request is cancelled so late results cannot land.
    """

    __slots__ = ("_closed", "_values")

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._closed = False

    def set(self, name: str, value: Any) -> None:
        """Store *value* under *name*.

        Raises ``KeyError`` if *name* already holds a value, and
        ``RuntimeError`` if the context is closed.
        """
        if self._closed:
            msg = f"Cannot set {name!r}: the request context is closed."
            raise RuntimeError(msg)
        if name in self._values:
            msg = f"{name!r} is already resolved in this request"
            raise KeyError(msg)
        self._values[name] = value

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RequestContext({self._values!r})"

    def as_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the resolved values."""
        return dict(self._values)
