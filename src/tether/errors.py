"""Tether exception hierarchy.

Shared across the binding registry, dispatcher, router, App, and ASGI
handler so every module raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tether.binding.outcome import ErrorInfo


class TetherError(Exception):
    """Base for all tether-specific errors."""


class ConfigurationError(TetherError):
    """Raised when app configuration is invalid.

    Typically caught during ``App._freeze()`` at startup.
    """


class InvalidBindingError(ConfigurationError):
    """A binding registration was rejected.

    Raised for an empty name, a missing or non-callable resolver, a
    duplicate name, or a registration after the registry froze. Fatal
    at startup: the app should not begin serving.
    """


class BindingNotFoundError(ConfigurationError):
    """A route placeholder references a name with no registered binding.

    A configuration defect. At request time the dispatcher reports it
    through the error channel before any resolver runs.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No binding registered for path parameter {name!r}")


class ResolutionFailure(TetherError):  # noqa: N818 — reads as the outcome it carries
    """A bound path parameter could not be resolved.

    Raised by the host's failure continuation so the ASGI pipeline
    routes the request to its error stage instead of the handler.
    Carries the ``ErrorInfo`` produced by the executor.
    """

    def __init__(self, info: ErrorInfo) -> None:
        self.info = info
        super().__init__(info.message)

    @property
    def status(self) -> int:
        return self.info.status


class DispatchCancelled(TetherError):  # noqa: N818
    """The request was cancelled while its parameters were resolving."""


@dataclass(frozen=True, slots=True)
class HTTPError(TetherError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, handlers, or resolvers. The ASGI
    handler catches these and dispatches to the matching ``@app.error()``
    handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
