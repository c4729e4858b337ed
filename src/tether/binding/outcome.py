"""Resolution outcomes.

A resolver invocation always ends as one of two frozen values:
``Resolved`` carrying the domain value, or ``Failed`` carrying an
``ErrorInfo``. The dispatcher pattern-matches on them; failures never
travel as in-flight exceptions past the executor.
"""

from dataclasses import dataclass
from typing import Any, TypeAlias

from tether.errors import HTTPError


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Diagnostic record for a failed resolution.

    ``cause`` keeps the original exception (when there was one) so
    error handlers can inspect it. ``status`` is the HTTP status the
    error channel should answer with.
    """

    name: str
    raw_value: str
    message: str
    cause: BaseException | None = None
    status: int = 500

    @classmethod
    def from_exception(cls, name: str, raw_value: str, exc: BaseException) -> "ErrorInfo":
        """Build an ErrorInfo from a resolver exception.

        ``HTTPError`` causes keep their own status; anything else is a 500.
        """
        status = exc.status if isinstance(exc, HTTPError) else 500
        message = str(exc) or type(exc).__name__
        return cls(name=name, raw_value=raw_value, message=message, cause=exc, status=status)


@dataclass(frozen=True, slots=True)
class Resolved:
    """A successful resolution."""

    value: Any


@dataclass(frozen=True, slots=True)
class Failed:
    """A failed resolution."""

    error: ErrorInfo


Outcome: TypeAlias = Resolved | Failed
