"""Error channel for tether requests.

Maps routing errors, failed path-parameter resolution, and unexpected
exceptions to Response objects, using registered error handlers or
plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from tether._internal.invoke import invoke
from tether.errors import BindingNotFoundError, HTTPError, ResolutionFailure
from tether.http.request import Request
from tether.http.response import Response
from tether.server.negotiation import negotiate

logger = logging.getLogger("tether.server")

# Error handler: takes (), (request,) or (request, exc) and returns a response value
ErrorHandler = Callable[..., Any]
ErrorHandlers = dict[int | type, ErrorHandler]


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Error {status}"


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc)
    arguments, and may be sync or async.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, request, exc)
    elif len(params) == 1:
        result = await invoke(handler, request)
    else:
        result = await invoke(handler)

    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or _phrase(exc.status)
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_resolution_failure(
    exc: ResolutionFailure,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Answer a request whose bound path parameter failed to resolve.

    Handler lookup order: ``ResolutionFailure`` (or subclass) handler, a
    handler for the original cause's type, then one for the status code.
    Without a handler the response is a plain-text body with the failure's
    status; debug mode adds which parameter failed and why.
    """
    info = exc.info
    if isinstance(info.cause, BindingNotFoundError):
        logger.error(
            "%s %s — route parameter %r has no binding",
            request.method,
            request.path,
            info.name,
        )
    else:
        logger.info(
            "%d %s %s — could not resolve %r from %r: %s",
            info.status,
            request.method,
            request.path,
            info.name,
            info.raw_value,
            info.message,
        )

    handler = error_handlers.get(type(exc))
    if handler is None and info.cause is not None:
        handler = error_handlers.get(type(info.cause))
    if handler is None:
        handler = error_handlers.get(info.status)

    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(info.status)
        return response

    if debug:
        body = f"{info.status}: could not resolve {info.name!r} from {info.raw_value!r}: {info.message}"
    else:
        body = _phrase(info.status)

    response = Response(body=body, status=info.status)
    if isinstance(info.cause, HTTPError):
        for name, value in info.cause.headers:
            response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        return Response(body=f"500: {type(exc).__name__}: {exc}", status=500)
    return Response(body="Internal Server Error", status=500)
