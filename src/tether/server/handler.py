"""ASGI handler — translates ASGI scope/messages to tether types.

The only component that touches raw ASGI directly. Converts the scope to
a typed Request, runs middleware, routing, and path-parameter resolution,
and sends the Response back through ASGI send().

Resolution plugs into the pipeline through two continuations handed to
the dispatcher: ``proceed`` calls the route handler with the resolved
values, ``fail`` raises ``ResolutionFailure`` so the request drops into
the error stage below instead of reaching the handler.

The handler never watches ``receive`` for ``http.disconnect``. Resolution
stops early only when the server cancels the request task; servers that
instead report a disconnect on ``receive`` and keep the task running
will see resolvers and the handler run to completion for a gone client.
"""

import inspect
import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from tether._internal.asgi import Receive, Scope, Send
from tether._internal.invoke import invoke
from tether.binding.dispatch import Dispatcher
from tether.binding.outcome import ErrorInfo
from tether.binding.store import RequestContext
from tether.context import request_var
from tether.errors import DispatchCancelled, HTTPError, ResolutionFailure
from tether.http.request import Request
from tether.http.response import Response
from tether.middleware.protocol import Next
from tether.routing.route import RouteMatch
from tether.routing.router import Router
from tether.server.errors import (
    ErrorHandlers,
    handle_http_error,
    handle_internal_error,
    handle_resolution_failure,
)
from tether.server.negotiation import negotiate
from tether.server.sender import send_response

logger = logging.getLogger("tether.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    dispatcher: Dispatcher,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    debug: bool,
    max_content_length: int | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    try:

        async def dispatch(req: Request) -> Response:
            _check_content_length(req, max_content_length)
            match = router.match(req.method, req.path)
            return await _dispatch_route(match, req.with_path_params(match.path_params), dispatcher)

        handler = dispatch
        for mw in reversed(middleware):

            async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except ResolutionFailure as exc:
        response = await handle_resolution_failure(exc, request, error_handlers, debug)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except DispatchCancelled:
        logger.debug("%s %s cancelled during resolution; no response sent", request.method, request.path)
        return
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)

    await send_response(response, send)


def _check_content_length(request: Request, limit: int | None) -> None:
    if limit is None:
        return
    value = request.headers.get("content-length")
    if value is not None and value.isdigit() and int(value) > limit:
        raise HTTPError(status=413, detail=f"Request body exceeds {limit} bytes")


async def _dispatch_route(match: RouteMatch, request: Request, dispatcher: Dispatcher) -> Response:
    """Resolve the route's bound parameters, then call its handler."""
    handler = match.route.handler

    async def proceed(context: RequestContext) -> Response:
        kwargs = _build_handler_kwargs(handler, request, match.path_params, context)
        result = await invoke(handler, **kwargs)
        return negotiate(result)

    def fail(info: ErrorInfo) -> Response:
        raise ResolutionFailure(info)

    return await dispatcher.dispatch(match.bound_params, request, proceed=proceed, fail=fail)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
    context: RequestContext,
) -> dict[str, Any]:
    """Inspect the handler signature and build its keyword arguments.

    Resolution order per parameter:
    1. ``request`` (by name or ``Request`` annotation)
    2. the whole ``RequestContext`` (by annotation)
    3. a resolved path parameter (by name)
    4. a raw path parameter (by name, converted to the annotated type)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif param.annotation is RequestContext:
            kwargs[name] = context
        elif name in context:
            kwargs[name] = context[name]
        elif name in path_params:
            value = path_params[name]
            if param.annotation is not inspect.Parameter.empty and param.annotation is not str:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
