"""The tether application.

Collects routes, path-parameter bindings, error handlers, and middleware
during setup, then freezes them into an immutable runtime on the first
ASGI call (or lifespan startup).
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tether._internal.asgi import Receive, Scope, Send
from tether._internal.invoke import invoke
from tether.binding.dispatch import Dispatcher
from tether.binding.registry import Binding, BindingRegistry, Resolver
from tether.config import AppConfig
from tether.errors import ConfigurationError
from tether.middleware.protocol import Middleware
from tether.routing.route import Handler, Route
from tether.routing.router import Router, param_names
from tether.server.errors import ErrorHandler
from tether.server.handler import handle_request

logger = logging.getLogger("tether.app")


@dataclass(frozen=True, slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None
    bind: tuple[str, ...] | None


class App:
    """The tether application.

    Mutable during setup (routes, bindings, middleware). Frozen at
    runtime when ``__call__()`` is first invoked; the binding registry
    freezes with it, so no binding can change while requests are served.

    Usage::

        app = App()

        @app.param("user")
        async def load_user(raw: str) -> User:
            user = await users.get(int(raw))
            if user is None:
                raise NotFound(f"No user {raw}")
            return user

        @app.route("/users/{user}")
        def show(user: User):
            return {"name": user.name}
    """

    __slots__ = (
        "_bindings",
        "_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        bindings: BindingRegistry | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._bindings: BindingRegistry = bindings if bindings is not None else BindingRegistry()
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during _freeze()
        self._router: Router | None = None
        self._dispatcher: Dispatcher | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        bind: Iterable[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name.
            bind: Placeholders to resolve through bindings before the
                handler runs. ``None`` (the default) binds every
                placeholder that has a registered binding when the app
                freezes; an explicit iterable binds exactly those names.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(
                _PendingRoute(path, func, methods, name, tuple(bind) if bind is not None else None)
            )
            return func

        return decorator

    # -- Bindings --

    @property
    def bindings(self) -> BindingRegistry:
        """The app's binding registry."""
        return self._bindings

    def param(
        self,
        name: str,
        *,
        offload: bool = False,
        arity: int | None = None,
    ) -> Callable[[Resolver], Resolver]:
        """Register a path-parameter resolver via decorator.

        The resolver receives ``(raw_value[, request[, context]])`` and
        returns the domain value, or raises to fail the request. Raise an
        ``HTTPError`` (e.g. ``NotFound``) to choose the response status.
        Set *offload* for blocking sync resolvers to run them in a
        worker thread. The number of arguments is read from the
        resolver's signature unless *arity* is given.

        Raises ``InvalidBindingError`` immediately for a bad or duplicate
        registration.
        """

        def decorator(func: Resolver) -> Resolver:
            self.add_binding(name, func, offload=offload, arity=arity)
            return func

        return decorator

    def add_binding(
        self,
        name: str,
        resolver: Resolver,
        *,
        offload: bool = False,
        arity: int | None = None,
    ) -> Binding:
        """Register a path-parameter resolver."""
        self._check_not_frozen()
        return self._bindings.register(name, resolver, offload=offload, arity=arity)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        ``@app.error(ResolutionFailure)`` catches every failed resolution;
        ``@app.error(404)`` also receives resolutions that failed with a
        404-status ``HTTPError``.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a startup hook (sync or async), run on lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a shutdown hook (sync or async), run on lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        assert self._dispatcher is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            dispatcher=self._dispatcher,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request, so
        configuration errors (bad routes, missing strict bindings) abort
        startup instead of surfacing on a live request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Freeze once, even if several workers hit the first request together."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        if self.config.log_level is not None:
            logging.getLogger("tether").setLevel(self.config.log_level.upper())

        # 1. Compile route table, deciding which placeholders each route binds
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            route = Route(
                path=pending.path,
                handler=pending.handler,
                methods=methods,
                name=pending.name,
                bind=self._bound_names(pending),
            )
            router.add(route)
        router.compile()
        self._router = router

        # 2. Bindings are read-only from here on
        self._bindings.freeze()
        self._dispatcher = Dispatcher(self._bindings)

        # 3. Capture middleware as immutable tuple
        self._middleware = tuple(self._middleware_list)

        self._frozen = True
        logger.debug(
            "app frozen: %d routes, bindings %s",
            len(router.routes),
            ", ".join(self._bindings.names) or "(none)",
        )

    def _bound_names(self, pending: _PendingRoute) -> tuple[str, ...]:
        """Placeholders of *pending* to resolve, in path order."""
        names = param_names(pending.path)
        if pending.bind is None:
            return tuple(n for n in names if n in self._bindings)

        # Explicit names: path order first, strays last so the router rejects them
        bind = tuple(n for n in names if n in pending.bind)
        bind += tuple(n for n in pending.bind if n not in names)

        unregistered = [n for n in bind if n in names and n not in self._bindings]
        if unregistered:
            listed = ", ".join(map(repr, unregistered))
            if self.config.strict_bindings:
                msg = f"Route {pending.path!r} binds {listed} but no binding is registered."
                raise ConfigurationError(msg)
            logger.warning(
                "Route %r binds %s with no registered binding; "
                "requests to it will fail until one is registered.",
                pending.path,
                listed,
            )
        return bind

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, bindings, and middleware before the first request."
            )
            raise RuntimeError(msg)
