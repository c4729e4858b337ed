"""Tether — resolve named path parameters into domain objects.

Register a resolver per parameter name; every route placeholder with
that name is resolved (in path order) before the handler runs, and a
failed resolution goes to the error channel instead.

Basic usage::

    from tether import App, NotFound

    app = App()

    @app.param("user")
    async def load_user(raw: str) -> User:
        user = await users.get(int(raw))
        if user is None:
            raise NotFound(f"No user {raw}")
        return user

    @app.param("post")
    async def load_post(raw: str, request, context) -> Post:
        return await posts.get(context["user"].id, int(raw))

    @app.route("/users/{user}/posts/{post}")
    def show(user: User, post: Post):
        return {"author": user.name, "title": post.title}

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Binding",
    "BindingNotFoundError",
    "BindingRegistry",
    "ConfigurationError",
    "Dispatcher",
    "ErrorInfo",
    "Failed",
    "HTTPError",
    "InvalidBindingError",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "RequestContext",
    "Resolved",
    "ResolutionFailure",
    "Response",
    "TetherError",
    "get_bound",
    "get_request",
]

_LAZY: dict[str, str] = {
    "App": "tether.app",
    "AppConfig": "tether.config",
    "Binding": "tether.binding.registry",
    "BindingRegistry": "tether.binding.registry",
    "Dispatcher": "tether.binding.dispatch",
    "ErrorInfo": "tether.binding.outcome",
    "Failed": "tether.binding.outcome",
    "Resolved": "tether.binding.outcome",
    "RequestContext": "tether.binding.store",
    "Request": "tether.http.request",
    "Response": "tether.http.response",
    "get_bound": "tether.context",
    "get_request": "tether.context",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tether`` fast while providing a clean top-level API.
    """
    if name in _LAZY:
        import importlib

        return getattr(importlib.import_module(_LAZY[name]), name)

    if name in (
        "BindingNotFoundError",
        "ConfigurationError",
        "HTTPError",
        "InvalidBindingError",
        "MethodNotAllowed",
        "NotFound",
        "ResolutionFailure",
        "TetherError",
    ):
        from tether import errors

        return getattr(errors, name)

    msg = f"module 'tether' has no attribute {name!r}"
    raise AttributeError(msg)
