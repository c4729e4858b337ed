"""Compiled router with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes.
"""

import re
from dataclasses import dataclass, field

from tether.errors import ConfigurationError, MethodNotAllowed, NotFound
from tether.routing.params import CONVERTERS
from tether.routing.route import PathSegment, Route, RouteMatch

_FLASK_PARAM = re.compile(r"<[^<>/]+>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"                -> [PathSegment("users")]
        "/users/{user}"         -> [..., PathSegment("{user}", is_param=True, param_name="user")]
        "/users/{id:int}"       -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{rest:path}"    -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` syntax, unknown
    converters, a placeholder name used twice, or a ``path`` converter
    that is not the last segment.
    """
    if _FLASK_PARAM.search(path):
        msg = f"Route {path!r} uses <param> syntax; tether expects {{param}}."
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue

        param_name, _, param_type = part[1:-1].partition(":")
        param_type = param_type or "str"
        if not param_name.isidentifier():
            msg = f"Route {path!r}: {param_name!r} is not a valid parameter name."
            raise ConfigurationError(msg)
        if param_type not in CONVERTERS:
            msg = (
                f"Route {path!r}: unknown converter {param_type!r} for {param_name!r}. "
                f"Available: {', '.join(sorted(CONVERTERS))}."
            )
            raise ConfigurationError(msg)
        if param_name in seen:
            msg = f"Route {path!r} declares {param_name!r} more than once."
            raise ConfigurationError(msg)
        seen.add(param_name)
        segments.append(
            PathSegment(value=part, is_param=True, param_name=param_name, param_type=param_type)
        )

    if segments and any(s.is_param and s.param_type == "path" for s in segments[:-1]):
        msg = f"Route {path!r}: a path converter must be the last segment."
        raise ConfigurationError(msg)
    return segments


def param_names(path: str) -> tuple[str, ...]:
    """Placeholder names of *path*, in declaration order."""
    return tuple(s.param_name for s in parse_path(path) if s.is_param and s.param_name)


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_edges", "routes_by_method")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # Parameter edges, tried in registration order
        self.param_edges: list[_ParamEdge] = []
        self.catch_all: _CatchAllEdge | None = None
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """Consumes the rest of the path."""

    param_name: str
    routes_by_method: dict[str, Route] = field(default_factory=dict)


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/users/{user}", handler, frozenset({"GET"}), bind=("user",)))
        router.compile()
        match = router.match("GET", "/users/42")
        match.bound_params  # [("user", "42")]
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        declared = {s.param_name for s in segments if s.is_param}
        missing = [name for name in route.bind if name not in declared]
        if missing:
            msg = (
                f"Route {route.path!r} binds {', '.join(map(repr, missing))} "
                "but the path has no such placeholder."
            )
            raise ConfigurationError(msg)

        node = self._root
        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path")
                self._register(node.catch_all.routes_by_method, route)
                return

            if seg.is_param:
                node = self._param_node(node, seg)
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        self._register(node.routes_by_method, route)

    def _param_node(self, node: _TrieNode, seg: PathSegment) -> _TrieNode:
        for edge in node.param_edges:
            if edge.param_name == seg.param_name and edge.param_type == seg.param_type:
                return edge.node
        edge = _ParamEdge(
            param_name=seg.param_name or "",
            param_type=seg.param_type,
            regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
            node=_TrieNode(),
        )
        node.param_edges.append(edge)
        return edge.node

    def _register(self, table: dict[str, Route], route: Route) -> None:
        for method in route.methods:
            if method in table:
                msg = f"Duplicate route: {method} {route.path!r} is already registered."
                raise ConfigurationError(msg)
            table[method] = route
        self._routes.append(route)

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Raises ``NotFound`` if no route matches the path, and
        ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes_by_method, params = result
        route = routes_by_method.get(method)
        if route is None and method == "HEAD":
            route = routes_by_method.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(routes_by_method))
        return RouteMatch(route=route, path_params=params)

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        if index == len(parts):
            if node.routes_by_method:
                return node.routes_by_method, params
            return None

        part = parts[index]

        # 1. Static child (exact match)
        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, params)
            if result is not None:
                return result

        # 2. Parameter edges
        for edge in node.param_edges:
            if edge.regex.match(part):
                result = self._match_node(
                    edge.node, parts, index + 1, {**params, edge.param_name: part}
                )
                if result is not None:
                    return result

        # 3. Catch-all
        if node.catch_all is not None and node.catch_all.routes_by_method:
            remaining = "/".join(parts[index:])
            return node.catch_all.routes_by_method, {**params, node.catch_all.param_name: remaining}

        return None
