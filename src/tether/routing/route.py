"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Route handler: any function; its signature decides what it receives
Handler = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``      (is_param=False)
    Param:   ``/{user}``     (is_param=True, param_name="user")
    Typed:   ``/{id:int}``   (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``bind`` lists the placeholders resolved through bindings before the
    handler runs, in path order. Placeholders not listed reach the
    handler as raw strings.
    """

    path: str
    handler: Handler
    methods: frozenset[str]
    name: str | None = None
    bind: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]

    @property
    def bound_params(self) -> list[tuple[str, str]]:
        """``(name, raw_value)`` pairs to resolve, in path order."""
        return [(name, self.path_params[name]) for name in self.route.bind]
