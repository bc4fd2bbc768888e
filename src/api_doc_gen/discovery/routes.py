"""Route table abstraction and handler resolution."""

import inspect
import logging
from typing import Any, Callable, Iterable, Protocol

from pydantic import BaseModel, ConfigDict, Field

from api_doc_gen.discovery.models import import_object

logger = logging.getLogger(__name__)


class Route(BaseModel):
    """One registered route.

    ``action`` is ``(HandlerClass, "method")``, ``("pkg.mod.Handler", "method")``
    or ``"pkg.mod.Handler@method"``; anything else cannot be documented.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])
    action: Any = None

    @property
    def method(self) -> str:
        return (self.methods[0] if self.methods else "GET").upper()

    @property
    def uri(self) -> str:
        return self.path.lstrip("/")


class RouteRegistry(Protocol):
    def list(self) -> Iterable[Route]: ...


class StaticRouteRegistry:
    """In-memory route table, in registration order."""

    def __init__(self, routes: Iterable[Route] | None = None):
        self._routes: list[Route] = list(routes or [])

    def add(self, path: str, methods: str | list[str], action: Any = None) -> Route:
        if isinstance(methods, str):
            methods = [methods]
        route = Route(path=path, methods=[method.upper() for method in methods], action=action)
        self._routes.append(route)
        return route

    def get(self, path: str, action: Any = None) -> Route:
        return self.add(path, "GET", action)

    def post(self, path: str, action: Any = None) -> Route:
        return self.add(path, "POST", action)

    def put(self, path: str, action: Any = None) -> Route:
        return self.add(path, "PUT", action)

    def patch(self, path: str, action: Any = None) -> Route:
        return self.add(path, "PATCH", action)

    def delete(self, path: str, action: Any = None) -> Route:
        return self.add(path, "DELETE", action)

    def list(self) -> list[Route]:
        return list(self._routes)


class ResolvedHandler(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    handler_class: type
    method_name: str
    function: Callable[..., Any]

    @property
    def label(self) -> str:
        return f"{self.handler_class.__module__}.{self.handler_class.__qualname__}@{self.method_name}"

    @property
    def class_name(self) -> str:
        return self.handler_class.__name__


def resolve_handler(route: Route) -> ResolvedHandler | None:
    """Handler class and method for a route, or None when it cannot be resolved."""
    action = route.action
    if isinstance(action, str) and "@" in action:
        target, method_name = action.split("@", 1)
    elif isinstance(action, (tuple, list)) and len(action) == 2:
        target, method_name = action
    else:
        return None

    if isinstance(target, str):
        try:
            target = import_object(target)
        except ImportError as exc:
            logger.debug("Cannot import handler %s: %s", target, exc)
            return None
    if not inspect.isclass(target):
        return None

    function = getattr(target, method_name, None)
    if not callable(function):
        return None
    return ResolvedHandler(handler_class=target, method_name=method_name, function=function)


def select_routes(routes: Iterable[Route], base_path: str) -> list[Route]:
    """Routes under ``base_path``; falls back to the ``api`` prefix when nothing matches."""
    routes = list(routes)
    prefix = base_path.lstrip("/")
    selected = [route for route in routes if route.uri.startswith(prefix)]
    if not selected and prefix != "api":
        selected = [route for route in routes if route.uri.startswith("api")]
    return selected
