"""Enumeration of statically declared Starlette/FastAPI routes."""

from typing import Iterable, List

from starlette.routing import BaseRoute, Mount, Route

from oasgen.core.discovery import RouteInfo


def list_endpoints(routes: Iterable[BaseRoute], prefix: str = "") -> List[RouteInfo]:
    """
    List every HTTP route with its methods, descending into mounts.

    Websocket routes and routes excluded from schema (FastAPI's docs pages,
    the spec endpoints themselves) are skipped, as is the HEAD method
    Starlette adds implicitly alongside GET.

    Args:
        routes: Routes of an application or router (``app.routes``)
        prefix: Path prefix of the enclosing mount

    Returns:
        RouteInfo entries in registration order
    """
    endpoints: List[RouteInfo] = []
    for route in routes:
        if isinstance(route, Mount):
            endpoints.extend(list_endpoints(route.routes, prefix + route.path))
        elif isinstance(route, Route):
            if not route.include_in_schema or not route.methods:
                continue
            methods = set(route.methods)
            if "GET" in methods:
                methods.discard("HEAD")
            endpoints.append(RouteInfo(path=prefix + route.path, methods=tuple(sorted(methods))))
    return endpoints
