"""Seeding the spec skeleton from statically declared routes."""

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

import structlog

from .document import SpecDocument
from .matcher import placeholder_names

logger = structlog.get_logger(__name__)

# Starlette convertor form: {id:int} -> {id}
_CONVERTOR_PARAM = re.compile(r"\{([^{}:/]+):[^{}/]+\}")
# Express form: /users/:id -> /users/{id}
_COLON_PARAM = re.compile(r"(?<=/):([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class RouteInfo:
    """A statically registered route: native path pattern and its methods."""

    path: str
    methods: Tuple[str, ...]


def derive_template(native_path: str) -> str:
    """
    Translate a framework route pattern into a ``{name}`` path template.

    Example:
        >>> derive_template("/users/{user_id:int}/posts/:slug")
        '/users/{user_id}/posts/{slug}'
    """
    template = _CONVERTOR_PARAM.sub(r"{\1}", native_path)
    return _COLON_PARAM.sub(r"{\1}", template)


def seed(document: SpecDocument, routes: Iterable[RouteInfo]) -> int:
    """
    Create operation skeletons for every declared route and method.

    Operations that already exist are left alone apart from filling in
    missing skeleton keys.

    Returns:
        Number of operations created
    """
    created = 0
    for route in routes:
        template = derive_template(route.path)
        params = placeholder_names(template)
        document.paths.setdefault(template, {})
        for method in route.methods:
            if document.seed_operation(template, method, params):
                created += 1
    logger.info("routes_discovered", paths=len(document.paths), operations_created=created)
    return created
