"""In-memory Swagger 2.0 document built up from observed traffic."""

import copy
from typing import Any, Dict, List, Mapping, Optional

import structlog

from .merge import deep_merge, sort_object

logger = structlog.get_logger(__name__)

SWAGGER_VERSION = "2.0"

# Blank document every live spec is merged over at startup
BLANK_SPEC: Dict[str, Any] = {"swagger": SWAGGER_VERSION, "paths": {}}

Operation = Dict[str, Any]
Parameter = Dict[str, Any]


def operation_skeleton(template: str, path_params: List[str]) -> Operation:
    """Create the default operation entry for a newly discovered route."""
    return {
        "summary": template,
        "consumes": ["application/json"],
        "parameters": [{"name": name, "in": "path", "required": True} for name in path_params],
        "responses": {},
    }


def find_parameter(
    operation: Mapping[str, Any],
    name: str,
    location: str,
    case_sensitive: bool = True,
) -> Optional[Parameter]:
    """Find the parameter keyed by (name, location) on an operation."""
    wanted = name if case_sensitive else name.lower()
    for parameter in operation.get("parameters") or []:
        if parameter.get("in") != location:
            continue
        candidate = parameter.get("name", "")
        if not case_sensitive:
            candidate = candidate.lower()
        if candidate == wanted:
            return parameter
    return None


def ensure_parameter(operation: Operation, parameter: Parameter, case_sensitive: bool = True) -> bool:
    """
    Add ``parameter`` to the operation unless its (name, in) key is present.

    Returns:
        True if the parameter was appended
    """
    existing = find_parameter(operation, parameter["name"], parameter["in"], case_sensitive)
    if existing is not None:
        return False
    operation.setdefault("parameters", []).append(parameter)
    return True


def add_unique(container: Dict[str, Any], key: str, value: str) -> bool:
    """Append ``value`` to the list at ``container[key]`` if not already there."""
    values = container.setdefault(key, [])
    if value in values:
        return False
    values.append(value)
    return True


class SpecDocument:
    """
    Process-wide specification state.

    Holds the live, mutable document. All mutations are plain synchronous
    dict updates so that a single request callback completes its merge
    without yielding to the event loop. Readers and writers take deep-copied
    snapshots instead of holding references into the live tree.

    Attributes:
        data: The live document (``info``, ``schemes``, ``host``, ``paths``...)
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = data if data is not None else {}

    @property
    def paths(self) -> Dict[str, Dict[str, Operation]]:
        return self.data.setdefault("paths", {})

    def templates(self) -> List[str]:
        """Known path templates in insertion order."""
        return list(self.paths.keys())

    def get_operation(self, template: str, method: str) -> Optional[Operation]:
        """Get the operation for a (template, method) pair, if recorded."""
        methods = self.paths.get(template)
        if not isinstance(methods, dict):
            return None
        operation = methods.get(method.lower())
        return operation if isinstance(operation, dict) else None

    def seed_operation(self, template: str, method: str, path_params: List[str]) -> bool:
        """
        Create the skeleton operation for a discovered route.

        An operation that already exists (for example hydrated from a
        persisted spec) keeps everything it has; the skeleton only fills in
        keys that are missing.

        Returns:
            True if the method entry did not exist before
        """
        methods = self.paths.get(template)
        if not isinstance(methods, dict):
            methods = self.paths[template] = {}
        method = method.lower()
        skeleton = operation_skeleton(template, path_params)
        existing = methods.get(method)
        if not isinstance(existing, dict):
            methods[method] = skeleton
            return True
        for key, value in skeleton.items():
            existing.setdefault(key, value)
        return False

    def set_info(self, info: Mapping[str, Any]) -> None:
        self.data["info"] = deep_merge(self.data.get("info"), info)

    def record_scheme(self, scheme: Optional[str]) -> bool:
        """Add a protocol to ``schemes`` (set union, insertion ordered)."""
        if not scheme:
            return False
        return add_unique(self.data, "schemes", scheme)

    def record_host(self, host: Optional[str]) -> bool:
        """Set ``host`` unless a host was already recorded."""
        if not host or self.data.get("host"):
            return False
        self.data["host"] = host
        return True

    def hydrate(self, persisted: Optional[Mapping[str, Any]]) -> None:
        """
        Startup merge of persisted state.

        The persisted document takes precedence over the blank template but
        anything already in the live document wins over both. A persisted
        ``paths`` that is not an object is dropped.
        """
        if persisted is not None and not isinstance(persisted.get("paths", {}), Mapping):
            logger.warning("persisted_paths_ignored", type=type(persisted["paths"]).__name__)
            persisted = {key: value for key, value in persisted.items() if key != "paths"}
        self.data = deep_merge(BLANK_SPEC, persisted, self.data)
        logger.debug("spec_hydrated", paths=len(self.paths))

    def snapshot(self, include_info: bool = True) -> Dict[str, Any]:
        """Deep copy of the live document, isolated from later mutation."""
        data = copy.deepcopy(self.data)
        if not include_info:
            data.pop("info", None)
        return data

    def sorted_snapshot(self, include_info: bool = True) -> Dict[str, Any]:
        return sort_object(self.snapshot(include_info=include_info))
