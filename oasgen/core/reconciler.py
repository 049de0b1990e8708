"""Reconciliation of the live spec with a predefined override."""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import structlog
import yaml

from .exceptions import OverrideError, SpecLoadError
from .merge import deep_merge, sort_object

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SpecContext:
    """
    Per-read context handed to dynamic overrides.

    Attributes:
        request: The framework request that asked for the spec (None for
            reads outside a request, such as the startup patch)
        response: The framework response being built, when available
    """

    request: Optional[Any] = None
    response: Optional[Any] = None


Transform = Callable[[Dict[str, Any], SpecContext], Mapping[str, Any]]


@dataclass(frozen=True)
class StaticOverride:
    """A predefined spec fragment deep-merged over the inferred spec."""

    document: Mapping[str, Any]

    def apply(self, spec: Dict[str, Any], context: SpecContext) -> Dict[str, Any]:
        return deep_merge(spec, self.document)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticOverride":
        """
        Load a predefined spec from a JSON or YAML file.

        Raises:
            SpecLoadError: If the file cannot be read or is not a mapping
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise SpecLoadError(path, e) from e

        if document is None:
            document = {}
        if not isinstance(document, Mapping):
            raise SpecLoadError(path, TypeError(f"expected a mapping, got {type(document).__name__}"))

        logger.info("predefined_spec_loaded", path=str(path), keys=sorted(document))
        return cls(document=document)


@dataclass(frozen=True)
class DynamicOverride:
    """
    A transform producing the full document from the live spec.

    The transform receives a deep copy of the live spec, so it may modify
    and return it freely.

    Example:
        >>> DynamicOverride(lambda spec, ctx: {**spec, "host": ctx.request.url.hostname})
    """

    transform: Transform

    def apply(self, spec: Dict[str, Any], context: SpecContext) -> Dict[str, Any]:
        try:
            result = self.transform(spec, context)
        except Exception as e:
            raise OverrideError(f"Predefined spec transform failed: {e}") from e
        if not isinstance(result, Mapping):
            raise OverrideError(
                f"Predefined spec transform must return a mapping, got {type(result).__name__}"
            )
        return dict(result)


Override = Union[StaticOverride, DynamicOverride]


def reconcile(
    live_spec: Mapping[str, Any],
    override: Optional[Override] = None,
    context: Optional[SpecContext] = None,
) -> Dict[str, Any]:
    """
    Produce the externally visible document.

    The live spec is deep-copied first, so the result never shares structure
    with it and the live spec is never modified. Keys are sorted recursively
    for deterministic serialization.

    Args:
        live_spec: The inferred document
        override: Static or dynamic override (None for the inferred spec as-is)
        context: Request context passed to dynamic overrides

    Returns:
        The reconciled, key-sorted document

    Raises:
        OverrideError: If a dynamic override fails
    """
    spec = copy.deepcopy(dict(live_spec))
    if override is not None:
        spec = override.apply(spec, context or SpecContext())
    return sort_object(spec)
