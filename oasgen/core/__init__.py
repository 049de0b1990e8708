"""Spec inference core: matching, document model, processors and reconciliation."""

from .discovery import RouteInfo, derive_template, seed
from .document import BLANK_SPEC, SpecDocument, operation_skeleton
from .exceptions import (
    OverrideError,
    PackageInfoError,
    SpecGeneratorError,
    SpecLoadError,
    SpecSaveError,
)
from .matcher import PathMatcher, compile_template, placeholder_names
from .merge import deep_merge, sort_object
from .processors import (
    EnrichmentResult,
    ObservedRequest,
    ObservedResponse,
    process_body,
    process_headers,
    process_path,
    process_query,
    process_response,
)
from .reconciler import DynamicOverride, Override, SpecContext, StaticOverride, reconcile
from .schema import merge_schema, shallow_schema

__all__ = [
    "RouteInfo",
    "derive_template",
    "seed",
    "BLANK_SPEC",
    "SpecDocument",
    "operation_skeleton",
    "SpecGeneratorError",
    "SpecLoadError",
    "SpecSaveError",
    "OverrideError",
    "PackageInfoError",
    "PathMatcher",
    "compile_template",
    "placeholder_names",
    "deep_merge",
    "sort_object",
    "EnrichmentResult",
    "ObservedRequest",
    "ObservedResponse",
    "process_path",
    "process_headers",
    "process_body",
    "process_query",
    "process_response",
    "Override",
    "StaticOverride",
    "DynamicOverride",
    "SpecContext",
    "reconcile",
    "merge_schema",
    "shallow_schema",
]
