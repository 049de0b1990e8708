"""Runtime Swagger 2.0 spec inference for FastAPI applications."""

from .common.config import GeneratorConfig, LoggingConfig
from .common.logging_config import setup_logging
from .core import (
    DynamicOverride,
    Override,
    OverrideError,
    PackageInfoError,
    SpecContext,
    SpecGeneratorError,
    SpecLoadError,
    SpecSaveError,
    StaticOverride,
)
from .generator import ResolvedOperation, SpecGenerator
from .storage import JsonFileStore, SpecStore
from .tasks import SpecWriter
from .web import instrument

__version__ = "0.1.0"
__all__ = [
    "GeneratorConfig",
    "LoggingConfig",
    "setup_logging",
    "SpecGenerator",
    "ResolvedOperation",
    "Override",
    "StaticOverride",
    "DynamicOverride",
    "SpecContext",
    "JsonFileStore",
    "SpecStore",
    "SpecWriter",
    "instrument",
    "SpecGeneratorError",
    "SpecLoadError",
    "SpecSaveError",
    "OverrideError",
    "PackageInfoError",
]
