"""Configuration, logging and package metadata helpers."""

from .config import DEFAULT_IGNORED_HEADERS, GeneratorConfig, LoggingConfig
from .logging_config import setup_logging
from .package_info import PackageInfo, build_info, load_package_info

__all__ = [
    "DEFAULT_IGNORED_HEADERS",
    "GeneratorConfig",
    "LoggingConfig",
    "setup_logging",
    "PackageInfo",
    "build_info",
    "load_package_info",
]
