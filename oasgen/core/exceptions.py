"""Exceptions raised by the spec generator."""

from pathlib import Path
from typing import Any, Dict, Optional, Union


class SpecGeneratorError(Exception):
    """Base exception for all spec generator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SpecLoadError(SpecGeneratorError):
    """Raised when a persisted specification cannot be loaded."""

    def __init__(self, source: Union[str, Path], cause: BaseException):
        self.source = str(source)
        self.cause = cause
        super().__init__(
            f"Cannot read the specification from {self.source} because of {cause}",
            details={"source": self.source},
        )


class SpecSaveError(SpecGeneratorError):
    """Raised when the specification cannot be written to its destination."""

    def __init__(self, destination: Union[str, Path], cause: BaseException):
        self.destination = str(destination)
        self.cause = cause
        super().__init__(
            f"Cannot write the specification into {self.destination} because of {cause}",
            details={"destination": self.destination},
        )


class OverrideError(SpecGeneratorError):
    """Raised when a predefined spec override cannot be applied."""

    pass


class PackageInfoError(SpecGeneratorError):
    """Raised when package metadata exists but cannot be parsed."""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = str(path)
        self.cause = cause
        super().__init__(
            f"Cannot read package metadata from {self.path}: {cause}",
            details={"path": self.path},
        )
