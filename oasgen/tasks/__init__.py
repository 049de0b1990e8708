"""Background tasks."""

from .writer import DEFAULT_WRITE_INTERVAL, SpecWriter

__all__ = ["DEFAULT_WRITE_INTERVAL", "SpecWriter"]
