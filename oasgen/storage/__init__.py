"""Persistence collaborators for the inferred spec."""

from .file_store import JsonFileStore, SpecStore

__all__ = ["JsonFileStore", "SpecStore"]
