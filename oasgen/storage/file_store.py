"""Persisted spec storage backed by a JSON file."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

import aiofiles
import aiofiles.os
import structlog

from oasgen.core.exceptions import SpecLoadError, SpecSaveError

logger = structlog.get_logger(__name__)


@runtime_checkable
class SpecStore(Protocol):
    """Persistence collaborator for the inferred spec."""

    async def load(self) -> Optional[Dict[str, Any]]:
        """Return the persisted document, or None when nothing was persisted."""
        ...

    async def save(self, document: Dict[str, Any]) -> None:
        """Persist a document snapshot."""
        ...


class JsonFileStore:
    """
    Stores the spec as pretty-printed, key-sorted JSON.

    Writes go to a temporary sibling file which then replaces the target,
    so a reader never sees a half-written document.

    Example:
        >>> store = JsonFileStore("swagger.json")
        >>> await store.save({"swagger": "2.0", "paths": {}})
        >>> await store.load()
        {'paths': {}, 'swagger': '2.0'}
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).resolve()

    async def load(self) -> Optional[Dict[str, Any]]:
        """
        Read the persisted document.

        Returns:
            The document, or None if the file does not exist yet

        Raises:
            SpecLoadError: If the file cannot be read or is not a JSON object
        """
        if not await aiofiles.os.path.exists(self.path):
            logger.debug("spec_file_missing", path=str(self.path))
            return None

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
            document = json.loads(content)
        except (OSError, ValueError) as e:
            raise SpecLoadError(self.path, e) from e

        if not isinstance(document, dict):
            raise SpecLoadError(
                self.path, TypeError(f"expected a JSON object, got {type(document).__name__}")
            )
        if not isinstance(document.get("paths", {}), dict):
            raise SpecLoadError(
                self.path,
                TypeError(f"expected 'paths' to be an object, got {type(document['paths']).__name__}"),
            )

        logger.info("spec_file_loaded", path=str(self.path), paths=len(document.get("paths") or {}))
        return document

    async def save(self, document: Dict[str, Any]) -> None:
        """
        Write a snapshot.

        Raises:
            SpecSaveError: If the file cannot be written
        """
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            content = json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(content)
                await f.write("\n")
            await aiofiles.os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise SpecSaveError(self.path, e) from e

        logger.debug("spec_file_saved", path=str(self.path), bytes=len(content))
