"""Periodic write-back of the inferred spec to a store."""

import asyncio
from typing import Optional

import structlog

from oasgen.core.document import SpecDocument
from oasgen.core.exceptions import SpecSaveError
from oasgen.storage import SpecStore

logger = structlog.get_logger(__name__)

DEFAULT_WRITE_INTERVAL = 10.0


class SpecWriter:
    """
    Snapshots the live spec into a store on a fixed interval.

    Each write takes a deep copy of the document before awaiting the store,
    so requests enriching the live document while a save is in flight never
    change the snapshot being written. The ``info`` block is left out of
    every snapshot; it is rebuilt from package metadata on startup.

    Example:
        >>> writer = SpecWriter(document, JsonFileStore("swagger.json"), interval=5)
        >>> writer.start()
        >>> ...
        >>> await writer.stop()
    """

    def __init__(
        self,
        document: SpecDocument,
        store: SpecStore,
        interval: float = DEFAULT_WRITE_INTERVAL,
    ):
        self.document = document
        self.store = store
        self.interval = interval
        self.task: Optional[asyncio.Task[None]] = None
        self.writes = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def write_once(self) -> None:
        """
        Save one snapshot.

        Raises:
            SpecSaveError: If the store fails
        """
        snapshot = self.document.snapshot(include_info=False)
        await self.store.save(snapshot)
        self.writes += 1

    async def _run(self) -> None:
        logger.info("spec_writer_started", interval=self.interval)

        while True:
            try:
                await asyncio.sleep(self.interval)
                await self.write_once()
            except asyncio.CancelledError:
                break
            except SpecSaveError as e:
                # Keep the schedule going; the next tick retries
                self.failures += 1
                logger.error(
                    "spec_write_failed",
                    destination=e.destination,
                    error=str(e.cause),
                    failures=self.failures,
                )
            except Exception as e:
                self.failures += 1
                logger.error(
                    "spec_write_failed",
                    error=str(e),
                    failures=self.failures,
                    exc_info=True,
                )

        logger.info("spec_writer_stopped", writes=self.writes)

    def start(self) -> None:
        """Start the background write loop (requires a running event loop)."""
        if self.running:
            logger.warning("spec_writer_already_running")
            return
        self.task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the write loop and wait for it to finish."""
        if self.task is None:
            return

        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None
