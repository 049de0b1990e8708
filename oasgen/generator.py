"""Spec generator: owns the live document and wires the core together."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from oasgen.common.config import GeneratorConfig
from oasgen.common.package_info import PackageInfo, build_info, load_package_info
from oasgen.core.discovery import RouteInfo, seed
from oasgen.core.document import Operation, SpecDocument
from oasgen.core.exceptions import PackageInfoError, SpecLoadError, SpecSaveError
from oasgen.core.matcher import PathMatcher
from oasgen.core.processors import (
    EnrichmentResult,
    ObservedRequest,
    ObservedResponse,
    process_body,
    process_headers,
    process_path,
    process_query,
    process_response,
)
from oasgen.core.reconciler import Override, SpecContext, StaticOverride, reconcile
from oasgen.storage import JsonFileStore, SpecStore
from oasgen.tasks import SpecWriter

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedOperation:
    """The documented operation a request belongs to."""

    template: str
    method: str
    operation: Operation


class SpecGenerator:
    """
    Incrementally infers a Swagger 2.0 document from live traffic.

    One instance is created per application and handed to the middleware
    and spec endpoints; it is the only owner of the live document.

    Lifecycle:
    - ``startup(routes)``: fill ``info`` from package metadata, hydrate from
      the store, seed operations from declared routes, start periodic writes
    - ``observe_request`` / ``observe_response``: enrich the matched operation
    - ``get_spec``: reconcile the live document with the override for reading
    - ``shutdown()``: stop periodic writes and write a final snapshot

    Args:
        config: Generator settings (defaults read from the environment)
        override: Predefined spec applied on every read; when omitted and
            ``config.predefined_spec_path`` is set, that file is loaded
        store: Persistence collaborator; when omitted and
            ``config.spec_output_path`` is set, a JsonFileStore is used

    Example:
        >>> generator = SpecGenerator(
        ...     GeneratorConfig(spec_output_path="swagger.json"),
        ...     override=StaticOverride({"info": {"title": "Shop API"}}),
        ... )
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        override: Optional[Override] = None,
        store: Optional[SpecStore] = None,
    ):
        self.config = config or GeneratorConfig()

        if override is None and self.config.predefined_spec_path is not None:
            override = StaticOverride.from_file(self.config.predefined_spec_path)
        if store is None and self.config.spec_output_path is not None:
            store = JsonFileStore(self.config.spec_output_path)

        self.override = override
        self.store = store
        self.document = SpecDocument()
        self.matcher = PathMatcher()
        self.writer: Optional[SpecWriter] = None
        self.started = False

    # ========================================================================
    # Startup / Shutdown
    # ========================================================================

    def load_info(self) -> None:
        """Fill ``info`` from package metadata; unreadable metadata is tolerated."""
        try:
            package = load_package_info(self.config.package_info_path)
        except PackageInfoError as e:
            logger.warning("package_info_unreadable", path=e.path, error=str(e.cause))
            package = PackageInfo()
        self.document.set_info(build_info(package, self.config.spec_url, self.config.base_url_path))

    async def hydrate(self) -> None:
        """Merge the persisted document into the live one."""
        persisted = None
        if self.store is not None:
            try:
                persisted = await self.store.load()
            except SpecLoadError as e:
                logger.warning("persisted_spec_unavailable", source=e.source, error=str(e.cause))
            except Exception as e:
                logger.warning("persisted_spec_unavailable", error=str(e), exc_info=True)

        if persisted is not None and not isinstance(persisted, Mapping):
            logger.warning("persisted_spec_ignored", reason="not a mapping", type=type(persisted).__name__)
            persisted = None
        self.document.hydrate(persisted)

    async def startup(self, routes: Iterable[RouteInfo]) -> None:
        """
        Prepare the live document before traffic arrives.

        Args:
            routes: Statically declared routes of the application
        """
        if self.started:
            logger.warning("spec_generator_already_started")
            return

        self.load_info()
        await self.hydrate()
        seed(self.document, routes)

        if self.store is not None:
            self.writer = SpecWriter(self.document, self.store, interval=self.config.write_interval)
            self.writer.start()

        self.started = True
        logger.info(
            "spec_generator_started",
            paths=len(self.document.paths),
            spec_url=self.config.spec_url,
            docs_url=self.config.docs_url,
            persistence=self.store is not None,
        )

    async def shutdown(self) -> None:
        """Stop periodic writes and persist a final snapshot."""
        if self.writer is not None:
            await self.writer.stop()
            try:
                await self.writer.write_once()
            except SpecSaveError as e:
                logger.error("final_spec_write_failed", destination=e.destination, error=str(e.cause))
            except Exception as e:
                logger.error("final_spec_write_failed", error=str(e), exc_info=True)
            self.writer = None
        self.started = False
        logger.info("spec_generator_stopped")

    # ========================================================================
    # Lookup
    # ========================================================================

    def is_reserved(self, url: str) -> bool:
        """Requests for the generator's own endpoints (and their sub-paths) are never documented."""
        path = url.split("?", 1)[0]
        return any(
            path == reserved or path.startswith(reserved + "/")
            for reserved in (self.config.spec_url, self.config.docs_url)
        )

    def resolve(self, method: str, url: str) -> Optional[ResolvedOperation]:
        """
        Find the operation a request belongs to.

        Returns:
            The resolved operation, or None for reserved paths, OPTIONS
            preflights, untracked routes and undeclared methods
        """
        if not url or self.is_reserved(url):
            return None

        method = method.lower()
        if method == "options":
            return None

        template = self.matcher.match(url, self.document.paths)
        if template is None:
            return None

        operation = self.document.get_operation(template, method)
        if operation is None:
            return None
        return ResolvedOperation(template=template, method=method, operation=operation)

    # ========================================================================
    # Enrichment
    # ========================================================================

    def observe_request(
        self,
        request: ObservedRequest,
        resolved: Optional[ResolvedOperation] = None,
    ) -> List[EnrichmentResult]:
        """Run the request processors for one observed request."""
        resolved = resolved or self.resolve(request.method, request.url)
        if resolved is None:
            return []

        operation = resolved.operation
        return [
            process_path(request, operation, resolved.template),
            process_headers(request, operation, self.document, self.config.ignored_headers),
            process_body(request, operation),
            process_query(request, operation),
        ]

    def observe_response(
        self,
        request: ObservedRequest,
        response: ObservedResponse,
        resolved: Optional[ResolvedOperation] = None,
    ) -> List[EnrichmentResult]:
        """Run the response processor for one observed response."""
        resolved = resolved or self.resolve(request.method, request.url)
        if resolved is None:
            return []
        return [process_response(response, resolved.operation)]

    # ========================================================================
    # Reading
    # ========================================================================

    def get_spec(self, context: Optional[SpecContext] = None) -> Dict[str, Any]:
        """
        Reconciled, key-sorted document for external readers.

        Raises:
            OverrideError: If a dynamic override fails
        """
        return reconcile(self.document.data, self.override, context)
