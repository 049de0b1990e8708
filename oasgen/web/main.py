"""Instrumenting a FastAPI application with spec inference."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import structlog
from fastapi import FastAPI

from oasgen.common.config import GeneratorConfig
from oasgen.common.logging_config import setup_logging
from oasgen.core.reconciler import Override
from oasgen.generator import SpecGenerator
from oasgen.storage import SpecStore

from .endpoints import list_endpoints
from .middleware import RequestObserverMiddleware, ResponseObserverMiddleware
from .routes import create_spec_router

logger = structlog.get_logger(__name__)


def instrument(
    app: FastAPI,
    generator: Optional[SpecGenerator] = None,
    *,
    config: Optional[GeneratorConfig] = None,
    override: Optional[Override] = None,
    store: Optional[SpecStore] = None,
) -> SpecGenerator:
    """
    Install spec inference on an application.

    This adds:
    - Request and response observer middleware
    - The spec JSON endpoint and the Swagger UI endpoint
    - Lifespan hooks: discovery and hydration on startup, final write on
      shutdown (the application's own lifespan still runs)

    Call it after the application's routers are included; routes are
    enumerated when the application starts.

    Args:
        app: FastAPI application to instrument
        generator: Existing generator (otherwise built from the keywords)
        config: Generator settings
        override: Predefined spec, static or dynamic
        store: Persistence collaborator

    Returns:
        The generator serving this application

    Example:
        app = FastAPI()
        app.include_router(users.router)
        generator = instrument(app, config=GeneratorConfig(spec_output_path="swagger.json"))
    """
    if generator is None:
        generator = SpecGenerator(config, override=override, store=store)

    if generator.config.logging.configure:
        setup_logging(generator.config.logging)

    app.add_middleware(RequestObserverMiddleware, generator=generator)
    app.add_middleware(ResponseObserverMiddleware, generator=generator)
    app.include_router(create_spec_router(generator))

    app_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[Any]:
        async with app_lifespan(app) as state:
            await generator.startup(list_endpoints(app.routes))
            try:
                yield state
            finally:
                await generator.shutdown()

    app.router.lifespan_context = lifespan

    logger.info(
        "app_instrumented",
        spec_url=generator.config.spec_url,
        docs_url=generator.config.docs_url,
    )
    return generator
