"""Spec JSON and Swagger UI endpoints."""

import json

import structlog
from fastapi import APIRouter, Request, Response, status
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, JSONResponse

from oasgen.core.exceptions import OverrideError
from oasgen.core.reconciler import SpecContext
from oasgen.generator import SpecGenerator

logger = structlog.get_logger(__name__)


def create_spec_router(generator: SpecGenerator) -> APIRouter:
    """
    Build the router serving the reconciled spec and its UI.

    Both routes are excluded from schema so route discovery never documents
    them.

    Args:
        generator: The generator whose document is served

    Returns:
        APIRouter with the spec endpoint and the docs endpoint
    """
    router = APIRouter()
    config = generator.config

    @router.get(config.spec_url, include_in_schema=False)
    async def read_spec(request: Request) -> Response:
        """Return the reconciled specification document."""
        try:
            spec = generator.get_spec(SpecContext(request=request))
        except OverrideError as e:
            logger.error("spec_override_failed", error=str(e), path=str(request.url.path))
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": str(e),
                    "error_type": "override_error",
                },
            )

        return Response(
            content=json.dumps(spec, indent=2),
            media_type="application/json",
        )

    @router.get(config.docs_url, include_in_schema=False)
    async def read_docs() -> HTMLResponse:
        """Serve Swagger UI pointed at the spec endpoint."""
        title = generator.document.data.get("info", {}).get("title") or "API"
        return get_swagger_ui_html(openapi_url=config.spec_url, title=f"{title} - Swagger UI")

    return router
