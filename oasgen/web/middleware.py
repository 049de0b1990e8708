"""Middleware observing requests and responses for spec inference."""

import json
from typing import Any, AsyncIterator, Callable, List, Optional, Tuple

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp

from oasgen.core.processors import EnrichmentResult, ObservedRequest, ObservedResponse, media_type
from oasgen.generator import ResolvedOperation, SpecGenerator

logger = structlog.get_logger(__name__)


def is_json(content_type: Optional[str]) -> bool:
    """True for ``application/json`` and ``+json`` suffixed media types."""
    value = media_type(content_type)
    return bool(value) and (value == "application/json" or value.endswith("+json"))


def request_url(request: Request) -> str:
    """Path plus query string, as used for template matching."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def _decode_json(raw: bytes) -> Tuple[Any, bool]:
    if not raw:
        return None, False
    try:
        return json.loads(raw), True
    except ValueError:
        return None, False


async def observe_request(request: Request, read_body: bool = True) -> ObservedRequest:
    """Copy the facts the processors need out of a Starlette request."""
    content_type = request.headers.get("content-type")
    body, has_body = None, False

    if read_body and is_json(content_type):
        try:
            body, has_body = _decode_json(await request.body())
        except ClientDisconnect:
            logger.debug("request_body_unavailable", path=request.url.path)

    return ObservedRequest(
        method=request.method,
        url=request_url(request),
        scheme=request.url.scheme,
        host=request.headers.get("host"),
        headers=tuple(request.headers.items()),
        query=tuple(request.query_params.multi_items()),
        content_type=content_type,
        body=body,
        has_body=has_body,
    )


def _log_results(results: List[EnrichmentResult], method: str, path: str) -> None:
    for result in results:
        if not result.ok:
            logger.debug(
                "enrichment_failed",
                processor=result.processor,
                method=method,
                path=path,
                error=result.error,
            )
    changed = [result.processor for result in results if result.changed]
    if changed:
        logger.debug("operation_enriched", method=method, path=path, processors=changed)


def _resolve(generator: SpecGenerator, request: Request) -> Optional[ResolvedOperation]:
    # Lookup failures leave the request untracked
    try:
        return generator.resolve(request.method, request_url(request))
    except Exception as e:
        logger.warning("operation_lookup_failed", path=request.url.path, error=str(e), exc_info=True)
        return None


async def _replay(chunks: List[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class RequestObserverMiddleware(BaseHTTPMiddleware):
    """Records path, header, body and query facts before the handler runs."""

    def __init__(self, app: ASGIApp, generator: SpecGenerator):
        super().__init__(app)
        self.generator = generator

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        resolved = _resolve(self.generator, request)
        if resolved is not None:
            observed = await observe_request(request)
            results = self.generator.observe_request(observed, resolved)
            _log_results(results, request.method, request.url.path)

        return await call_next(request)


class ResponseObserverMiddleware(BaseHTTPMiddleware):
    """
    Records the status, content type and body shape of responses.

    JSON bodies are buffered so their shape can be inspected, then replayed
    to the client unchanged. Other bodies are streamed through untouched.
    """

    def __init__(self, app: ASGIApp, generator: SpecGenerator):
        super().__init__(app)
        self.generator = generator

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Any]
    ) -> Response:
        response = await call_next(request)

        resolved = _resolve(self.generator, request)
        if resolved is None:
            return response

        content_type = response.headers.get("content-type")
        body, has_body = None, False
        if is_json(content_type) and hasattr(response, "body_iterator"):
            chunks = [chunk async for chunk in response.body_iterator]
            response.body_iterator = _replay(chunks)
            body, has_body = _decode_json(b"".join(chunks))

        observed_request = await observe_request(request, read_body=False)
        observed_response = ObservedResponse(
            status_code=response.status_code,
            content_type=content_type,
            body=body,
            has_body=has_body,
        )
        results = self.generator.observe_response(observed_request, observed_response, resolved)
        _log_results(results, request.method, request.url.path)

        return response
