"""Field processors that fold observed traffic into operation entries.

Each processor is additive and idempotent: observing the same fact twice
leaves the document exactly as observing it once. Processors never raise;
malformed input is reported through the returned ``EnrichmentResult`` so
that instrumentation can never break the request being served.
"""

from dataclasses import dataclass
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, Collection, Optional, Tuple

from .document import Operation, SpecDocument, add_unique, ensure_parameter
from .matcher import placeholder_names
from .schema import merge_schema, shallow_schema, text_type

HeaderList = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ObservedRequest:
    """
    Framework-independent facts copied out of an incoming request.

    Attributes:
        method: HTTP method as received
        url: Request path, followed by ``?query`` when a query string was sent
        scheme: Protocol (``http`` or ``https``)
        host: Value of the Host header
        headers: Header (name, value) pairs
        query: Query string (key, value) pairs
        content_type: Raw Content-Type header value
        body: Decoded JSON body (only meaningful when ``has_body`` is True)
        has_body: Whether a JSON body was decoded
    """

    method: str
    url: str
    scheme: Optional[str] = None
    host: Optional[str] = None
    headers: HeaderList = ()
    query: HeaderList = ()
    content_type: Optional[str] = None
    body: Any = None
    has_body: bool = False

    @property
    def path(self) -> str:
        return self.url.split("?", 1)[0]


@dataclass(frozen=True)
class ObservedResponse:
    """Facts copied out of an outgoing response."""

    status_code: int
    content_type: Optional[str] = None
    body: Any = None
    has_body: bool = False


@dataclass(frozen=True)
class EnrichmentResult:
    """Outcome of one processor run."""

    processor: str
    changed: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def enrichment(name: str) -> Callable[[Callable[..., bool]], Callable[..., EnrichmentResult]]:
    """Turn a processor returning ``changed`` into one returning an ``EnrichmentResult``."""

    def decorator(func: Callable[..., bool]) -> Callable[..., EnrichmentResult]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> EnrichmentResult:
            try:
                changed = func(*args, **kwargs)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                return EnrichmentResult(name, error=f"{type(e).__name__}: {e}")
            return EnrichmentResult(name, changed=bool(changed))

        return wrapper

    return decorator


def media_type(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters from a Content-Type value (``application/json; charset=utf-8``)."""
    if not content_type:
        return None
    value = content_type.split(";", 1)[0].strip().lower()
    return value or None


def canonical_header(name: str) -> str:
    """Canonical Title-Case header name (``x-trace-id`` -> ``X-Trace-Id``)."""
    return "-".join(part.capitalize() for part in name.split("-"))


def describe_status(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"Status {status_code}"


@enrichment("path")
def process_path(request: ObservedRequest, operation: Operation, template: str) -> bool:
    """Ensure one required path parameter per template placeholder."""
    changed = False
    for name in placeholder_names(template):
        if ensure_parameter(operation, {"name": name, "in": "path", "required": True}):
            changed = True
    return changed


@enrichment("headers")
def process_headers(
    request: ObservedRequest,
    operation: Operation,
    document: SpecDocument,
    ignored_headers: Collection[str] = (),
) -> bool:
    """
    Record request headers as header parameters.

    Also accumulates document-level ``schemes`` (set union) and ``host``
    (first observed value wins), and the request media type in ``consumes``.
    Header names compare case-insensitively.
    """
    changed = document.record_scheme(request.scheme)
    changed = document.record_host(request.host) or changed

    consumed = media_type(request.content_type)
    if consumed:
        changed = add_unique(operation, "consumes", consumed) or changed

    ignored = {header.lower() for header in ignored_headers}
    for name, _value in request.headers:
        if name.lower() in ignored:
            continue
        parameter = {
            "name": canonical_header(name),
            "in": "header",
            "required": False,
            "type": "string",
        }
        if ensure_parameter(operation, parameter, case_sensitive=False):
            changed = True
    return changed


@enrichment("body")
def process_body(request: ObservedRequest, operation: Operation) -> bool:
    """Record or widen the body parameter's shallow schema from a JSON body."""
    if not request.has_body:
        return False

    observed = shallow_schema(request.body)
    if not observed:
        return False

    for parameter in operation.get("parameters") or []:
        if parameter.get("in") == "body":
            return merge_schema(parameter.setdefault("schema", {}), observed)

    operation.setdefault("parameters", []).append(
        {"name": "body", "in": "body", "required": False, "schema": observed}
    )
    return True


@enrichment("query")
def process_query(request: ObservedRequest, operation: Operation) -> bool:
    """Ensure one query parameter per observed query string key."""
    changed = False
    for key, value in request.query:
        parameter = {"name": key, "in": "query", "required": False, "type": text_type(value)}
        if ensure_parameter(operation, parameter):
            changed = True
    return changed


@enrichment("response")
def process_response(response: ObservedResponse, operation: Operation) -> bool:
    """Record the response status, content type and shallow body schema."""
    changed = False
    status = str(response.status_code)
    responses = operation.setdefault("responses", {})

    entry = responses.get(status)
    if entry is None:
        entry = responses[status] = {"description": describe_status(response.status_code)}
        changed = True
    elif "description" not in entry:
        entry["description"] = describe_status(response.status_code)
        changed = True

    produced = media_type(response.content_type)
    if produced:
        changed = add_unique(operation, "produces", produced) or changed

    observed = shallow_schema(response.body) if response.has_body else None
    if observed:
        changed = merge_schema(entry.setdefault("schema", {}), observed) or changed

    return changed
