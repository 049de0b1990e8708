"""FastAPI integration: middleware, spec endpoints and instrumentation."""

from .endpoints import list_endpoints
from .main import instrument
from .middleware import RequestObserverMiddleware, ResponseObserverMiddleware
from .routes import create_spec_router

__all__ = [
    "instrument",
    "list_endpoints",
    "create_spec_router",
    "RequestObserverMiddleware",
    "ResponseObserverMiddleware",
]
