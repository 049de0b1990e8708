"""Fixtures specific to unit tests."""

from typing import Any, Callable

import pytest

from oasgen.core.document import Operation, operation_skeleton
from oasgen.core.processors import ObservedRequest


@pytest.fixture
def user_operation() -> Operation:
    """Provide the skeleton operation for GET /users/{id}."""
    return operation_skeleton("/users/{id}", ["id"])


@pytest.fixture
def make_request() -> Callable[..., ObservedRequest]:
    """Provide a factory for observed requests with sensible defaults."""

    def factory(url: str = "/users/42", method: str = "GET", **kwargs: Any) -> ObservedRequest:
        kwargs.setdefault("scheme", "http")
        kwargs.setdefault("host", "localhost:8000")
        return ObservedRequest(method=method, url=url, **kwargs)

    return factory
