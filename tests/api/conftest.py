"""Shared pytest fixtures for API tests."""

from typing import Any, Callable, Dict, Optional

import pytest
from fastapi import FastAPI, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from oasgen.common.config import GeneratorConfig
from oasgen.core.reconciler import Override
from oasgen.generator import SpecGenerator
from oasgen.storage import SpecStore
from oasgen.web import instrument


class UserCreate(BaseModel):
    name: str
    age: Optional[int] = None


def create_app() -> FastAPI:
    """Build a small users service to instrument."""
    app = FastAPI()

    @app.get("/users")
    async def list_users() -> Dict[str, Any]:
        return {"users": [], "total": 0}

    @app.get("/users/{user_id}")
    async def get_user(user_id: int) -> Dict[str, Any]:
        return {"id": user_id, "name": "ada"}

    @app.post("/users", status_code=status.HTTP_201_CREATED)
    async def create_user(user: UserCreate) -> Dict[str, Any]:
        return {"id": 1, "name": user.name}

    @app.get("/items")
    async def list_items() -> Dict[str, Any]:
        return {"b": 2}

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "ok"

    return app


@pytest.fixture
def instrumented_app(generator_config: GeneratorConfig) -> Callable[..., FastAPI]:
    """
    Provide a factory for instrumented applications.

    Keyword arguments are passed to ``instrument``; the generator is
    attached as ``app.state.generator``. Use the app with
    ``with TestClient(app)`` so that startup and shutdown run.
    """

    def factory(
        config: Optional[GeneratorConfig] = None,
        override: Optional[Override] = None,
        store: Optional[SpecStore] = None,
    ) -> FastAPI:
        app = create_app()
        generator: SpecGenerator = instrument(
            app,
            config=config or generator_config,
            override=override,
            store=store,
        )
        app.state.generator = generator
        return app

    return factory
