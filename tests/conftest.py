"""Shared pytest fixtures for all tests."""

import json
from pathlib import Path
from typing import List

import pytest

from oasgen.common.config import GeneratorConfig, LoggingConfig
from oasgen.core.discovery import RouteInfo
from oasgen.core.document import SpecDocument


@pytest.fixture
def package_json(tmp_path: Path) -> Path:
    """Provide a package.json-style metadata file."""
    path = tmp_path / "package.json"
    path.write_text(
        json.dumps(
            {
                "name": "users-service",
                "version": "1.2.3",
                "license": "MIT",
                "description": "User directory",
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def generator_config(package_json: Path) -> GeneratorConfig:
    """Provide generator settings with fast writes and quiet logging."""
    return GeneratorConfig(
        package_info_path=package_json,
        write_interval=0.05,
        logging=LoggingConfig(level="WARNING", format="text"),
    )


@pytest.fixture
def document() -> SpecDocument:
    """Provide an empty live document."""
    return SpecDocument()


@pytest.fixture
def sample_routes() -> List[RouteInfo]:
    """Provide declared routes in registration order."""
    return [
        RouteInfo(path="/users", methods=("GET", "POST")),
        RouteInfo(path="/users/:id", methods=("GET", "DELETE")),
        RouteInfo(path="/items", methods=("GET",)),
    ]


@pytest.fixture
def persisted_spec() -> dict:
    """Provide a previously persisted document (no info block)."""
    return {
        "swagger": "2.0",
        "host": "api.example.com",
        "schemes": ["https"],
        "paths": {
            "/items": {
                "get": {
                    "summary": "/items",
                    "consumes": ["application/json"],
                    "parameters": [
                        {"name": "limit", "in": "query", "required": False, "type": "integer"}
                    ],
                    "responses": {
                        "200": {
                            "description": "OK",
                            "schema": {
                                "type": "object",
                                "properties": {"a": {"type": "integer"}},
                            },
                        }
                    },
                }
            }
        },
    }
