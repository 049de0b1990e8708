"""Tests for the SpecGenerator orchestrator."""

from pathlib import Path
from typing import List
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from oasgen.common.config import GeneratorConfig
from oasgen.core.discovery import RouteInfo
from oasgen.core.exceptions import SpecLoadError
from oasgen.core.processors import ObservedRequest, ObservedResponse
from oasgen.core.reconciler import DynamicOverride, SpecContext, StaticOverride
from oasgen.generator import SpecGenerator
from oasgen.storage import JsonFileStore


@pytest.fixture
def store(persisted_spec: dict) -> AsyncMock:
    """Provide a store double returning the persisted spec."""
    store = AsyncMock()
    store.load.return_value = persisted_spec
    return store


@pytest_asyncio.fixture
async def started_generator(generator_config: GeneratorConfig, sample_routes: List[RouteInfo]):
    """Provide a generator started without persistence."""
    generator = SpecGenerator(generator_config)
    await generator.startup(sample_routes)
    yield generator
    await generator.shutdown()


class TestConstruction:
    """Tests for building a generator from configuration."""

    def test_file_store_from_config(self, tmp_path: Path):
        config = GeneratorConfig(spec_output_path=tmp_path / "swagger.json")

        generator = SpecGenerator(config)

        assert isinstance(generator.store, JsonFileStore)
        assert generator.store.path == (tmp_path / "swagger.json").resolve()

    def test_predefined_spec_from_config(self, tmp_path: Path):
        path = tmp_path / "predefined.yaml"
        path.write_text("host: api.example.com\n", encoding="utf-8")

        generator = SpecGenerator(GeneratorConfig(predefined_spec_path=path))

        assert generator.override == StaticOverride({"host": "api.example.com"})

    def test_explicit_collaborators_take_precedence(self, tmp_path: Path, store: AsyncMock):
        override = StaticOverride({"host": "explicit"})
        config = GeneratorConfig(spec_output_path=tmp_path / "swagger.json")

        generator = SpecGenerator(config, override=override, store=store)

        assert generator.store is store
        assert generator.override is override


class TestStartup:
    """Tests for startup and shutdown."""

    @pytest.mark.asyncio
    async def test_info_from_package_metadata(self, started_generator: SpecGenerator):
        assert started_generator.document.data["info"] == {
            "title": "users-service",
            "version": "1.2.3",
            "license": {"name": "MIT"},
            "description": "[Specification JSON](/api-spec)\n\nUser directory",
        }

    @pytest.mark.asyncio
    async def test_unreadable_package_metadata_is_tolerated(
        self, tmp_path: Path, sample_routes: List[RouteInfo]
    ):
        path = tmp_path / "package.json"
        path.write_text("{oops", encoding="utf-8")
        generator = SpecGenerator(GeneratorConfig(package_info_path=path))

        await generator.startup(sample_routes)

        assert generator.document.data["info"] == {
            "description": "[Specification JSON](/api-spec)"
        }

    @pytest.mark.asyncio
    async def test_routes_seeded(self, started_generator: SpecGenerator):
        assert started_generator.document.data["swagger"] == "2.0"
        assert started_generator.document.templates() == ["/users", "/users/{id}", "/items"]
        assert started_generator.writer is None

    @pytest.mark.asyncio
    async def test_persisted_spec_hydrated_before_seeding(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        generator = SpecGenerator(generator_config, store=store)

        await generator.startup(sample_routes)
        try:
            assert generator.document.data["host"] == "api.example.com"
            items = generator.document.get_operation("/items", "get")
            assert items["parameters"][0]["name"] == "limit"
            assert generator.writer is not None and generator.writer.running
        finally:
            await generator.shutdown()

    @pytest.mark.asyncio
    async def test_failed_load_is_treated_as_empty(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        store.load.side_effect = SpecLoadError("swagger.json", ValueError("bad json"))
        generator = SpecGenerator(generator_config, store=store)

        await generator.startup(sample_routes)
        try:
            assert generator.started is True
            assert "host" not in generator.document.data
            assert "/users/{id}" in generator.document.paths
        finally:
            await generator.shutdown()


    @pytest.mark.asyncio
    async def test_unexpected_load_error_is_treated_as_empty(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        store.load.side_effect = ConnectionError("store offline")
        generator = SpecGenerator(generator_config, store=store)

        await generator.startup(sample_routes)
        try:
            assert generator.started is True
            assert generator.document.templates() == ["/users", "/users/{id}", "/items"]
        finally:
            await generator.shutdown()

    @pytest.mark.asyncio
    async def test_non_mapping_load_is_treated_as_empty(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        store.load.return_value = ["not", "a", "document"]
        generator = SpecGenerator(generator_config, store=store)

        await generator.startup(sample_routes)
        try:
            assert generator.started is True
            assert generator.document.data["swagger"] == "2.0"
            assert "/users/{id}" in generator.document.paths
        finally:
            await generator.shutdown()

    @pytest.mark.asyncio
    async def test_non_object_persisted_paths_are_dropped(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        store.load.return_value = {"host": "api.example.com", "paths": ["/users/{id}"]}
        generator = SpecGenerator(generator_config, store=store)

        await generator.startup(sample_routes)
        try:
            assert generator.document.data["host"] == "api.example.com"
            assert generator.resolve("GET", "/users/42").template == "/users/{id}"
        finally:
            await generator.shutdown()

    @pytest.mark.asyncio
    async def test_unexpected_final_write_error_is_logged(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        store.save.side_effect = ConnectionError("store offline")
        generator = SpecGenerator(generator_config, store=store)
        await generator.startup(sample_routes)

        await generator.shutdown()

        assert store.save.await_count >= 1
        assert generator.writer is None
        assert generator.started is False
    @pytest.mark.asyncio
    async def test_shutdown_writes_final_snapshot(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        generator = SpecGenerator(generator_config, store=store)
        await generator.startup(sample_routes)

        await generator.shutdown()

        saved = store.save.await_args.args[0]
        assert "info" not in saved
        assert "/users/{id}" in saved["paths"]
        assert generator.writer is None

    @pytest.mark.asyncio
    async def test_startup_is_not_repeated(
        self, started_generator: SpecGenerator, sample_routes: List[RouteInfo]
    ):
        started_generator.document.record_host("kept.example")

        await started_generator.startup(sample_routes)

        assert started_generator.document.data["host"] == "kept.example"


class TestResolve:
    """Tests for operation lookup."""

    @pytest.mark.asyncio
    async def test_resolves_template_and_method(self, started_generator: SpecGenerator):
        resolved = started_generator.resolve("GET", "/users/42?active=true")

        assert resolved is not None
        assert resolved.template == "/users/{id}"
        assert resolved.method == "get"
        assert resolved.operation is started_generator.document.paths["/users/{id}"]["get"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,url",
        [
            ("GET", "/api-spec"),
            ("GET", "/api-docs"),
            ("OPTIONS", "/users"),
            ("PUT", "/users/42"),
            ("GET", "/orders"),
            ("GET", ""),
        ],
    )
    async def test_unresolvable_requests(
        self, started_generator: SpecGenerator, method: str, url: str
    ):
        assert started_generator.resolve(method, url) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["/api-spec/", "/api-docs/oauth2-redirect", "/api-spec?pretty=1"])
    async def test_own_sub_paths_are_reserved(self, started_generator: SpecGenerator, url: str):
        assert started_generator.is_reserved(url) is True

    @pytest.mark.asyncio
    async def test_similarly_named_routes_are_not_reserved(
        self, generator_config: GeneratorConfig
    ):
        generator = SpecGenerator(generator_config)
        await generator.startup([RouteInfo(path="/api-specs/export", methods=("GET",))])

        assert generator.is_reserved("/api-specs/export") is False
        assert generator.resolve("GET", "/api-specs/export").template == "/api-specs/export"


class TestObservation:
    """Tests for request and response enrichment through the generator."""

    @pytest.mark.asyncio
    async def test_request_enrichment(self, started_generator: SpecGenerator):
        request = ObservedRequest(
            method="GET",
            url="/users/42?active=true",
            scheme="http",
            host="localhost:8000",
            headers=(("host", "localhost:8000"), ("x-trace", "1")),
            query=(("active", "true"),),
        )

        results = started_generator.observe_request(request)

        assert [r.processor for r in results] == ["path", "headers", "body", "query"]
        assert all(r.ok for r in results)
        parameters = started_generator.document.paths["/users/{id}"]["get"]["parameters"]
        assert {(p["name"], p["in"]) for p in parameters} == {
            ("id", "path"),
            ("X-Trace", "header"),
            ("active", "query"),
        }
        assert started_generator.document.data["host"] == "localhost:8000"
        assert started_generator.document.data["schemes"] == ["http"]

    @pytest.mark.asyncio
    async def test_untracked_request_is_skipped(self, started_generator: SpecGenerator):
        before = started_generator.document.snapshot()

        results = started_generator.observe_request(ObservedRequest(method="GET", url="/nope"))

        assert results == []
        assert started_generator.document.snapshot() == before

    @pytest.mark.asyncio
    async def test_response_schema_unions_with_persisted(
        self, generator_config: GeneratorConfig, store: AsyncMock, sample_routes: List[RouteInfo]
    ):
        generator = SpecGenerator(generator_config, store=store)
        await generator.startup(sample_routes)
        try:
            generator.observe_response(
                ObservedRequest(method="GET", url="/items"),
                ObservedResponse(status_code=200, body={"a": 1, "b": 2}, has_body=True),
            )

            schema = generator.document.paths["/items"]["get"]["responses"]["200"]["schema"]
            assert sorted(schema["properties"]) == ["a", "b"]
        finally:
            await generator.shutdown()


class TestGetSpec:
    """Tests for read-time reconciliation."""

    @pytest.mark.asyncio
    async def test_without_override(self, started_generator: SpecGenerator):
        spec = started_generator.get_spec()

        assert spec["info"]["title"] == "users-service"
        assert list(spec["paths"]) == sorted(spec["paths"])

    @pytest.mark.asyncio
    async def test_static_override(
        self, generator_config: GeneratorConfig, sample_routes: List[RouteInfo]
    ):
        generator = SpecGenerator(
            generator_config, override=StaticOverride({"info": {"title": "Users API"}})
        )
        await generator.startup(sample_routes)

        spec = generator.get_spec()

        assert spec["info"]["title"] == "Users API"
        assert spec["info"]["version"] == "1.2.3"
        assert generator.document.data["info"]["title"] == "users-service"

    @pytest.mark.asyncio
    async def test_dynamic_override_receives_context(
        self, generator_config: GeneratorConfig, sample_routes: List[RouteInfo]
    ):
        override = DynamicOverride(lambda spec, ctx: {**spec, "host": ctx.request})
        generator = SpecGenerator(generator_config, override=override)
        await generator.startup(sample_routes)

        spec = generator.get_spec(SpecContext(request="docs.example"))

        assert spec["host"] == "docs.example"
