"""Tests for capspine.resolver.fetch (two-tier namespaced fetch)."""

import pytest

from capspine.core.errors import (
    NamespaceRequiredError,
    ResourceNotFoundError,
    UpstreamError,
)
from capspine.models import DefinitionKind, ResourceKind
from capspine.resolver.fetch import (
    get_definition,
    get_definition_from_namespace,
    is_request_namespace_error,
)

COMPONENT = ResourceKind.COMPONENT_DEFINITION


@pytest.fixture
def fetch_ctx(ctx):
    return ctx.with_x_definition_namespace("platform")


class TestIsRequestNamespaceError:
    def test_matches_message(self):
        assert is_request_namespace_error(NamespaceRequiredError())
        assert is_request_namespace_error(
            RuntimeError("an empty namespace may not be set when a resource name is provided")
        )

    def test_other_errors(self):
        assert not is_request_namespace_error(None)
        assert not is_request_namespace_error(UpstreamError("forbidden"))


class TestGetDefinition:
    @pytest.mark.asyncio
    async def test_app_namespace_first(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="app"), namespace="default")
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="sys"), namespace="vela-system")

        obj = await get_definition(store, fetch_ctx, "worker", COMPONENT)

        assert obj.spec["marker"] == "app"
        assert [call[2] for call in store.operations("get")] == ["default"]

    @pytest.mark.asyncio
    async def test_x_definition_namespace_before_system(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="xdef"), namespace="platform")
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="sys"), namespace="vela-system")

        obj = await get_definition(store, fetch_ctx, "worker", COMPONENT, legacy_kinds=())

        assert obj.spec["marker"] == "xdef"
        assert [call[2] for call in store.operations("get")] == ["default", "platform"]

    @pytest.mark.asyncio
    async def test_system_namespace_last(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="sys"), namespace="vela-system")

        obj = await get_definition(store, fetch_ctx, "worker", COMPONENT, legacy_kinds=())

        assert obj.namespace == "vela-system"

    @pytest.mark.asyncio
    async def test_all_missed_returns_first_not_found(self, store, fetch_ctx):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await get_definition(store, fetch_ctx, "worker", COMPONENT)

        assert exc_info.value.namespace == "default"
        assert exc_info.value.name == "worker"

    @pytest.mark.asyncio
    async def test_no_namespace_to_search(self, store, fetch_ctx, monkeypatch):
        monkeypatch.setattr(type(fetch_ctx), "fetch_namespaces", lambda self: [])

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await get_definition(store, fetch_ctx, "worker", COMPONENT)

        assert exc_info.value.name == "worker"
        assert exc_info.value.namespace is None
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_upstream_error_stops_search(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker"), namespace="vela-system")
        store.fail_on("get", COMPONENT, UpstreamError("forbidden"))

        with pytest.raises(UpstreamError, match="forbidden"):
            await get_definition(store, fetch_ctx, "worker", COMPONENT)

        assert len(store.operations("get")) == 1

    @pytest.mark.asyncio
    async def test_rejected_object_counts_as_miss(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="app"), namespace="default")
        store.add(make_definition(DefinitionKind.COMPONENT, "worker", marker="sys"), namespace="vela-system")

        obj = await get_definition(
            store,
            fetch_ctx,
            "worker",
            COMPONENT,
            legacy_kinds=(),
            accept=lambda o: o.spec.get("marker") == "sys",
        )

        assert obj.namespace == "vela-system"

    @pytest.mark.asyncio
    async def test_rejected_everywhere(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker"), namespace="default")

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await get_definition(
                store, fetch_ctx, "worker", COMPONENT, legacy_kinds=(), accept=lambda o: False
            )

        assert exc_info.value.namespace == "default"


class TestLegacyClusterScopedFallback:
    @pytest.mark.asyncio
    async def test_legacy_object_found(self, store, fetch_ctx, make_definition):
        store.add_cluster_scoped(make_definition(DefinitionKind.COMPONENT, "worker", marker="legacy"))

        obj = await get_definition_from_namespace(store, fetch_ctx, "worker", COMPONENT, "default")

        assert obj.spec["marker"] == "legacy"
        assert obj.namespace is None
        assert [call[2] for call in store.operations("get")] == ["default", None]

    @pytest.mark.asyncio
    async def test_namespace_rejection_keeps_original_not_found(self, store, fetch_ctx):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            await get_definition_from_namespace(store, fetch_ctx, "worker", COMPONENT, "default")

        assert exc_info.value.namespace == "default"
        assert exc_info.value.__cause__ is None
        assert [call[2] for call in store.operations("get")] == ["default", None]

    @pytest.mark.asyncio
    async def test_namespace_rejection_continues_search(self, store, fetch_ctx, make_definition):
        store.add(make_definition(DefinitionKind.COMPONENT, "worker"), namespace="vela-system")

        obj = await get_definition(store, fetch_ctx, "worker", COMPONENT)

        assert obj.namespace == "vela-system"
        assert [call[2] for call in store.operations("get")] == [
            "default",
            None,
            "platform",
            None,
            "vela-system",
        ]

    @pytest.mark.asyncio
    async def test_legacy_miss_is_not_found(self, store, fetch_ctx, make_definition):
        store.add_cluster_scoped(make_definition(DefinitionKind.COMPONENT, "other"))

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await get_definition_from_namespace(store, fetch_ctx, "worker", COMPONENT, "default")

        assert exc_info.value.namespace is None

    @pytest.mark.asyncio
    async def test_non_legacy_kind_not_retried(self, store, fetch_ctx):
        with pytest.raises(ResourceNotFoundError):
            await get_definition_from_namespace(
                store, fetch_ctx, "worker-v1", ResourceKind.DEFINITION_REVISION, "default"
            )

        assert len(store.operations("get")) == 1

    @pytest.mark.asyncio
    async def test_other_retry_error_propagates(self, store, fetch_ctx):
        class FlakyStore:
            def __init__(self):
                self.calls = 0

            async def get(self, kind, name, namespace):
                self.calls += 1
                if namespace is None:
                    raise UpstreamError("connection reset")
                raise ResourceNotFoundError(kind.value, name, namespace)

            async def list(self, kind, namespace, labels):
                return []

        flaky = FlakyStore()
        with pytest.raises(UpstreamError, match="connection reset"):
            await get_definition(flaky, fetch_ctx, "worker", COMPONENT)

        assert flaky.calls == 2
