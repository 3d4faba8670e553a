"""
Shared pytest fixtures for capspine tests.

This module provides:
- Definition / revision factories
- An in-memory resource store
- Resolver settings isolated from the environment and .env files

Usage:
    def test_something(store, make_revision, resolver):
        store.add(make_revision("worker", "v1.0.0"), namespace="default")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from capspine.adapters.memory import InMemoryResourceStore
from capspine.core.logging import clear_context
from capspine.core.settings import ResolverSettings
from capspine.models import (
    DefinitionKind,
    DefinitionRevision,
    DefinitionRevisionSpec,
    ObjectMeta,
    payload_type_for,
)
from capspine.resolver import DefinitionRevisionResolver, ResolveContext

APP_NAMESPACE = "default"
SYSTEM_NAMESPACE = "vela-system"

_PAYLOAD_FIELDS = {
    DefinitionKind.COMPONENT: "component_definition",
    DefinitionKind.TRAIT: "trait_definition",
    DefinitionKind.POLICY: "policy_definition",
    DefinitionKind.WORKFLOW_STEP: "workflow_step_definition",
}


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        if not any(item.iter_markers()):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Factories
# =============================================================================


def build_definition(
    kind: DefinitionKind,
    name: str,
    namespace: str | None = None,
    marker: str | None = None,
) -> Any:
    spec = {"marker": marker} if marker is not None else {}
    return payload_type_for(kind)(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=spec,
    )


def build_revision(
    base_name: str,
    suffix: str,
    kind: DefinitionKind = DefinitionKind.COMPONENT,
    namespace: str | None = None,
    marker: str | None = None,
    revision: int = 1,
) -> DefinitionRevision:
    """Revision ``<base_name>-<suffix>`` labelled for ``base_name``."""
    payload = build_definition(kind, base_name, marker=marker)
    spec = DefinitionRevisionSpec(
        revision=revision,
        definition_type=kind,
        **{_PAYLOAD_FIELDS[kind]: payload},
    )
    return DefinitionRevision(
        metadata=ObjectMeta(
            name=f"{base_name}-{suffix}",
            namespace=namespace,
            labels={kind.name_label: base_name},
        ),
        spec=spec,
    )


@pytest.fixture
def make_definition() -> Callable[..., Any]:
    return build_definition


@pytest.fixture
def make_revision() -> Callable[..., DefinitionRevision]:
    return build_revision


# =============================================================================
# Store / resolver
# =============================================================================


@pytest.fixture
def store() -> InMemoryResourceStore:
    return InMemoryResourceStore()


@pytest.fixture
def settings() -> ResolverSettings:
    return ResolverSettings(_env_file=None)


@pytest.fixture
def resolver(store, settings) -> DefinitionRevisionResolver:
    return DefinitionRevisionResolver(store, settings)


@pytest.fixture
def ctx() -> ResolveContext:
    return ResolveContext().with_namespace(APP_NAMESPACE)


@pytest.fixture(autouse=True)
def _clean_log_context():
    """Ensure bound log context does not leak between tests."""
    clear_context()
    yield
    clear_context()
