"""
Protocol definitions for the resource store the resolver reads from.

The resolver never talks to a concrete store. It consumes the
:class:`ResourceAccessor` shape: fetch one object by name, list objects by
label selector. Any client (an API-server reader, a database-backed
repository, the in-memory store in :mod:`capspine.adapters.memory`) that
matches this shape can back a resolver.

Architecture:
    ::

        ResourceAccessor Protocol:
        ┌────────────────────────────────────────────────────────────┐
        │ get(kind, name, namespace)        → object                 │
        │                                   → ResourceNotFoundError  │
        │                                   → any other exception    │
        │ list(kind, namespace, labels)     → list[object]           │
        │                                   → any other exception    │
        └────────────────────────────────────────────────────────────┘

Contract:
    - "Not found" MUST be reported as
      :class:`~capspine.core.errors.ResourceNotFoundError` (or a subclass of
      :class:`~capspine.core.errors.NotFoundError`). Fallback logic branches
      only on that.
    - ``namespace=None`` on ``get`` means a cluster-scoped lookup. Stores that
      hold the kind namespaced-only reject it with
      :class:`~capspine.core.errors.NamespaceRequiredError`.
    - ``list`` returns objects in no particular order.
    - Both calls are coroutines; cancellation propagates as
      ``asyncio.CancelledError``.

Tags:
    protocol, resource-store, async, capspine, contracts
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from capspine.models import ResourceKind, StoredObject


@runtime_checkable
class ResourceAccessor(Protocol):
    """
    Async fetch/list interface over a namespaced resource store.

    Example:
        async def latest_worker(store: ResourceAccessor) -> list[StoredObject]:
            return await store.list(
                ResourceKind.DEFINITION_REVISION,
                "vela-system",
                {"componentdefinition.oam.dev/name": "worker"},
            )
    """

    async def get(
        self,
        kind: ResourceKind,
        name: str,
        namespace: str | None,
    ) -> StoredObject:
        """Fetch one object; ``namespace=None`` is a cluster-scoped lookup."""
        ...

    async def list(
        self,
        kind: ResourceKind,
        namespace: str,
        labels: Mapping[str, str],
    ) -> list[StoredObject]:
        """List objects of ``kind`` in ``namespace`` whose labels include all of ``labels``."""
        ...


__all__ = ["ResourceAccessor"]
