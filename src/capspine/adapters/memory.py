"""In-memory resource store.

Implements the :class:`~capspine.core.protocols.ResourceAccessor` contract
over plain dicts. Used by the test-suite and by applications that embed the
resolver over definitions loaded from YAML manifests.

Behaviour mirrors a real API server where it matters to the resolver:

- namespaced objects are keyed by ``(kind, namespace, name)``;
- a kind only accepts a no-namespace ``get`` if legacy cluster-scoped
  objects of that kind were added; otherwise the lookup is rejected with
  :class:`~capspine.core.errors.NamespaceRequiredError`;
- ``list`` matches every label pair of the selector and returns objects
  in insertion order, which callers must not rely on.

Example:
    store = InMemoryResourceStore()
    store.load_yaml(Path("definitions.yaml").read_text(), namespace="vela-system")
    resolver = DefinitionRevisionResolver(store)
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping

from capspine.core.errors import NamespaceRequiredError, ResourceNotFoundError
from capspine.models import ResourceKind, StoredObject, load_manifests, resource_kind_of


def _in_namespace(obj: StoredObject, namespace: str | None) -> StoredObject:
    if obj.metadata.namespace == namespace:
        return obj
    return obj.model_copy(update={"metadata": obj.metadata.model_copy(update={"namespace": namespace})})


class InMemoryResourceStore:
    """Dict-backed resource store with failure injection and call recording.

    Attributes:
        calls: ``(operation, kind, namespace, name_or_labels)`` per store call.
        latency: Seconds every call sleeps before answering.
    """

    def __init__(self, objects: Iterable[StoredObject] = (), *, latency: float = 0.0):
        self._namespaced: dict[tuple[ResourceKind, str, str], StoredObject] = {}
        self._cluster_scoped: dict[tuple[ResourceKind, str], StoredObject] = {}
        self._legacy_kinds: set[ResourceKind] = set()
        self._failures: dict[tuple[str, ResourceKind], BaseException] = {}
        self.calls: list[tuple[str, ResourceKind, str | None, object]] = []
        self.latency = latency
        for obj in objects:
            self.add(obj)

    # ------------------------------------------------------------------ #
    # Seeding
    # ------------------------------------------------------------------ #

    def add(self, obj: StoredObject, namespace: str | None = None) -> StoredObject:
        """Store a namespaced object; ``namespace`` overrides the object's own."""
        namespace = namespace or obj.metadata.namespace
        if not namespace:
            raise ValueError(f"{obj.kind} {obj.metadata.name!r} has no namespace")
        obj = _in_namespace(obj, namespace)
        self._namespaced[(resource_kind_of(obj), namespace, obj.metadata.name)] = obj
        return obj

    def add_cluster_scoped(self, obj: StoredObject) -> StoredObject:
        """Store an object the way old installations did, without a namespace."""
        obj = _in_namespace(obj, None)
        kind = resource_kind_of(obj)
        self._legacy_kinds.add(kind)
        self._cluster_scoped[(kind, obj.metadata.name)] = obj
        return obj

    def load_yaml(self, yaml_content: str, namespace: str | None = None) -> list[StoredObject]:
        """Parse manifests and store them (namespaced)."""
        return [self.add(obj, namespace) for obj in load_manifests(yaml_content)]

    def fail_on(self, operation: str, kind: ResourceKind, error: BaseException) -> None:
        """Make every ``operation`` (``"get"`` or ``"list"``) on ``kind`` raise ``error``."""
        if operation not in ("get", "list"):
            raise ValueError(f"unknown operation {operation!r}")
        self._failures[(operation, kind)] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    # ------------------------------------------------------------------ #
    # ResourceAccessor
    # ------------------------------------------------------------------ #

    async def _enter(self, operation: str, kind: ResourceKind, namespace: str | None, key: object) -> None:
        self.calls.append((operation, kind, namespace, key))
        if self.latency:
            await asyncio.sleep(self.latency)
        failure = self._failures.get((operation, kind))
        if failure is not None:
            raise failure

    async def get(self, kind: ResourceKind, name: str, namespace: str | None) -> StoredObject:
        await self._enter("get", kind, namespace, name)
        if namespace is None:
            if kind not in self._legacy_kinds:
                raise NamespaceRequiredError()
            try:
                return self._cluster_scoped[(kind, name)]
            except KeyError:
                raise ResourceNotFoundError(kind.value, name) from None
        try:
            return self._namespaced[(kind, namespace, name)]
        except KeyError:
            raise ResourceNotFoundError(kind.value, name, namespace) from None

    async def list(
        self, kind: ResourceKind, namespace: str, labels: Mapping[str, str]
    ) -> list[StoredObject]:
        selector = dict(labels)
        await self._enter("list", kind, namespace, selector)
        return [
            obj
            for (obj_kind, obj_namespace, _), obj in self._namespaced.items()
            if obj_kind == kind
            and obj_namespace == namespace
            and all(obj.metadata.labels.get(k) == v for k, v in selector.items())
        ]

    def operations(self, operation: str) -> list[tuple[str, ResourceKind, str | None, object]]:
        """Recorded calls of one operation type."""
        return [call for call in self.calls if call[0] == operation]


__all__ = ["InMemoryResourceStore"]
