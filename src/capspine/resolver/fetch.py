"""
Two-tier namespaced fetch with the legacy cluster-scope fallback.

Definitions live either next to the application or in a platform
namespace. A by-name fetch therefore walks the namespaces of the context
in order (application → x-definition → system) and returns the first hit.

Old installations registered definition kinds cluster scoped. For those
kinds a namespaced miss is retried once without a namespace. On a current
installation that retry is rejected with "an empty namespace may not be
set when a resource name is provided"; that message means "no legacy
object" and the original not-found stands.

Architecture:
    ::

        get_definition(name)
          for ns in [app, x-definition, system]:
              get_definition_from_namespace(name, ns)
                 get(ns) ── hit ──────────────────────────→ return
                   │ not found, kind is legacy
                   ↓
                 get(no namespace) ── hit ────────────────→ return
                   │ "empty namespace" error → original not-found
                   │ any other error          → raise it
              not found → next namespace
              other error → raise immediately
          all missed → raise the FIRST not-found

Tags:
    fetch, namespaces, fallback, legacy, capspine
"""

from __future__ import annotations

from collections.abc import Callable, Collection

from capspine.core.errors import NamespaceRequiredError, NotFoundError, ResourceNotFoundError
from capspine.core.logging import get_logger
from capspine.core.protocols import ResourceAccessor
from capspine.models import LEGACY_CLUSTER_SCOPED_KINDS, ResourceKind, StoredObject
from capspine.resolver.context import ResolveContext
from capspine.resolver.store import call_store

logger = get_logger(__name__)


def is_request_namespace_error(error: BaseException | None) -> bool:
    """True for the store's "namespaced kind fetched without a namespace" rejection."""
    return error is not None and str(error) == NamespaceRequiredError.MESSAGE


async def get_definition_from_namespace(
    store: ResourceAccessor,
    ctx: ResolveContext,
    name: str,
    kind: ResourceKind,
    namespace: str,
    legacy_kinds: Collection[ResourceKind] = LEGACY_CLUSTER_SCOPED_KINDS,
) -> StoredObject:
    """Fetch ``name`` from one namespace, retrying cluster scoped for legacy kinds."""
    try:
        return await call_store(ctx, store.get, kind, name, namespace)
    except NotFoundError as err:
        if kind not in legacy_kinds:
            raise
        try:
            obj = await call_store(ctx, store.get, kind, name, None)
        except Exception as retry_err:
            if is_request_namespace_error(retry_err):
                raise err from None
            raise
        logger.debug("legacy_cluster_scoped_hit", kind=kind.value, name=name)
        return obj


async def get_definition(
    store: ResourceAccessor,
    ctx: ResolveContext,
    name: str,
    kind: ResourceKind,
    legacy_kinds: Collection[ResourceKind] = LEGACY_CLUSTER_SCOPED_KINDS,
    accept: Callable[[StoredObject], bool] | None = None,
) -> StoredObject:
    """Fetch ``name`` from the first namespace of the context that has it.

    Args:
        accept: Optional filter; an object it rejects counts as not found in
            that namespace.

    Raises:
        NotFoundError: The first not-found error when every namespace missed.
        Exception: Any other store error, unchanged, from the namespace that
            raised it.
    """
    first_error: NotFoundError | None = None
    for namespace in ctx.fetch_namespaces():
        try:
            obj = await get_definition_from_namespace(store, ctx, name, kind, namespace, legacy_kinds)
        except NotFoundError as err:
            logger.debug("namespace_miss", kind=kind.value, name=name, namespace=namespace)
            if first_error is None:
                first_error = err
            continue
        if accept is not None and not accept(obj):
            logger.debug("namespace_kind_mismatch", kind=kind.value, name=name, namespace=namespace)
            if first_error is None:
                first_error = ResourceNotFoundError(kind.value, name, namespace)
            continue
        return obj

    if first_error is None:
        raise ResourceNotFoundError(kind.value, name)
    raise first_error


__all__ = [
    "is_request_namespace_error",
    "get_definition_from_namespace",
    "get_definition",
]
