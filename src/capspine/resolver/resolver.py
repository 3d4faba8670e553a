"""
Definition revision resolver.

Turns a capability reference into the definition a reconciler should use:

    ``worker``            → :class:`UseLive` (fetch the current definition)
    ``worker@v1.3.1``     → :class:`UseRevision` (the stored ``worker-v1.3.1``)
    ``worker@v1.3.1`` + ``app.oam.dev/autoUpdate: "true"``
                          → :class:`UseRevision` of the newest ``worker-v1.3.*``

Manifesto:
    Running applications must not change behaviour because someone edited a
    definition they pinned. Pinned references therefore resolve to immutable
    revisions, searched with the same namespace precedence as live
    definitions so an application-namespace revision shadows a platform one.

    - **Stateless:** No cache, no retries; every call re-reads the store
    - **Two search orders:** by-name fetch (app → x-definition → system),
      latest lookup (app → system)
    - **Explicit missing policy:** ``fallback_to_live_on_missing`` decides
      whether a missing pinned revision is fatal

Architecture:
    ::

        resolve(ctx, "worker@v1.3", Component, annotations)
          │
          ├─ no "@" ────────────────────────────────→ UseLive("worker")
          ├─ convert_to_revision_name → "worker-v1.3"   (InvalidNameError)
          ├─ autoUpdate == "true"
          │     latest_revision_name(ctx, "worker", "worker-v1.3", Component)
          │       for ns in [app, system]:
          │           list_revisions → select_best_revision
          ├─ get_definition(ctx, token, DefinitionRevision)
          │       app → x-definition → system (+ legacy fallback)
          └─────────────────────────────────────────→ UseRevision(revision)

Examples:
    >>> resolver = DefinitionRevisionResolver(store)
    >>> ctx = ResolveContext().with_namespace("shop")
    >>> target = await resolver.resolve(ctx, "worker@v1.3.1", DefinitionKind.COMPONENT)
    >>> target.revision.name
    'worker-v1.3.1'

Tags:
    resolver, revisions, semver, namespaces, capspine
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from capspine.core.errors import DefinitionNotFoundError, NotFoundError
from capspine.core.logging import get_logger
from capspine.core.protocols import ResourceAccessor
from capspine.core.settings import ResolverSettings, get_resolver_settings
from capspine.models import (
    ANNOTATION_AUTO_UPDATE,
    CapabilityDefinition,
    DefinitionKind,
    DefinitionRevision,
    ResourceKind,
    StoredObject,
    definition_kind_for,
    payload_type_for,
)
from capspine.resolver.context import ResolveContext
from capspine.resolver.fetch import get_definition
from capspine.resolver.reference import CapabilityReference, convert_to_revision_name
from capspine.resolver.search import list_revisions
from capspine.resolver.selector import select_best_revision

logger = get_logger(__name__)


@dataclass(frozen=True)
class UseLive:
    """Use the current, unversioned definition named ``name``."""

    name: str


@dataclass(frozen=True)
class UseRevision:
    """Use this stored revision."""

    revision: DefinitionRevision


ResolvedTarget = Union[UseLive, UseRevision]


def auto_update_token(revision_name: str, base_name: str) -> str:
    """Drop the patch component (and anything after it) from a pinned revision name.

    ``worker-v1.3.1`` → ``worker-v1.3``; ``worker-v1.3`` and ``worker-v1``
    are already partial and stay as they are. Opaque tokens are returned
    unchanged.
    """
    prefix = f"{base_name}-v"
    if not revision_name.startswith(prefix):
        return revision_name
    version = revision_name[len(prefix):]
    core = version.split("-", 1)[0].split("+", 1)[0]
    parts = core.split(".")
    if len(parts) < 3 or not all(part.isdigit() for part in parts[:2]):
        return revision_name
    return f"{prefix}{parts[0]}.{parts[1]}"


class DefinitionRevisionResolver:
    """
    Resolves capability references against a :class:`ResourceAccessor`.

    Safe to share between concurrent tasks: it holds only the store and the
    immutable settings.

    Args:
        store: Resource store to read definitions and revisions from.
        settings: Resolver configuration; defaults to the process settings.
    """

    def __init__(self, store: ResourceAccessor, settings: ResolverSettings | None = None):
        self.store = store
        self.settings = settings or get_resolver_settings()

    def context(self) -> ResolveContext:
        """Root context carrying the configured system namespace."""
        return ResolveContext.from_settings(self.settings)

    def _prepare(self, ctx: ResolveContext | None) -> ResolveContext:
        ctx = ctx or self.context()
        if ctx.deadline is None and self.settings.store_timeout_seconds is not None:
            ctx = ctx.with_timeout(self.settings.store_timeout_seconds)
        return ctx

    async def resolve(
        self,
        ctx: ResolveContext | None,
        reference: str,
        kind: DefinitionKind,
        annotations: Mapping[str, str] | None = None,
    ) -> ResolvedTarget:
        """Resolve ``reference`` to the live definition or a stored revision.

        Raises:
            InvalidNameError: The reference does not make a valid revision name.
            InvalidVersionError: A stored revision name is not semver (auto-update).
            DefinitionNotFoundError: The revision exists in no searched
                namespace and ``fallback_to_live_on_missing`` is off. It names
                every namespace searched; the first namespace's miss is its cause.
            ResolutionCancelledError: The context deadline passed.
        """
        ref = CapabilityReference.parse(reference)
        if not ref.is_pinned:
            return UseLive(ref.base_name)

        ctx = self._prepare(ctx)
        token = convert_to_revision_name(reference)
        log = logger.bind(definition=ref.base_name, kind=kind.value)

        try:
            if (annotations or {}).get(ANNOTATION_AUTO_UPDATE) == "true":
                pinned = token
                token = await self.latest_revision_name(
                    ctx, ref.base_name, auto_update_token(token, ref.base_name), kind
                )
                log.info("auto_update_repinned", pinned=pinned, revision=token)

            try:
                revision = await get_definition(
                    self.store,
                    ctx,
                    token,
                    ResourceKind.DEFINITION_REVISION,
                    self.settings.legacy_cluster_scoped_kinds,
                    accept=lambda obj: obj.definition_type == kind,
                )
            except NotFoundError as err:
                # The first namespace's miss stays attached as the cause.
                raise DefinitionNotFoundError(
                    ref.base_name, kind.value, ctx.fetch_namespaces(), cause=err
                ).with_context(revision=token) from err
        except NotFoundError:
            if not self.settings.fallback_to_live_on_missing:
                raise
            log.warning("revision_missing_using_live", revision=token)
            return UseLive(ref.base_name)

        log.debug("revision_resolved", revision=revision.name, namespace=revision.namespace)
        return UseRevision(revision)

    async def latest_revision_name(
        self,
        ctx: ResolveContext | None,
        base_name: str,
        exact_revision_token: str,
        kind: DefinitionKind,
    ) -> str:
        """Newest revision of ``base_name`` matching ``exact_revision_token``.

        Searches the application namespace, then the system namespace; the
        first namespace with a match wins, so application revisions shadow
        system ones.

        Raises:
            DefinitionNotFoundError: No namespace holds a matching revision.
            InvalidVersionError: A matching revision's suffix is not semver.
        """
        ctx = self._prepare(ctx)
        namespaces = ctx.revision_search_namespaces()
        for namespace in namespaces:
            revisions = await list_revisions(self.store, ctx, namespace, base_name, kind)
            matched = select_best_revision(exact_revision_token, base_name, revisions, kind)
            if matched:
                return matched
        raise DefinitionNotFoundError(base_name, kind.value, namespaces).with_context(
            revision=exact_revision_token
        )

    async def get_definition(
        self,
        ctx: ResolveContext | None,
        name: str,
        kind: ResourceKind,
    ) -> StoredObject:
        """Fetch an object by name with the two-tier namespace search."""
        return await get_definition(
            self.store, self._prepare(ctx), name, kind, self.settings.legacy_cluster_scoped_kinds
        )

    async def get_capability_definition(
        self,
        ctx: ResolveContext | None,
        definition_type: DefinitionKind | type | Any,
        reference: str,
        annotations: Mapping[str, str] | None = None,
    ) -> CapabilityDefinition:
        """Resolve ``reference`` and return the definition payload to use.

        Args:
            definition_type: A :class:`DefinitionKind`, or a definition model
                class/instance whose kind is inferred.
        """
        if isinstance(definition_type, DefinitionKind):
            kind = definition_type
        else:
            kind = definition_kind_for(definition_type)
        ctx = self._prepare(ctx)

        target = await self.resolve(ctx, reference, kind, annotations)
        match target:
            case UseRevision(revision=revision):
                return revision.payload
            case UseLive(name=name):
                payload_type = payload_type_for(kind)
                return await get_definition(
                    self.store,
                    ctx,
                    name,
                    kind.resource_kind,
                    self.settings.legacy_cluster_scoped_kinds,
                    accept=lambda obj: isinstance(obj, payload_type),
                )
        raise TypeError(f"unexpected resolution target {target!r}")


__all__ = [
    "UseLive",
    "UseRevision",
    "ResolvedTarget",
    "auto_update_token",
    "DefinitionRevisionResolver",
]
