"""Revision candidate search within one namespace."""

from __future__ import annotations

from collections.abc import Iterable

from capspine.core.logging import get_logger
from capspine.core.protocols import ResourceAccessor
from capspine.models import DefinitionKind, DefinitionRevision, ResourceKind
from capspine.resolver.context import ResolveContext
from capspine.resolver.store import call_store

logger = get_logger(__name__)


async def list_revisions(
    store: ResourceAccessor,
    ctx: ResolveContext,
    namespace: str,
    base_name: str,
    kind: DefinitionKind,
) -> list[DefinitionRevision]:
    """List every stored revision of ``base_name`` in ``namespace``.

    Selects revisions by the kind-specific name label
    (``componentdefinition.oam.dev/name=<base_name>`` for components, ...).
    The store gives no ordering guarantee and neither does this function.
    Store errors propagate unchanged.
    """
    selector = {kind.name_label: base_name}
    revisions = await call_store(
        ctx, store.list, ResourceKind.DEFINITION_REVISION, namespace, selector
    )
    logger.debug(
        "revisions_listed",
        namespace=namespace,
        definition=base_name,
        kind=kind.value,
        revisions=revision_names(revisions),
    )
    return list(revisions)


def revision_names(revisions: Iterable[DefinitionRevision]) -> list[str]:
    return [revision.name for revision in revisions]


__all__ = ["list_revisions", "revision_names"]
