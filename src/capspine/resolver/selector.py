"""
Version selection among stored revisions.

Given the revision name a reference converts to (``worker-v1.2``) and the
revisions listed for the definition, pick the one to use:

    1. Revisions of another definition kind are ignored.
    2. A revision named exactly ``worker-v1.2`` wins outright, even over
       higher versions. This is how opaque, non-semver tokens are pinned.
    3. Otherwise every revision named ``worker-v1.2.<...>`` is a candidate;
       its suffix after ``worker-`` must parse as semver.
    4. The highest semantic version wins (numeric, pre-release aware).

Nothing matching is not an error: the empty string tells the caller to
look in the next namespace.

Examples:
    Given revisions ``app-v1.0.0``, ``app-v1.2.0`` and ``app-v1.10.0``,
    ``select_best_revision("app-v1", "app", revisions, DefinitionKind.COMPONENT)``
    returns ``"app-v1.10.0"``.

Tags:
    semver, selection, revisions, capspine
"""

from __future__ import annotations

from collections.abc import Iterable

import semver

from capspine.core.errors import InvalidVersionError
from capspine.core.logging import get_logger
from capspine.models import DefinitionKind, DefinitionRevision
from capspine.resolver.versions import parse_semver

logger = get_logger(__name__)


def select_best_revision(
    exact_token: str,
    base_name: str,
    candidates: Iterable[DefinitionRevision],
    kind: DefinitionKind | None,
) -> str:
    """Return the best matching revision name, or ``""`` if none matches.

    Args:
        exact_token: Revision name the reference converts to (``<base>-v<partial>``).
        base_name: Definition name the revisions belong to.
        candidates: Revisions listed for ``base_name``, in any order.
        kind: Definition kind to keep; ``None`` keeps every kind.

    Raises:
        InvalidVersionError: A revision extending ``exact_token`` has a
            suffix that is not a semantic version.
    """
    matching = [
        revision
        for revision in candidates
        if kind is None or revision.definition_type == kind
    ]

    for revision in matching:
        if revision.name == exact_token:
            return exact_token

    prefix = exact_token + "."
    name_prefix = base_name + "-"
    best: tuple[semver.Version, str] | None = None
    for revision in matching:
        if not revision.name.startswith(prefix):
            continue
        if not revision.name.startswith(name_prefix):
            raise InvalidVersionError(revision.name, revision.name)
        suffix = revision.name[len(name_prefix):]
        try:
            version = parse_semver(suffix)
        except (ValueError, TypeError) as e:
            raise InvalidVersionError(revision.name, suffix, cause=e) from e
        # Build metadata does not order versions; the name keeps the choice stable.
        if best is None or (version, revision.name) > best:
            best = (version, revision.name)

    if best is None:
        return ""
    logger.debug(
        "revision_selected",
        definition=base_name,
        requested=exact_token,
        revision=best[1],
    )
    return best[1]


__all__ = ["select_best_revision"]
