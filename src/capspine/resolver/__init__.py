"""capspine.resolver -- capability reference → definition revision resolution.

Architecture::

    context.py     ResolveContext, namespace accessors and scoped setters
    reference.py   CapabilityReference, convert_to_revision_name, name validation
    versions.py    Lenient semver parsing of revision suffixes
    store.py       Deadline-bounded store calls
    search.py      list_revisions (label-selector query, one namespace)
    selector.py    select_best_revision (exact match, then highest semver)
    fetch.py       Two-tier namespaced fetch with legacy cluster-scope fallback
    resolver.py    DefinitionRevisionResolver (resolve, latest_revision_name, ...)
"""

from capspine.resolver.context import (
    ResolveContext,
    namespace_for_app,
    namespace_for_x_definition,
    set_namespace,
    set_x_definition_namespace,
)
from capspine.resolver.fetch import get_definition, get_definition_from_namespace
from capspine.resolver.reference import (
    CapabilityReference,
    convert_to_revision_name,
    extract_component_name,
    extract_revision_num,
    qualified_name_errors,
    split_revision_name,
)
from capspine.resolver.resolver import (
    DefinitionRevisionResolver,
    ResolvedTarget,
    UseLive,
    UseRevision,
)
from capspine.resolver.search import list_revisions
from capspine.resolver.selector import select_best_revision

__all__ = [
    "ResolveContext",
    "namespace_for_app",
    "namespace_for_x_definition",
    "set_namespace",
    "set_x_definition_namespace",
    "get_definition",
    "get_definition_from_namespace",
    "CapabilityReference",
    "convert_to_revision_name",
    "extract_component_name",
    "extract_revision_num",
    "qualified_name_errors",
    "split_revision_name",
    "DefinitionRevisionResolver",
    "ResolvedTarget",
    "UseLive",
    "UseRevision",
    "list_revisions",
    "select_best_revision",
]
