"""capspine -- resolve capability references to immutable definition revisions.

Usage::

    from capspine import DefinitionKind, DefinitionRevisionResolver, ResolveContext

    resolver = DefinitionRevisionResolver(store)
    ctx = ResolveContext().with_namespace("shop")
    target = await resolver.resolve(ctx, "worker@v1.3.1", DefinitionKind.COMPONENT)
"""

from capspine.models import (
    ANNOTATION_AUTO_UPDATE,
    ComponentDefinition,
    DefinitionKind,
    DefinitionRevision,
    ObjectMeta,
    PolicyDefinition,
    ResourceKind,
    TraitDefinition,
    WorkflowStepDefinition,
    load_manifests,
)
from capspine.resolver import (
    DefinitionRevisionResolver,
    ResolveContext,
    ResolvedTarget,
    UseLive,
    UseRevision,
    convert_to_revision_name,
    namespace_for_app,
    namespace_for_x_definition,
    set_namespace,
    set_x_definition_namespace,
)

__version__ = "0.1.0"

__all__ = [
    "ANNOTATION_AUTO_UPDATE",
    "ComponentDefinition",
    "DefinitionKind",
    "DefinitionRevision",
    "ObjectMeta",
    "PolicyDefinition",
    "ResourceKind",
    "TraitDefinition",
    "WorkflowStepDefinition",
    "load_manifests",
    "DefinitionRevisionResolver",
    "ResolveContext",
    "ResolvedTarget",
    "UseLive",
    "UseRevision",
    "convert_to_revision_name",
    "namespace_for_app",
    "namespace_for_x_definition",
    "set_namespace",
    "set_x_definition_namespace",
    "__version__",
]
