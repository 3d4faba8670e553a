"""Pydantic models for capability definitions and their revisions.

Four capability definition kinds (component, trait, policy, workflow step)
share one manifest shape. A :class:`DefinitionRevision` is an immutable
snapshot that embeds exactly one of them, tagged by ``definitionType``.

Usage::

    from capspine.models import DefinitionRevision, load_manifests

    revision = DefinitionRevision.model_validate(yaml_data)
    definition = revision.payload

    objects = load_manifests(multi_document_yaml)

Example YAML::

    apiVersion: core.oam.dev/v1beta1
    kind: DefinitionRevision
    metadata:
      name: worker-v1.2.0
      namespace: vela-system
      labels:
        componentdefinition.oam.dev/name: worker
    spec:
      revision: 3
      definitionType: Component
      componentDefinition:
        kind: ComponentDefinition
        metadata:
          name: worker
        spec:
          workload:
            definition: {apiVersion: apps/v1, kind: Deployment}

Tags:
    capspine, models, pydantic, yaml, definitions, revisions
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from capspine.core.errors import InvalidDefinitionTypeError

API_VERSION = "core.oam.dev/v1beta1"

LABEL_COMPONENT_DEFINITION_NAME = "componentdefinition.oam.dev/name"
LABEL_TRAIT_DEFINITION_NAME = "trait.oam.dev/name"
LABEL_POLICY_DEFINITION_NAME = "policydefinition.oam.dev/name"
LABEL_WORKFLOW_STEP_DEFINITION_NAME = "workflowstepdefinition.oam.dev/name"

ANNOTATION_AUTO_UPDATE = "app.oam.dev/autoUpdate"


class ResourceKind(str, Enum):
    """Kinds of objects held by the resource store."""

    COMPONENT_DEFINITION = "ComponentDefinition"
    TRAIT_DEFINITION = "TraitDefinition"
    POLICY_DEFINITION = "PolicyDefinition"
    WORKFLOW_STEP_DEFINITION = "WorkflowStepDefinition"
    DEFINITION_REVISION = "DefinitionRevision"


# Old installations registered definition CRDs cluster scoped.
LEGACY_CLUSTER_SCOPED_KINDS = frozenset(
    {
        ResourceKind.COMPONENT_DEFINITION,
        ResourceKind.TRAIT_DEFINITION,
        ResourceKind.POLICY_DEFINITION,
        ResourceKind.WORKFLOW_STEP_DEFINITION,
    }
)


class DefinitionKind(str, Enum):
    """Capability definition type recorded on a revision."""

    COMPONENT = "Component"
    TRAIT = "Trait"
    POLICY = "Policy"
    WORKFLOW_STEP = "WorkflowStep"

    @property
    def name_label(self) -> str:
        """Label key a revision uses to name the definition it snapshots."""
        return _NAME_LABELS[self]

    @property
    def resource_kind(self) -> ResourceKind:
        """Store kind of the live (unversioned) definition."""
        return _RESOURCE_KINDS[self]


_NAME_LABELS = {
    DefinitionKind.COMPONENT: LABEL_COMPONENT_DEFINITION_NAME,
    DefinitionKind.TRAIT: LABEL_TRAIT_DEFINITION_NAME,
    DefinitionKind.POLICY: LABEL_POLICY_DEFINITION_NAME,
    DefinitionKind.WORKFLOW_STEP: LABEL_WORKFLOW_STEP_DEFINITION_NAME,
}

_RESOURCE_KINDS = {
    DefinitionKind.COMPONENT: ResourceKind.COMPONENT_DEFINITION,
    DefinitionKind.TRAIT: ResourceKind.TRAIT_DEFINITION,
    DefinitionKind.POLICY: ResourceKind.POLICY_DEFINITION,
    DefinitionKind.WORKFLOW_STEP: ResourceKind.WORKFLOW_STEP_DEFINITION,
}


class ObjectMeta(BaseModel):
    """Name, namespace, labels and annotations of a stored object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    namespace: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class _Definition(BaseModel):
    """Shared manifest shape of the four capability definitions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    apiVersion: str = API_VERSION
    metadata: ObjectMeta
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace


class ComponentDefinition(_Definition):
    kind: Literal["ComponentDefinition"] = "ComponentDefinition"


class TraitDefinition(_Definition):
    kind: Literal["TraitDefinition"] = "TraitDefinition"


class PolicyDefinition(_Definition):
    kind: Literal["PolicyDefinition"] = "PolicyDefinition"


class WorkflowStepDefinition(_Definition):
    kind: Literal["WorkflowStepDefinition"] = "WorkflowStepDefinition"


CapabilityDefinition = Union[
    ComponentDefinition, TraitDefinition, PolicyDefinition, WorkflowStepDefinition
]

_PAYLOAD_TYPES: dict[DefinitionKind, type[_Definition]] = {
    DefinitionKind.COMPONENT: ComponentDefinition,
    DefinitionKind.TRAIT: TraitDefinition,
    DefinitionKind.POLICY: PolicyDefinition,
    DefinitionKind.WORKFLOW_STEP: WorkflowStepDefinition,
}


class DefinitionRevisionSpec(BaseModel):
    """Snapshot body: revision counter, hash, type tag and one payload."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    revision: int = Field(default=1, ge=0)
    revision_hash: str = Field(default="", alias="revisionHash")
    definition_type: DefinitionKind = Field(..., alias="definitionType")
    component_definition: ComponentDefinition | None = Field(default=None, alias="componentDefinition")
    trait_definition: TraitDefinition | None = Field(default=None, alias="traitDefinition")
    policy_definition: PolicyDefinition | None = Field(default=None, alias="policyDefinition")
    workflow_step_definition: WorkflowStepDefinition | None = Field(
        default=None, alias="workflowStepDefinition"
    )

    @model_validator(mode="after")
    def _single_payload_matching_type(self) -> DefinitionRevisionSpec:
        present = {
            kind
            for kind, value in (
                (DefinitionKind.COMPONENT, self.component_definition),
                (DefinitionKind.TRAIT, self.trait_definition),
                (DefinitionKind.POLICY, self.policy_definition),
                (DefinitionKind.WORKFLOW_STEP, self.workflow_step_definition),
            )
            if value is not None
        }
        if present != {self.definition_type}:
            raise ValueError(
                f"definitionType {self.definition_type.value} requires exactly its own payload, "
                f"got {sorted(k.value for k in present) or 'none'}"
            )
        return self

    @property
    def payload(self) -> CapabilityDefinition:
        """The embedded definition selected by ``definition_type``."""
        match self.definition_type:
            case DefinitionKind.COMPONENT:
                return self.component_definition
            case DefinitionKind.TRAIT:
                return self.trait_definition
            case DefinitionKind.POLICY:
                return self.policy_definition
            case DefinitionKind.WORKFLOW_STEP:
                return self.workflow_step_definition
        raise InvalidDefinitionTypeError(f"unknown definition type {self.definition_type!r}")


class DefinitionRevision(BaseModel):
    """Immutable snapshot of a capability definition, named ``<base>-v<semver>``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    apiVersion: str = API_VERSION
    kind: Literal["DefinitionRevision"] = "DefinitionRevision"
    metadata: ObjectMeta
    spec: DefinitionRevisionSpec

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace

    @property
    def definition_type(self) -> DefinitionKind:
        return self.spec.definition_type

    @property
    def payload(self) -> CapabilityDefinition:
        return self.spec.payload


StoredObject = Union[CapabilityDefinition, DefinitionRevision]

_MANIFEST_TYPES: dict[str, type[BaseModel]] = {
    ResourceKind.COMPONENT_DEFINITION.value: ComponentDefinition,
    ResourceKind.TRAIT_DEFINITION.value: TraitDefinition,
    ResourceKind.POLICY_DEFINITION.value: PolicyDefinition,
    ResourceKind.WORKFLOW_STEP_DEFINITION.value: WorkflowStepDefinition,
    ResourceKind.DEFINITION_REVISION.value: DefinitionRevision,
}


def definition_kind_for(definition: Any) -> DefinitionKind:
    """Map a definition model (instance or class) to its :class:`DefinitionKind`.

    Raises:
        InvalidDefinitionTypeError: For anything that is not one of the four
            capability definition models.
    """
    cls = definition if isinstance(definition, type) else type(definition)
    for kind, payload_type in _PAYLOAD_TYPES.items():
        if cls is payload_type:
            return kind
    name = getattr(definition, "name", None) or getattr(cls, "__name__", repr(definition))
    raise InvalidDefinitionTypeError(f"invalid definition type for {name}")


def payload_type_for(kind: DefinitionKind) -> type[_Definition]:
    """Model class embedded by revisions of ``kind``."""
    return _PAYLOAD_TYPES[kind]


def resource_kind_of(obj: StoredObject) -> ResourceKind:
    """Store kind of a model instance."""
    return ResourceKind(obj.kind)


def parse_manifest(data: dict[str, Any]) -> StoredObject:
    """Validate one manifest mapping, dispatching on its ``kind``."""
    if not isinstance(data, dict):
        raise ValueError(f"manifest must be a mapping, got {type(data).__name__}")
    kind = data.get("kind")
    model = _MANIFEST_TYPES.get(kind)
    if model is None:
        raise ValueError(f"unsupported manifest kind {kind!r}")
    return model.model_validate(data)


def load_manifests(yaml_content: str) -> list[StoredObject]:
    """Parse a (multi-document) YAML string into definition models.

    Empty documents are skipped.

    Raises:
        ValueError: If the YAML is invalid or a document is not a known kind.
        pydantic.ValidationError: If a document does not match its schema.
    """
    try:
        documents = list(yaml.safe_load_all(yaml_content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    return [parse_manifest(doc) for doc in documents if doc is not None]


__all__ = [
    "API_VERSION",
    "ANNOTATION_AUTO_UPDATE",
    "LABEL_COMPONENT_DEFINITION_NAME",
    "LABEL_TRAIT_DEFINITION_NAME",
    "LABEL_POLICY_DEFINITION_NAME",
    "LABEL_WORKFLOW_STEP_DEFINITION_NAME",
    "LEGACY_CLUSTER_SCOPED_KINDS",
    "ResourceKind",
    "DefinitionKind",
    "ObjectMeta",
    "ComponentDefinition",
    "TraitDefinition",
    "PolicyDefinition",
    "WorkflowStepDefinition",
    "CapabilityDefinition",
    "DefinitionRevisionSpec",
    "DefinitionRevision",
    "StoredObject",
    "definition_kind_for",
    "payload_type_for",
    "resource_kind_of",
    "parse_manifest",
    "load_manifests",
]
