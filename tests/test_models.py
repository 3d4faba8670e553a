"""Tests for capspine.models."""

import pytest
from pydantic import ValidationError

from capspine.core.errors import InvalidDefinitionTypeError
from capspine.models import (
    ComponentDefinition,
    DefinitionKind,
    DefinitionRevision,
    DefinitionRevisionSpec,
    ObjectMeta,
    PolicyDefinition,
    ResourceKind,
    TraitDefinition,
    WorkflowStepDefinition,
    definition_kind_for,
    load_manifests,
    parse_manifest,
    payload_type_for,
    resource_kind_of,
)


class TestDefinitionKind:
    @pytest.mark.parametrize(
        "kind,label,resource_kind",
        [
            (DefinitionKind.COMPONENT, "componentdefinition.oam.dev/name", ResourceKind.COMPONENT_DEFINITION),
            (DefinitionKind.TRAIT, "trait.oam.dev/name", ResourceKind.TRAIT_DEFINITION),
            (DefinitionKind.POLICY, "policydefinition.oam.dev/name", ResourceKind.POLICY_DEFINITION),
            (
                DefinitionKind.WORKFLOW_STEP,
                "workflowstepdefinition.oam.dev/name",
                ResourceKind.WORKFLOW_STEP_DEFINITION,
            ),
        ],
    )
    def test_labels_and_kinds(self, kind, label, resource_kind):
        assert kind.name_label == label
        assert kind.resource_kind == resource_kind


class TestDefinitionKindFor:
    @pytest.mark.parametrize(
        "model,kind",
        [
            (ComponentDefinition, DefinitionKind.COMPONENT),
            (TraitDefinition, DefinitionKind.TRAIT),
            (PolicyDefinition, DefinitionKind.POLICY),
            (WorkflowStepDefinition, DefinitionKind.WORKFLOW_STEP),
        ],
    )
    def test_class_and_instance(self, model, kind):
        assert definition_kind_for(model) == kind
        assert definition_kind_for(model(metadata=ObjectMeta(name="x"))) == kind
        assert payload_type_for(kind) is model

    def test_invalid(self):
        with pytest.raises(InvalidDefinitionTypeError, match="invalid definition type for str"):
            definition_kind_for("worker")


class TestDefinitionRevision:
    def test_payload_selected_by_type(self, make_revision):
        revision = make_revision("scaler", "v1.0.0", kind=DefinitionKind.TRAIT, marker="m")

        assert revision.definition_type == DefinitionKind.TRAIT
        assert isinstance(revision.payload, TraitDefinition)
        assert revision.payload.spec == {"marker": "m"}
        assert resource_kind_of(revision) == ResourceKind.DEFINITION_REVISION

    def test_mismatched_payload_rejected(self):
        with pytest.raises(ValidationError, match="requires exactly its own payload"):
            DefinitionRevisionSpec(
                definition_type=DefinitionKind.COMPONENT,
                trait_definition=TraitDefinition(metadata=ObjectMeta(name="scaler")),
            )

    def test_missing_payload_rejected(self):
        with pytest.raises(ValidationError):
            DefinitionRevisionSpec(definition_type=DefinitionKind.POLICY)

    def test_frozen(self, make_revision):
        revision = make_revision("worker", "v1.0.0")
        with pytest.raises(ValidationError):
            revision.metadata = ObjectMeta(name="other")

    def test_camel_case_round_trip(self, make_revision):
        revision = make_revision("worker", "v1.0.0")
        data = revision.model_dump(by_alias=True, exclude_none=True)

        assert data["spec"]["definitionType"] == "Component"
        assert "componentDefinition" in data["spec"]
        assert DefinitionRevision.model_validate(data) == revision


class TestManifests:
    def test_parse_manifest_dispatches_on_kind(self):
        obj = parse_manifest(
            {"apiVersion": "core.oam.dev/v1beta1", "kind": "PolicyDefinition", "metadata": {"name": "topology"}}
        )
        assert isinstance(obj, PolicyDefinition)
        assert obj.name == "topology"

    @pytest.mark.parametrize("data", [{"kind": "Deployment", "metadata": {"name": "x"}}, ["not", "a", "map"]])
    def test_parse_manifest_rejects(self, data):
        with pytest.raises(ValueError):
            parse_manifest(data)

    def test_load_manifests_skips_empty_documents(self):
        objects = load_manifests(
            "---\nkind: TraitDefinition\nmetadata:\n  name: scaler\n---\n---\n"
            "kind: WorkflowStepDefinition\nmetadata:\n  name: deploy\n"
        )
        assert [obj.kind for obj in objects] == ["TraitDefinition", "WorkflowStepDefinition"]

    def test_invalid_yaml(self):
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_manifests("kind: [unclosed")
