"""Label/annotation merging and namespace selection for stored objects.

:class:`~capspine.models.ObjectMeta` is immutable, so every helper returns
a new metadata value instead of editing the one it was given.

Examples:
    >>> parent = ObjectMeta(name="app", labels={"team": "a"})
    >>> child = ObjectMeta(name="web", labels={"team": "b", "tier": "1"})
    >>> pass_label_and_annotation(parent, child).labels
    {'team': 'a', 'tier': '1'}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from capspine.models import ObjectMeta


def merge_map_override_with_dst(
    src: Mapping[str, str] | None, dst: Mapping[str, str] | None
) -> dict[str, str] | None:
    """Merge two maps that may be ``None``; ``dst`` wins on conflicts.

    Returns ``None`` only when both inputs are ``None``.
    """
    if src is None and dst is None:
        return None
    merged = dict(src or {})
    merged.update(dst or {})
    return merged


def pass_label_and_annotation(parent: ObjectMeta, child: ObjectMeta) -> ObjectMeta:
    """Copy the parent's labels and annotations onto the child; the parent wins."""
    return child.model_copy(
        update={
            "labels": merge_map_override_with_dst(child.labels, parent.labels),
            "annotations": merge_map_override_with_dst(child.annotations, parent.annotations),
        }
    )


def add_labels(meta: ObjectMeta, labels: Mapping[str, str]) -> ObjectMeta:
    """Merge ``labels`` into the object's labels, overriding existing keys."""
    return meta.model_copy(update={"labels": merge_map_override_with_dst(meta.labels, labels)})


def add_annotations(meta: ObjectMeta, annotations: Mapping[str, str]) -> ObjectMeta:
    """Merge ``annotations`` into the object's annotations, overriding existing keys."""
    return meta.model_copy(
        update={"annotations": merge_map_override_with_dst(meta.annotations, annotations)}
    )


def remove_labels(meta: ObjectMeta, keys: Iterable[str]) -> ObjectMeta:
    drop = set(keys)
    return meta.model_copy(update={"labels": {k: v for k, v in meta.labels.items() if k not in drop}})


def remove_annotations(meta: ObjectMeta, keys: Iterable[str]) -> ObjectMeta:
    drop = set(keys)
    return meta.model_copy(
        update={"annotations": {k: v for k, v in meta.annotations.items() if k not in drop}}
    )


class ApplicationResourceNamespaceAccessor:
    """Decides which namespace an application's resources are written to.

    An override namespace beats everything; otherwise an object keeps its
    own namespace, falling back to the application's namespace.
    """

    def __init__(self, application_namespace: str, override_namespace: str = ""):
        self.application_namespace = application_namespace
        self.override_namespace = override_namespace

    def for_object(self, meta: ObjectMeta) -> str:
        if self.override_namespace:
            return self.override_namespace
        if meta.namespace:
            return meta.namespace
        return self.application_namespace

    def namespace(self) -> str:
        if self.override_namespace:
            return self.override_namespace
        return self.application_namespace


__all__ = [
    "merge_map_override_with_dst",
    "pass_label_and_annotation",
    "add_labels",
    "add_annotations",
    "remove_labels",
    "remove_annotations",
    "ApplicationResourceNamespaceAccessor",
]
