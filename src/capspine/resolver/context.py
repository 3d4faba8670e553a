"""
Per-call resolution context: namespaces and deadline.

A :class:`ResolveContext` is an immutable value threaded through every
resolver call. Scoped setters (``with_namespace``, ``with_x_definition_namespace``,
``with_timeout``) return a new context; the input is never changed, so one
context can be shared by concurrent resolutions.

Architecture:
    ::

        ResolveContext
        ┌──────────────────────────────────────────────────────────────┐
        │ app_namespace            str | None   (None → system ns)     │
        │ x_definition_namespace   str | None   (None/"" → system ns)  │
        │ system_namespace         str          (static, injected)     │
        │ deadline                 float | None (time.monotonic())     │
        └──────────────────────────────────────────────────────────────┘

        Search orders derived from it:
          two-tier fetch : app → x-definition → system   (deduplicated)
          latest lookup  : app → system                  (deduplicated)

Examples:
    >>> ctx = ResolveContext().with_namespace("shop")
    >>> namespace_for_app(ctx)
    'shop'
    >>> namespace_for_x_definition(ctx)
    'vela-system'
    >>> ctx.fetch_namespaces()
    ['shop', 'vela-system']

Tags:
    context, namespaces, immutable, capspine
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace

from capspine.core.errors import ResolutionCancelledError
from capspine.core.settings import (
    DEFAULT_APP_NAMESPACE,
    SYSTEM_DEFINITION_NAMESPACE,
    ResolverSettings,
)


def _ordered_unique(namespaces: list[str]) -> list[str]:
    seen: list[str] = []
    for ns in namespaces:
        if ns not in seen:
            seen.append(ns)
    return seen


@dataclass(frozen=True)
class ResolveContext:
    """Immutable namespace and deadline carrier for one call chain."""

    app_namespace: str | None = None
    x_definition_namespace: str | None = None
    system_namespace: str = SYSTEM_DEFINITION_NAMESPACE
    default_app_namespace: str = DEFAULT_APP_NAMESPACE
    deadline: float | None = None

    @classmethod
    def from_settings(cls, settings: ResolverSettings) -> ResolveContext:
        """Root context using the configured system and default namespaces."""
        return cls(
            system_namespace=settings.system_namespace,
            default_app_namespace=settings.default_app_namespace,
        )

    def with_namespace(self, namespace: str) -> ResolveContext:
        """Return a copy with the application namespace set.

        An empty namespace means the default application namespace; some
        admission requests arrive without one.
        """
        return replace(self, app_namespace=namespace or self.default_app_namespace)

    def with_x_definition_namespace(self, namespace: str) -> ResolveContext:
        """Return a copy with the x-definition namespace set (empty → system namespace)."""
        return replace(self, x_definition_namespace=namespace or self.system_namespace)

    def with_timeout(self, seconds: float) -> ResolveContext:
        """Return a copy whose deadline is ``seconds`` from now.

        An existing earlier deadline is kept.
        """
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return replace(self, deadline=deadline)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, ``None`` if there is no deadline."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check_deadline(self) -> float | None:
        """Return the remaining budget, raising once it is exhausted."""
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise ResolutionCancelledError("resolution deadline exceeded")
        return remaining

    def fetch_namespaces(self) -> list[str]:
        """Two-tier fetch order: application, x-definition, system."""
        return _ordered_unique(
            [namespace_for_app(self), namespace_for_x_definition(self), self.system_namespace]
        )

    def revision_search_namespaces(self) -> list[str]:
        """Latest-revision search order: application, then system."""
        return _ordered_unique([namespace_for_app(self), self.system_namespace])


def namespace_for_app(ctx: ResolveContext) -> str:
    """Application namespace carried by ``ctx``, or the system namespace if unset."""
    if ctx.app_namespace is None:
        return ctx.system_namespace
    return ctx.app_namespace


def namespace_for_x_definition(ctx: ResolveContext) -> str:
    """X-definition namespace carried by ``ctx``, or the system namespace if unset or empty."""
    if ctx.x_definition_namespace:
        return ctx.x_definition_namespace
    return ctx.system_namespace


def set_namespace(ctx: ResolveContext, namespace: str) -> ResolveContext:
    """Functional form of :meth:`ResolveContext.with_namespace`."""
    return ctx.with_namespace(namespace)


def set_x_definition_namespace(ctx: ResolveContext, namespace: str) -> ResolveContext:
    """Functional form of :meth:`ResolveContext.with_x_definition_namespace`."""
    return ctx.with_x_definition_namespace(namespace)


__all__ = [
    "ResolveContext",
    "namespace_for_app",
    "namespace_for_x_definition",
    "set_namespace",
    "set_x_definition_namespace",
]
