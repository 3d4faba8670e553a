"""
Structured error types for capability definition resolution.

Every failure the resolver can surface is a typed exception carrying the
metadata a reconciliation loop needs to decide what to do next: which
namespace was searched, which definition and kind were involved, whether
the failure is worth retrying, and the underlying cause.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode the caller branches on
    - **Not-found is special:** Fallback logic branches only on not-found
    - **Cancellation is not failure:** Aborted calls are distinguishable from
      failed calls
    - **Error Chaining:** Store exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       CapSpineError                              │
        │  (category, retryable, context, cause)                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ValidationError        NotFoundError        UpstreamError       │
        │  (VALIDATION)           (NOT_FOUND)          (STORAGE)           │
        │       │                      │                    │              │
        │  InvalidNameError       ResourceNotFound     NamespaceRequired   │
        │  InvalidVersionError    DefinitionNotFound                       │
        │  InvalidDefinitionType                                           │
        │                                                                  │
        │  ConfigError            ResolutionCancelledError                 │
        │  (CONFIG)               (CANCELLED)                              │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = InvalidNameError("worker@v1.x!", errors=["must consist of ..."])
    >>> err.retryable
    False
    >>> err.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    >>> err = ResourceNotFoundError("DefinitionRevision", "worker-v1.0.0", "default")
    >>> is_not_found(err)
    True

Guardrails:
    ❌ DON'T: Wrap store errors that are not not-found
    ✅ DO: Re-raise them unchanged so the caller sees the original failure

    ❌ DON'T: Catch ``asyncio.CancelledError``
    ✅ DO: Raise ResolutionCancelledError only for an exhausted deadline

Tags:
    error-handling, exception-hierarchy, resolver, capspine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        VALIDATION: Malformed names, references or payloads
        PARSE: Stored data that cannot be parsed (corrupt revision names)
        NOT_FOUND: Nothing matched in any searched namespace
        STORAGE: Resource store failures (permission, transport)
        CONFIG: Invalid resolver configuration
        CANCELLED: Deadline exhausted or operation aborted
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"
    PARSE = "PARSE"
    NOT_FOUND = "NOT_FOUND"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    CANCELLED = "CANCELLED"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a resolution error.

    Only the fields that are set end up in ``to_dict()``, so the same
    context type serves store errors (namespace + name) and resolver
    errors (definition + kind + revision).

    Examples:
        >>> ctx = ErrorContext(namespace="vela-system", definition="worker")
        >>> ctx.to_dict()
        {'namespace': 'vela-system', 'definition': 'worker'}

    Attributes:
        namespace: Namespace the failing lookup targeted
        definition: Base definition name
        kind: Definition or resource kind
        revision: Revision name involved in the failure
        metadata: Additional key-value pairs
    """

    namespace: str | None = None
    definition: str | None = None
    kind: str | None = None
    revision: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["namespace", "definition", "kind", "revision"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CapSpineError(Exception):
    """
    Base exception for all capspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so raising
    code rarely has to pass them explicitly.

    Examples:
        >>> error = CapSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(namespace="default").context.namespace
        'default'
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CapSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise UpstreamError("list failed").with_context(
                namespace="default",
                kind="DefinitionRevision",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(CapSpineError):
    """
    Input or stored data failed validation.

    Never retryable - the reference or the stored object must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class InvalidNameError(ValidationError):
    """A reference or constructed revision name is not a valid resource name."""

    def __init__(self, name: str, errors: list[str] | None = None, message: str | None = None, **kwargs: Any):
        self.name = name
        self.errors = list(errors or [])
        if message is None:
            message = f"invalid definitionRevision name {name}:{','.join(self.errors)}"
        super().__init__(message, **kwargs)


class InvalidVersionError(ValidationError):
    """A stored revision name carries a version suffix that is not semver."""

    default_category = ErrorCategory.PARSE

    def __init__(self, revision: str, version: str, **kwargs: Any):
        self.revision = revision
        self.version = version
        super().__init__(f"invalid semantic version {version!r} in revision {revision!r}", **kwargs)
        self.context.revision = revision


class InvalidDefinitionTypeError(ValidationError):
    """An object is not one of the four capability definition payloads."""


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(CapSpineError):
    """Base for every "does not exist" condition."""

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


class ResourceNotFoundError(NotFoundError):
    """The resource store has no object with this kind, namespace and name."""

    def __init__(self, kind: str, name: str, namespace: str | None = None, **kwargs: Any):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        where = f" in namespace {namespace!r}" if namespace else ""
        super().__init__(f"{kind} {name!r} not found{where}", **kwargs)
        self.context.kind = kind
        self.context.namespace = namespace


class DefinitionNotFoundError(NotFoundError):
    """No matching revision in any of the searched namespaces."""

    def __init__(self, base_name: str, kind: str, namespaces: list[str], **kwargs: Any):
        self.base_name = base_name
        self.kind = kind
        self.namespaces = list(namespaces)
        super().__init__(
            f"error finding definition revision for Name: {base_name}, Type: {kind} "
            f"(searched namespaces: {', '.join(self.namespaces)})",
            **kwargs,
        )
        self.context.definition = base_name
        self.context.kind = kind


# =============================================================================
# STORE ERRORS
# =============================================================================


class UpstreamError(CapSpineError):
    """
    Resource store failure other than not-found.

    Permission, transport and store-side validation failures. Not retried by
    the resolver; the calling reconcile loop owns retry policy.
    """

    default_category = ErrorCategory.STORAGE
    default_retryable = False


class NamespaceRequiredError(UpstreamError):
    """A namespaced kind was fetched by name without a namespace."""

    MESSAGE = "an empty namespace may not be set when a resource name is provided"

    def __init__(self, message: str = MESSAGE, **kwargs: Any):
        super().__init__(message, **kwargs)


# =============================================================================
# CONFIGURATION / CANCELLATION
# =============================================================================


class ConfigError(CapSpineError):
    """Resolver configuration is invalid."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class ResolutionCancelledError(CapSpineError):
    """The resolve context's deadline was exhausted before the store answered."""

    default_category = ErrorCategory.CANCELLED
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_not_found(error: BaseException | None) -> bool:
    """Check if an error means "the object does not exist"."""
    return isinstance(error, NotFoundError)


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, CapSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, CapSpineError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.STORAGE
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CapSpineError",
    # Validation
    "ValidationError",
    "InvalidNameError",
    "InvalidVersionError",
    "InvalidDefinitionTypeError",
    # Not found
    "NotFoundError",
    "ResourceNotFoundError",
    "DefinitionNotFoundError",
    # Store
    "UpstreamError",
    "NamespaceRequiredError",
    # Config / cancellation
    "ConfigError",
    "ResolutionCancelledError",
    # Utilities
    "is_not_found",
    "is_retryable",
    "categorize_error",
]
