"""capspine.core -- shared primitives for the resolver.

Architecture::

    errors.py      Structured error hierarchy (CapSpineError, NotFoundError, ...)
    logging.py     structlog configuration + context binding
    settings.py    ResolverSettings (pydantic-settings, CAPSPINE_ prefix)
    protocols.py   ResourceAccessor protocol (async get/list)
    hashing.py     Deterministic hashes for generated names
    metadata.py    Label/annotation merging, application namespace accessor
"""

from capspine.core.errors import (
    CapSpineError,
    ConfigError,
    DefinitionNotFoundError,
    ErrorCategory,
    ErrorContext,
    InvalidDefinitionTypeError,
    InvalidNameError,
    InvalidVersionError,
    NamespaceRequiredError,
    NotFoundError,
    ResolutionCancelledError,
    ResourceNotFoundError,
    UpstreamError,
    ValidationError,
    categorize_error,
    is_not_found,
    is_retryable,
)
from capspine.core.logging import configure_logging, get_logger

__all__ = [
    "CapSpineError",
    "ConfigError",
    "DefinitionNotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidDefinitionTypeError",
    "InvalidNameError",
    "InvalidVersionError",
    "NamespaceRequiredError",
    "NotFoundError",
    "ResolutionCancelledError",
    "ResourceNotFoundError",
    "UpstreamError",
    "ValidationError",
    "categorize_error",
    "is_not_found",
    "is_retryable",
    "configure_logging",
    "get_logger",
]
