"""Resolver settings.

The resolver's static configuration (well-known system namespace, default
application namespace, the missing-revision policy, legacy cluster-scoped
kinds, default store deadline) is read once from the environment and
injected into :class:`~capspine.resolver.DefinitionRevisionResolver`.
Nothing here is reassigned at runtime.

Features:
    - **CapSpineBaseSettings:** Base class with debug and log_level
    - **ResolverSettings:** ``CAPSPINE_``-prefixed resolver configuration
    - **.env file support:** Automatic loading via pydantic-settings

Examples:
    >>> settings = ResolverSettings(system_namespace="platform-system")
    >>> settings.system_namespace
    'platform-system'

Tags:
    settings, configuration, pydantic, environment, capspine
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from capspine.core.errors import ConfigError
from capspine.models import LEGACY_CLUSTER_SCOPED_KINDS, ResourceKind

SYSTEM_DEFINITION_NAMESPACE = "vela-system"
DEFAULT_APP_NAMESPACE = "default"


class CapSpineBaseSettings(BaseSettings):
    """Common settings shared by capspine components.

    Fields
    ──────
    debug        : Enable debug mode (verbose logging, etc.)
    log_level    : Structlog log level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"


class ResolverSettings(CapSpineBaseSettings):
    """Configuration for definition revision resolution.

    Fields
    ──────
    system_namespace             : Platform-reserved namespace, searched last
    default_app_namespace        : Used when a context is given an empty app namespace
    fallback_to_live_on_missing  : Resolve a missing pinned revision to the live object
    legacy_cluster_scoped_kinds  : Kinds that may still exist without a namespace
    store_timeout_seconds        : Deadline applied when the caller set none
    """

    model_config = SettingsConfigDict(
        env_prefix="CAPSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system_namespace: str = Field(default=SYSTEM_DEFINITION_NAMESPACE, min_length=1)
    default_app_namespace: str = Field(default=DEFAULT_APP_NAMESPACE, min_length=1)
    fallback_to_live_on_missing: bool = False
    legacy_cluster_scoped_kinds: frozenset[ResourceKind] = Field(
        default=LEGACY_CLUSTER_SCOPED_KINDS,
        description="Kinds whose old installations were cluster scoped",
    )
    store_timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_resolver_settings() -> ResolverSettings:
    """Return the process-wide settings, read from the environment once.

    Raises:
        ConfigError: If the environment holds an invalid value.
    """
    try:
        return ResolverSettings()
    except ValidationError as e:
        raise ConfigError(f"invalid resolver settings: {e}", cause=e) from e


__all__ = [
    "SYSTEM_DEFINITION_NAMESPACE",
    "DEFAULT_APP_NAMESPACE",
    "CapSpineBaseSettings",
    "ResolverSettings",
    "get_resolver_settings",
]
