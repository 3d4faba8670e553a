"""Tests for capspine.core.settings."""

import pytest
from pydantic import ValidationError

from capspine.core.errors import ConfigError, ErrorCategory
from capspine.core.settings import ResolverSettings, get_resolver_settings
from capspine.models import LEGACY_CLUSTER_SCOPED_KINDS, ResourceKind


class TestResolverSettings:
    def test_defaults(self, monkeypatch):
        for key in (
            "CAPSPINE_SYSTEM_NAMESPACE",
            "CAPSPINE_DEFAULT_APP_NAMESPACE",
            "CAPSPINE_FALLBACK_TO_LIVE_ON_MISSING",
            "CAPSPINE_STORE_TIMEOUT_SECONDS",
        ):
            monkeypatch.delenv(key, raising=False)

        settings = ResolverSettings(_env_file=None)

        assert settings.system_namespace == "vela-system"
        assert settings.default_app_namespace == "default"
        assert settings.fallback_to_live_on_missing is False
        assert settings.legacy_cluster_scoped_kinds == LEGACY_CLUSTER_SCOPED_KINDS
        assert settings.store_timeout_seconds is None
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("CAPSPINE_SYSTEM_NAMESPACE", "kubevela")
        monkeypatch.setenv("CAPSPINE_FALLBACK_TO_LIVE_ON_MISSING", "true")
        monkeypatch.setenv("CAPSPINE_STORE_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("CAPSPINE_LOG_LEVEL", "debug")

        settings = ResolverSettings(_env_file=None)

        assert settings.system_namespace == "kubevela"
        assert settings.fallback_to_live_on_missing is True
        assert settings.store_timeout_seconds == 2.5
        assert settings.log_level == "DEBUG"

    def test_legacy_kinds_from_json(self, monkeypatch):
        monkeypatch.setenv("CAPSPINE_LEGACY_CLUSTER_SCOPED_KINDS", '["TraitDefinition"]')

        settings = ResolverSettings(_env_file=None)

        assert settings.legacy_cluster_scoped_kinds == frozenset({ResourceKind.TRAIT_DEFINITION})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"system_namespace": ""},
            {"store_timeout_seconds": 0},
            {"store_timeout_seconds": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            ResolverSettings(_env_file=None, **overrides)

    def test_invalid_environment_is_config_error(self, monkeypatch):
        monkeypatch.setenv("CAPSPINE_STORE_TIMEOUT_SECONDS", "-1")
        get_resolver_settings.cache_clear()
        try:
            with pytest.raises(ConfigError) as exc_info:
                get_resolver_settings()
        finally:
            get_resolver_settings.cache_clear()

        assert exc_info.value.category == ErrorCategory.CONFIG
        assert isinstance(exc_info.value.__cause__, ValidationError)
        assert "store_timeout_seconds" in str(exc_info.value)

    def test_process_settings_cached(self):
        get_resolver_settings.cache_clear()
        try:
            assert get_resolver_settings() is get_resolver_settings()
        finally:
            get_resolver_settings.cache_clear()
