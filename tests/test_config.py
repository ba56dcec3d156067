# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for configuration module."""

import logging

import pytest
from pydantic import ValidationError

from makewith import ConstructionCache, default_cache, reset_default_cache
from makewith.config import BinderSettings, settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "MAKEWITH_CACHE_ENABLED",
        "MAKEWITH_CACHE_SIZE",
        "MAKEWITH_STRICT_SHAPES",
        "MAKEWITH_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestBinderSettings:
    """Tests for BinderSettings class."""

    def test_default_values(self, clean_env):
        config = BinderSettings(_env_file=None)
        assert config.MAKEWITH_CACHE_ENABLED is True
        assert config.MAKEWITH_CACHE_SIZE == 10000
        assert config.MAKEWITH_STRICT_SHAPES is True
        assert config.MAKEWITH_LOG_LEVEL == "WARNING"
        assert config.log_level == logging.WARNING

    def test_environment_override(self, clean_env):
        """Settings are read from the environment, case-insensitively."""
        clean_env.setenv("MAKEWITH_CACHE_SIZE", "42")
        clean_env.setenv("makewith_cache_enabled", "false")
        config = BinderSettings(_env_file=None)
        assert config.MAKEWITH_CACHE_SIZE == 42
        assert config.MAKEWITH_CACHE_ENABLED is False

    def test_cache_size_must_be_positive(self, clean_env):
        with pytest.raises(ValidationError):
            BinderSettings(_env_file=None, MAKEWITH_CACHE_SIZE=0)

    def test_log_level_is_normalized(self, clean_env):
        config = BinderSettings(_env_file=None, MAKEWITH_LOG_LEVEL="debug")
        assert config.MAKEWITH_LOG_LEVEL == "DEBUG"
        assert config.log_level == logging.DEBUG

    def test_unknown_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            BinderSettings(_env_file=None, MAKEWITH_LOG_LEVEL="LOUD")

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            settings.MAKEWITH_CACHE_SIZE = 1

    def test_singleton_instance(self):
        assert BinderSettings._instance is settings


class TestDefaultCache:
    """The process-wide cache is built from settings on first use."""

    def test_default_cache_is_shared(self):
        assert default_cache() is default_cache()
        assert isinstance(default_cache(), ConstructionCache)

    def test_built_from_settings(self, monkeypatch):
        monkeypatch.setattr(
            "makewith.config.settings",
            BinderSettings(
                _env_file=None,
                MAKEWITH_CACHE_SIZE=5,
                MAKEWITH_CACHE_ENABLED=False,
            ),
        )
        reset_default_cache()
        cache = default_cache()
        assert cache.max_size == 5
        assert cache.enabled is False

    def test_reset_rebuilds(self):
        first = default_cache()
        reset_default_cache()
        assert default_cache() is not first
