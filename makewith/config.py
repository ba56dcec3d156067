# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Any, ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("BinderSettings", "settings")


class BinderSettings(BaseSettings, frozen=True):
    """Engine settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    MAKEWITH_CACHE_ENABLED: bool = Field(
        default=True,
        description="Memoize capability construction per (state, table)",
    )
    MAKEWITH_CACHE_SIZE: int = Field(
        default=10000,
        gt=0,
        description="Maximum number of cached capability objects",
    )
    MAKEWITH_STRICT_SHAPES: bool = Field(
        default=True,
        description="Reject chainable results that drop fields of the state",
    )
    MAKEWITH_LOG_LEVEL: str = "WARNING"

    _instance: ClassVar[Any] = None

    @field_validator("MAKEWITH_LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.MAKEWITH_LOG_LEVEL)


settings = BinderSettings()
BinderSettings._instance = settings
