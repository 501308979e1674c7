# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ResuspendPolicy = Literal["close", "error"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StrataSettings(BaseSettings, frozen=True):
    """Process-wide defaults, read from ``STRATA_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STRATA_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    CLOSE_ABANDONED: bool = Field(
        default=True,
        description="Close pending handlers left behind by a failed or unhandled call",
    )
    RESUSPEND_POLICY: ResuspendPolicy = Field(
        default="close",
        description="What to do when a resumed handler suspends a second time",
    )
    LOG_LEVEL: str = "WARNING"

    _instance: ClassVar[Any] = None


class StackConfig(BaseModel):
    """Per-stack behaviour knobs.

    Args:
        close_abandoned: ``aclose()`` handlers still waiting for a value when
            the call ends without one. They are never sent a value either way.
        resuspend_policy: ``"close"`` closes a resumed handler that yields
            again and logs a warning; ``"error"`` raises
            ``HandlerProtocolError`` out of the call instead.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    close_abandoned: bool = True
    resuspend_policy: ResuspendPolicy = "close"

    @classmethod
    def from_settings(cls, settings: StrataSettings | None = None) -> StackConfig:
        settings = settings or get_settings()
        return cls(
            close_abandoned=settings.CLOSE_ABANDONED,
            resuspend_policy=settings.RESUSPEND_POLICY,
        )


def get_settings() -> StrataSettings:
    """Return the cached settings instance, loading it on first use."""
    if StrataSettings._instance is None:
        StrataSettings._instance = StrataSettings()
    return StrataSettings._instance


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stream handler to the ``strata`` logger.

    The library never installs handlers on import; applications that want
    strata's dispatch logs call this once at startup.
    """
    logger = logging.getLogger("strata")
    logger.setLevel(level if level is not None else get_settings().LOG_LEVEL.upper())
    if not any(getattr(h, "_strata", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._strata = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
