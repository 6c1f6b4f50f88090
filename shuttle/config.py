"""
Wrapper configuration.

Settings gathers everything the wrapper needs to know about its backend and its
own presentation. It is a pydantic-settings model: values come from keyword
arguments first, then from the environment, then from the defaults below, and
are validated (and frozen) on construction.

Environment
- SHUTTLE_BACKEND    backend executable name or path          (default "ddev")
- SHUTTLE_PROG       wrapper program name used in help/examples (default "shuttle")
- SHUTTLE_MODE       introspection mode: auto|structured|text   (default "auto")
- SHUTTLE_TIMEOUT    seconds allowed for introspection calls     (default 30; "", "none" or "0" disable it)
- SHUTTLE_LOG_LEVEL  wrapper log level                           (default WARNING)
- NO_COLOR           any non-empty value disables colors
"""
import math
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logs import level

MODES = ("auto", "structured", "text")


class Settings(BaseSettings):
    """
    Immutable wrapper settings.

    Fields
    - backend: executable launched for every pass-through and introspection call.
    - prog: the wrapper's own name; substituted for the backend name in examples.
    - mode: "structured" (JSON introspection), "text" (help scraping) or "auto"
      (structured first, text as a fallback).
    - timeout: seconds allowed for introspection calls (pass-through runs are unbounded).
    - loglevel: default level of the "shuttle" logger.
    - colorful: whether rich output uses colors.

    Invalid values raise pydantic's ValidationError (a ValueError).
    """
    model_config = SettingsConfigDict(
        env_prefix="SHUTTLE_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    backend: str = Field(default="ddev", min_length=1, description="Backend executable name or path")
    prog: str = Field(default="shuttle", min_length=1, description="Wrapper program name")
    mode: Literal["auto", "structured", "text"] = Field(default="auto", description="Introspection mode")
    timeout: float | None = Field(default=30.0, description="Seconds allowed for introspection calls")
    loglevel: str = Field(
        default="WARNING",
        validation_alias="SHUTTLE_LOG_LEVEL",
        description="Level of the 'shuttle' logger",
    )
    colorful: bool = Field(
        default=True,
        validation_alias="NO_COLOR",
        description="Colored output; the NO_COLOR variable turns it off",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("timeout", mode="before")
    @classmethod
    def _normalize_timeout(cls, value):
        if isinstance(value, bool):
            raise ValueError("timeout must be a number or None")
        if isinstance(value, str) and value.strip().lower() in ("", "none", "0"):
            return None
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value):
        if value is not None and (not math.isfinite(value) or value <= 0):
            raise ValueError("timeout must be a positive number")
        return value

    @field_validator("loglevel")
    @classmethod
    def _known_loglevel(cls, value):
        # Raises ValueError for unknown names.
        level(value)
        return value.upper()

    @field_validator("colorful", mode="before")
    @classmethod
    def _no_color(cls, value):
        # Strings only come from NO_COLOR: set and non-empty means "no colors".
        if isinstance(value, str):
            return not value
        return value


__all__ = (
    "MODES",
    "Settings",
)
