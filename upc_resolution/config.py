"""Configuration for the resolution engine.

Settings come from environment variables (optionally loaded from a .env
file), each with a default so the engine runs with no configuration at
all. A missing USDA key simply disables the USDA source.

With the defaults one resolution is bounded by about 14 s: OpenFoodFacts
2 passes x 3 hosts x 1.5 s + 0.25 s, USDA 2 x 1.5 s + 0.25 s plus one
1.5 s detail fetch. Clean "not found" answers end a source after one
pass, so a typical miss costs one pass per source.
"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


class ResolverSettings(BaseModel):
    """Resolution engine settings.

    Example:
        >>> settings = ResolverSettings(usda_api_key="DEMO_KEY")
        >>> assert settings.max_retries == 2
        >>> assert settings.usda_enabled
    """

    model_config = ConfigDict(frozen=True)

    usda_api_key: Optional[str] = Field(None, description="USDA FoodData Central API key")
    per_attempt_timeout_seconds: float = Field(1.5, gt=0, description="Deadline per fetch")
    max_retries: int = Field(2, ge=1, description="Full passes per network source")
    backoff_seconds: float = Field(0.25, ge=0, description="Wait between passes")
    default_region_hint: str = Field("USD", min_length=1, description="Fallback region hint")
    user_agent: str = Field("upc-resolution/1.0", min_length=1, description="Upstream User-Agent")
    allow_approximate_usda_match: bool = Field(
        False, description="Accept the first USDA result when no GTIN matches"
    )
    log_level: str = Field("INFO", description="Minimum log level")
    log_json: bool = Field(False, description="Emit JSON log lines")

    @field_validator("usda_api_key")
    @classmethod
    def blank_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty key as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("default_region_hint", "log_level")
    @classmethod
    def normalize_upper(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def usda_enabled(self) -> bool:
        return self.usda_api_key is not None

    @classmethod
    def from_env(cls) -> "ResolverSettings":
        """Build settings from environment variables.

        Raises:
            pydantic.ValidationError: If a numeric variable is malformed
                or out of range
        """
        defaults = cls()
        return cls(
            usda_api_key=os.getenv("USDA_API_KEY"),
            per_attempt_timeout_seconds=os.getenv(
                "UPC_RESOLVER_TIMEOUT_SECONDS", defaults.per_attempt_timeout_seconds
            ),
            max_retries=os.getenv("UPC_RESOLVER_MAX_RETRIES", defaults.max_retries),
            backoff_seconds=os.getenv(
                "UPC_RESOLVER_BACKOFF_SECONDS", defaults.backoff_seconds
            ),
            default_region_hint=os.getenv(
                "UPC_RESOLVER_REGION_HINT", defaults.default_region_hint
            ),
            user_agent=os.getenv("UPC_RESOLVER_USER_AGENT", defaults.user_agent),
            allow_approximate_usda_match=_env_bool(
                "UPC_RESOLVER_ALLOW_APPROXIMATE_USDA", defaults.allow_approximate_usda_match
            ),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_json=_env_bool("LOG_JSON", defaults.log_json),
        )


def load_settings(env_file: Optional[Union[str, Path]] = None) -> ResolverSettings:
    """Load a .env file (if present) and read settings from the environment.

    Variables already set in the environment win over the file.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)
    return ResolverSettings.from_env()
