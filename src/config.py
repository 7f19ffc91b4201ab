"""
Alert bridge configuration.

Nothing is required at startup: the normalization engine is pure and can run
without any environment. Integration vars (TheHive URL, API key) are validated
lazily when the relevant integration is first used via
validate_for_integration().
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Maps each integration name to the settings fields it requires.
_INTEGRATION_REQUIRED_FIELDS: dict[str, list[str]] = {
    "thehive": [
        "thehive_url",
        "thehive_api_key",
    ],
}

_KNOWN_INTEGRATIONS = set(_INTEGRATION_REQUIRED_FIELDS.keys())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # TheHive (case management) — alert creation and pattern lookups
    thehive_url: Optional[str] = None
    thehive_api_key: Optional[str] = None
    thehive_organisation: Optional[str] = None  # sent as X-Organisation when set
    thehive_timeout: float = 10.0

    # Red Canary alerts carry no provider name of their own
    redcanary_source_name: str = "RedCanary"

    # App
    log_level: str = "INFO"

    def validate_for_integration(self, name: str) -> None:
        """Assert that all settings required by integration *name* are present.

        Raises:
            ValueError: If *name* is not a recognised integration.
            RuntimeError: If one or more required settings are absent.
        """
        if name not in _KNOWN_INTEGRATIONS:
            raise ValueError(
                f"Unknown integration '{name}'. "
                f"Known integrations: {', '.join(sorted(_KNOWN_INTEGRATIONS))}"
            )

        required = _INTEGRATION_REQUIRED_FIELDS[name]
        missing = [
            field for field in required if getattr(self, field, None) is None
        ]

        if missing:
            missing_vars = ", ".join(m.upper() for m in missing)
            raise RuntimeError(
                f"Integration '{name}' cannot start: "
                f"missing required environment variables: {missing_vars}. "
                f"Set these in your .env file (see .env.example)."
            )


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    In tests, clear the cache with get_settings.cache_clear() after
    patching environment variables, or instantiate Settings() directly
    with _env_file=None to avoid reading the .env file.
    """
    return Settings()
