"""
Configuration module for FairGate.

Centralizes all configuration with environment variable support,
validation, and caching. The server secret is read once, never logged,
and handed explicitly to every component that needs it.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

from .errors import ConfigurationError
from .util import mask_sensitive

# ============================================================
# Defaults
# ============================================================

DEFAULT_CHALLENGE_TTL_SECONDS = 5 * 60
DEFAULT_PERMIT_TTL_SECONDS = 10 * 60
DEFAULT_FAIRSCALE_TIMEOUT = 5.0


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _env_number(name: str, cast, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number") from e


@dataclass(frozen=True)
class Settings:
    """Process-wide, read-only configuration."""
    permit_secret: Optional[str] = field(default=None, repr=False)
    fairscale_api_base: Optional[str] = None
    fairscale_api_key: Optional[str] = field(default=None, repr=False)
    fairscale_timeout: float = DEFAULT_FAIRSCALE_TIMEOUT
    challenge_ttl_seconds: int = DEFAULT_CHALLENGE_TTL_SECONDS
    permit_ttl_seconds: int = DEFAULT_PERMIT_TTL_SECONDS
    env: str = "dev"  # dev|stage|prod
    log_level: str = "INFO"
    log_json: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            permit_secret=_env_str("PERMIT_SECRET"),
            fairscale_api_base=_env_str("FAIRSCALE_API_BASE"),
            fairscale_api_key=_env_str("FAIRSCALE_API_KEY"),
            fairscale_timeout=_env_number("FAIRSCALE_TIMEOUT", float, DEFAULT_FAIRSCALE_TIMEOUT),
            challenge_ttl_seconds=_env_number("CHALLENGE_TTL_SECONDS", int, DEFAULT_CHALLENGE_TTL_SECONDS),
            permit_ttl_seconds=_env_number("PERMIT_TTL_SECONDS", int, DEFAULT_PERMIT_TTL_SECONDS),
            env=os.getenv("FAIRGATE_ENV", "dev"),
            log_level=os.getenv("FAIRGATE_LOG_LEVEL", "INFO"),
            log_json=_env_bool("FAIRGATE_LOG_JSON", True),
            debug=_env_bool("FAIRGATE_DEBUG", False),
        )

    def require_secret(self) -> str:
        """Return the permit secret or fail closed."""
        if not self.permit_secret:
            raise ConfigurationError("PERMIT_SECRET missing")
        return self.permit_secret

    def require_fairscale(self) -> None:
        if not self.fairscale_api_base or not self.fairscale_api_key:
            raise ConfigurationError("FairScale env is missing")

    def describe(self) -> Dict[str, object]:
        """Loggable view of the settings; secrets are masked."""
        return {
            "env": self.env,
            "permit_secret": "[REDACTED]" if self.permit_secret else None,
            "fairscale_api_base": self.fairscale_api_base,
            "fairscale_api_key": mask_sensitive(self.fairscale_api_key) if self.fairscale_api_key else None,
            "fairscale_timeout": self.fairscale_timeout,
            "challenge_ttl_seconds": self.challenge_ttl_seconds,
            "permit_ttl_seconds": self.permit_ttl_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    return Settings.from_env()


# ============================================================
# Validation
# ============================================================

def validate_config(settings: Settings) -> Dict[str, bool]:
    """
    Report which required configuration values are present.
    Returns dict of name -> present.
    """
    return {
        "permit_secret": bool(settings.permit_secret),
        "fairscale_api_base": bool(settings.fairscale_api_base),
        "fairscale_api_key": bool(settings.fairscale_api_key),
    }


# ============================================================
# Feature Flags
# ============================================================

def is_production(settings: Settings) -> bool:
    """Check if running in production mode."""
    return settings.env == "prod"
