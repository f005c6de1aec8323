"""
Revenue Share Engine - Configuration

Immutable engine defaults, resolved once at the call boundary (CLI, API
app factory or the RevenueSharing facade) and passed down explicitly.
"""

import os
from dataclasses import dataclass, replace

from math_utils import DEFAULT_ROUNDING_DIGITS
from payout_exceptions import ConfigurationError

LOG_FORMATS = ("console", "json")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class EngineConfig:
    """Engine-wide defaults."""

    # Rounding of final results
    round_results: bool = True
    rounding_digits: int = DEFAULT_ROUNDING_DIGITS

    # Ingestion and validation
    validate_scheme: bool = True
    track_sale_timestamp: bool = True
    strict_percentage_total: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self):
        if self.rounding_digits < 0:
            raise ConfigurationError(
                "rounding_digits must be non-negative", parameter="rounding_digits"
            )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {LOG_FORMATS}", parameter="log_format"
            )

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create configuration from environment variables."""
        try:
            rounding_digits = int(os.getenv("REVSHARE_ROUNDING_DIGITS", str(DEFAULT_ROUNDING_DIGITS)))
        except ValueError as e:
            raise ConfigurationError(
                "REVSHARE_ROUNDING_DIGITS must be an integer",
                parameter="rounding_digits",
                cause=e,
            ) from e

        return cls(
            round_results=_env_bool("REVSHARE_ROUND_RESULTS", "true"),
            rounding_digits=rounding_digits,
            validate_scheme=_env_bool("REVSHARE_VALIDATE_SCHEME", "true"),
            track_sale_timestamp=_env_bool("REVSHARE_TRACK_TIMESTAMPS", "true"),
            strict_percentage_total=_env_bool("REVSHARE_STRICT_PERCENTAGE_TOTAL", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "console").lower(),
        )

    def with_overrides(self, **overrides) -> "EngineConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "round_results": self.round_results,
            "rounding_digits": self.rounding_digits,
            "validate_scheme": self.validate_scheme,
            "track_sale_timestamp": self.track_sale_timestamp,
            "strict_percentage_total": self.strict_percentage_total,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }
