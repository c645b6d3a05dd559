"""Runtime settings for ramenku, read from the environment."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# Local data directory within the ramenku project
# Can be overridden via RAMENKU_DATA_DIR environment variable
_default_data_dir = Path(__file__).parent.parent.parent / "data"

DEFAULT_CHECKOUT_DELAY = 2.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings."""

    data_dir: Path
    checkout_delay: float = DEFAULT_CHECKOUT_DELAY
    log_level: int = logging.INFO
    plaintext_secrets: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from RAMENKU_* environment variables."""
        delay = os.environ.get("RAMENKU_CHECKOUT_DELAY")
        level_name = os.environ.get("RAMENKU_LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(level_name)
        return cls(
            data_dir=Path(os.environ.get("RAMENKU_DATA_DIR", _default_data_dir)),
            checkout_delay=float(delay) if delay else DEFAULT_CHECKOUT_DELAY,
            log_level=level if isinstance(level, int) else logging.INFO,
            plaintext_secrets=os.environ.get("RAMENKU_PLAINTEXT_SECRETS", "").lower()
            in _TRUTHY,
        )
