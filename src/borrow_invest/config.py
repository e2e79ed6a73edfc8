"""Runtime settings for the borrow-vs-invest CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_PREFIX = "BORROW_INVEST_"


@dataclass
class Settings:
    currency: str = "USD"
    log_level: str = "WARNING"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            currency=os.getenv(f"{ENV_PREFIX}CURRENCY", "USD").upper(),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "WARNING"),
            log_format=os.getenv(f"{ENV_PREFIX}LOG_FORMAT", "standard"),
        )
