"""Runtime configuration read from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ADVISOR_MODEL = "gemini-flash-lite-latest"
DEFAULT_ADVISOR_TIMEOUT = 20.0
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AdvisorSettings:
    """Settings for the external text-generation collaborator."""

    api_key: str = ""
    model: str = DEFAULT_ADVISOR_MODEL
    timeout: float = DEFAULT_ADVISOR_TIMEOUT
    max_retries: int = 2
    rate_limit_wait: float = 5.0
    network_error_wait: float = 2.0

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "AdvisorSettings":
        timeout_raw = os.environ.get("CAPWISE_ADVISOR_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_ADVISOR_TIMEOUT
        except ValueError:
            logging.getLogger(__name__).warning(
                "Ignoring invalid CAPWISE_ADVISOR_TIMEOUT=%r.", timeout_raw
            )
            timeout = DEFAULT_ADVISOR_TIMEOUT
        return cls(
            api_key=os.environ.get("GEMINI_API_KEY", ""),
            model=os.environ.get("CAPWISE_ADVISOR_MODEL", DEFAULT_ADVISOR_MODEL),
            timeout=timeout,
        )


def resolve_log_level(level: Optional[str] = None) -> int:
    """Explicit level first, then ``CAPWISE_LOG_LEVEL``, then WARNING."""
    level_name = (level or os.environ.get("CAPWISE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler at the resolved level."""
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)


__all__ = ["AdvisorSettings", "configure_logging", "resolve_log_level"]
