"""
Token Locking Configuration

Schedule terms and logging options are read from environment variables.
Missing values fall back to the defaults below; malformed values raise
ConfigurationError instead of being silently replaced.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_PERIODS = 3
DEFAULT_WITHDRAW_PERIODS = 5
DEFAULT_PERIOD_SECONDS = 100000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_ENVIRONMENT = "production"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _get_int(environ: Mapping[str, str], env_var: str, default: int, minimum: int) -> int:
    raw = environ.get(env_var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{env_var} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class LockingConfig:
    """Schedule terms and logging settings for a locking contract."""

    lock_period_count: int = DEFAULT_LOCK_PERIODS
    withdraw_period_count: int = DEFAULT_WITHDRAW_PERIODS
    period_duration: int = DEFAULT_PERIOD_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None
    environment: str = DEFAULT_ENVIRONMENT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LockingConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Raises:
            ConfigurationError: If a value is malformed or out of range
        """
        env = os.environ if environ is None else environ

        log_level = env.get("LOCKING_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
        if log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"LOCKING_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

        config = cls(
            lock_period_count=_get_int(env, "LOCKING_LOCK_PERIODS", DEFAULT_LOCK_PERIODS, 0),
            withdraw_period_count=_get_int(env, "LOCKING_WITHDRAW_PERIODS", DEFAULT_WITHDRAW_PERIODS, 1),
            period_duration=_get_int(env, "LOCKING_PERIOD_SECONDS", DEFAULT_PERIOD_SECONDS, 1),
            log_level=log_level,
            log_file=env.get("LOCKING_LOG_FILE", "").strip() or None,
            environment=env.get("LOCKING_ENVIRONMENT", DEFAULT_ENVIRONMENT).strip() or DEFAULT_ENVIRONMENT,
        )
        logger.debug(
            "Locking config loaded",
            extra={
                "event": "config.loaded",
                "lock_period_count": config.lock_period_count,
                "withdraw_period_count": config.withdraw_period_count,
                "period_duration": config.period_duration,
            }
        )
        return config
