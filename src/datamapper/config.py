"""
Centralized configuration for datamapper.

- Frozen dataclass, validated in __post_init__.
- Loads from OS env after reading an optional .env file (python-dotenv).
- Cached singleton via functools.lru_cache; call get_settings.cache_clear()
  after changing the environment.
- Database passwords never logged (masked).
"""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, cast
from urllib.parse import urlsplit, urlunsplit

from dotenv import load_dotenv

ENV_PREFIX = "DATAMAPPER_"

EnvName = Literal["local", "dev", "test", "staging", "prod"]
LogFormat = Literal["json", "console"]
Sanitizer = Literal["logger", "strict"]
IncludeStrategyName = Literal["selectin", "joined", "subquery"]


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _env_key(key: str) -> str:
    return f"{ENV_PREFIX}{key}"


def _get_env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(_env_key(key))
    if v is None or v.strip() == "":
        return default
    return v.strip()


def _get_env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(_env_key(key))
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _validate_choice(value: str, *, choices: tuple[str, ...], key: str) -> str:
    if value not in choices:
        raise ValueError(f"{key} must be one of {choices}, got {value!r}")
    return value


def mask_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.password:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@")
    return urlunsplit(parts._replace(netloc=netloc))


# ------------------------------------------------------------------------------
# Settings dataclass (immutable)
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    environment: EnvName = "local"

    # Database
    database_url: str = "sqlite+pysqlite:///:memory:"
    database_echo: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: Optional[LogFormat] = None

    # Record layer defaults
    mass_assignment_sanitizer: Sanitizer = "logger"
    include_strategy: IncludeStrategyName = "selectin"

    def __post_init__(self) -> None:
        _validate_choice(self.environment, choices=("local", "dev", "test", "staging", "prod"), key="ENVIRONMENT")
        _validate_choice(self.mass_assignment_sanitizer, choices=("logger", "strict"), key="MASS_ASSIGNMENT_SANITIZER")
        _validate_choice(self.include_strategy, choices=("selectin", "joined", "subquery"), key="INCLUDE_STRATEGY")

        if not self.database_url:
            raise ValueError("DATABASE_URL must be set and non-empty")

        level = self.log_level.strip().upper()
        _validate_choice(level, choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"), key="LOG_LEVEL")
        object.__setattr__(self, "log_level", level)

        # Console for local work, JSON wherever logs get shipped
        if self.log_format is None:
            fmt = "console" if self.environment in ("local", "dev", "test") else "json"
            object.__setattr__(self, "log_format", fmt)
        else:
            _validate_choice(self.log_format, choices=("json", "console"), key="LOG_FORMAT")

    @property
    def is_prod(self) -> bool:
        return self.environment == "prod"

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    def safe_dict(self) -> dict:
        return {
            "environment": self.environment,
            "database_url": mask_url(self.database_url),
            "database_echo": self.database_echo,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "mass_assignment_sanitizer": self.mass_assignment_sanitizer,
            "include_strategy": self.include_strategy,
        }


# ------------------------------------------------------------------------------
# Loader (singleton)
# ------------------------------------------------------------------------------
def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Build a fresh Settings from the environment (and an optional .env file)."""
    env_path = env_file or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=str(env_path), override=False)

    return Settings(
        environment=cast(EnvName, _get_env_str("ENVIRONMENT", "local")),
        database_url=_get_env_str("DATABASE_URL", "sqlite+pysqlite:///:memory:") or "",
        database_echo=_get_env_bool("DATABASE_ECHO", False),
        log_level=_get_env_str("LOG_LEVEL", "INFO") or "INFO",
        log_format=cast(Optional[LogFormat], _get_env_str("LOG_FORMAT")),
        mass_assignment_sanitizer=cast(Sanitizer, _get_env_str("MASS_ASSIGNMENT_SANITIZER", "logger")),
        include_strategy=cast(IncludeStrategyName, _get_env_str("INCLUDE_STRATEGY", "selectin")),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


__all__ = ["Settings", "get_settings", "load_settings", "mask_url"]
