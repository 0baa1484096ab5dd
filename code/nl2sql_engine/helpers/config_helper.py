"""
Configuration for the NL2SQL engine.

Configuration is static: it is loaded once at process start from a YAML
file and/or ``NL2SQL_*`` environment variables and is not reloaded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from .env_helper import EnvHelper

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Language model parameters."""

    model: str = "gpt-4o"
    temperature: float = 0.1
    max_tokens: int = 2000
    timeout: float = 30.0

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature must be between 0 and 2, got: {self.temperature}"
            )
        if self.max_tokens < 1:
            raise ConfigurationError(
                f"max_tokens must be positive, got: {self.max_tokens}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got: {self.timeout}"
            )


@dataclass
class CacheConfig:
    """Option list cache parameters."""

    enabled: bool = True
    ttl_minutes: int = 30

    def __post_init__(self):
        if self.ttl_minutes < 0:
            raise ConfigurationError(
                f"ttl_minutes must not be negative, got: {self.ttl_minutes}"
            )


@dataclass
class NL2SQLConfig:
    """Configuration for NL2SQL generation."""

    enabled: bool = True
    schema_filter_threshold: int = 10
    default_dialect: str = "mysql"
    max_rows: int = 1000
    llm: LLMConfig = field(default_factory=LLMConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def __post_init__(self):
        if self.schema_filter_threshold < 1:
            raise ConfigurationError(
                "schema_filter_threshold must be positive, got: "
                f"{self.schema_filter_threshold}"
            )
        if self.max_rows < 1:
            raise ConfigurationError(
                f"max_rows must be positive, got: {self.max_rows}"
            )
        if not self.default_dialect:
            raise ConfigurationError("default_dialect must not be empty")

    @classmethod
    def from_yaml(cls, config_path: str) -> "NL2SQLConfig":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            NL2SQLConfig with file values over defaults

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load NL2SQL config: {e}")
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_path}"
            )

        config = cls.from_dict(data)
        logger.info(f"NL2SQL configuration loaded from {config_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NL2SQLConfig":
        """Build configuration from a plain mapping."""
        try:
            defaults = cls()
            return cls(
                enabled=bool(data.get("enabled", defaults.enabled)),
                schema_filter_threshold=int(
                    data.get("schema_filter_threshold",
                             defaults.schema_filter_threshold)
                ),
                default_dialect=str(
                    data.get("default_dialect", defaults.default_dialect)
                ),
                max_rows=int(data.get("max_rows", defaults.max_rows)),
                llm=LLMConfig(**(data.get("llm") or {})),
                cache=CacheConfig(**(data.get("cache") or {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_env(
        cls,
        env: Optional[EnvHelper] = None,
        base: Optional["NL2SQLConfig"] = None,
    ) -> "NL2SQLConfig":
        """
        Load configuration from NL2SQL_* environment variables.

        Args:
            env: Optional environment accessor
            base: Optional configuration whose values unset variables keep

        Returns:
            NL2SQLConfig with environment values over base values
        """
        env = env or EnvHelper()
        base = base or cls()

        try:
            return cls(
                enabled=env.get_bool("NL2SQL_ENABLED", base.enabled),
                schema_filter_threshold=env.get_int(
                    "NL2SQL_SCHEMA_FILTER_THRESHOLD", base.schema_filter_threshold
                ),
                default_dialect=env.get(
                    "NL2SQL_DEFAULT_DIALECT", base.default_dialect
                ),
                max_rows=env.get_int("NL2SQL_MAX_ROWS", base.max_rows),
                llm=LLMConfig(
                    model=env.get("NL2SQL_LLM_MODEL", base.llm.model),
                    temperature=env.get_float(
                        "NL2SQL_LLM_TEMPERATURE", base.llm.temperature
                    ),
                    max_tokens=env.get_int(
                        "NL2SQL_LLM_MAX_TOKENS", base.llm.max_tokens
                    ),
                    timeout=env.get_float("NL2SQL_LLM_TIMEOUT", base.llm.timeout),
                ),
                cache=CacheConfig(
                    enabled=env.get_bool("NL2SQL_CACHE_ENABLED", base.cache.enabled),
                    ttl_minutes=env.get_int(
                        "NL2SQL_CACHE_TTL_MINUTES", base.cache.ttl_minutes
                    ),
                ),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def load_config(config_path: Optional[str] = None) -> NL2SQLConfig:
    """Load configuration from an optional YAML file, then the environment."""
    base = NL2SQLConfig.from_yaml(config_path) if config_path else None
    return NL2SQLConfig.from_env(base=base)


class ConfigurationError(Exception):
    """Exception raised when configuration is missing or invalid."""

    pass
