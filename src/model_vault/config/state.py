"""
Unified configuration state for the model-vault service.

This module provides a single source of truth for all service configuration,
combining YAML files with environment overrides, type validation, and
sensible defaults. The resulting ConfigState is passed explicitly into the
application factory; nothing here holds process-wide state.
"""

import codecs
import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


# =============================================================================
# PYDANTIC MODELS - Type-Safe Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """HTTP listener configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    model_config = ConfigDict(extra="allow")


class StorageConfig(BaseModel):
    """File store configuration."""

    files_dir: str = Field(default="files")
    max_upload_bytes: int = Field(default=512 * 1024 * 1024, ge=1)
    upload_chunk_size: int = Field(default=1024 * 1024, ge=1024)

    @field_validator("files_dir")
    @classmethod
    def validate_files_dir(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("files_dir must not be empty")
        return v

    model_config = ConfigDict(extra="allow")


class StreamingConfig(BaseModel):
    """Streaming transform configuration."""

    chunk_size: int = Field(default=64 * 1024, ge=1)
    max_line_length: int = Field(default=1024 * 1024, ge=64)
    precision: int = Field(default=6, ge=0, le=17)
    classifier: Literal["prefix", "tagged"] = Field(default="prefix")
    strict_records: bool = Field(default=False)
    encoding: str = Field(default="utf-8")
    download_filename: str = Field(default="transformed.obj")

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown encoding: {v}") from None
        return v

    model_config = ConfigDict(extra="allow")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)
    include_timestamp: bool = Field(default=True)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = ConfigDict(extra="allow")


class ConfigState(BaseModel):
    """
    Root configuration state - single source of truth for service config.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Environment metadata
    env: str = Field(default="dev")
    config_dir: str = Field(default="config")

    model_config = ConfigDict(extra="allow")


# =============================================================================
# CONFIG LOADER - Clean, Validated Loading
# =============================================================================


class ConfigLoader:
    """
    Load and validate configuration from YAML files.

    Merges:
      1. Defaults declared on the pydantic models
      2. service.yaml from config_dir
      3. env/<env>.yaml from config_dir
      4. Environment variable overrides
    """

    def __init__(self, config_dir: str | Path = "config", env: str | None = None):
        self.config_dir = Path(config_dir)
        self._yaml_cache: dict[Path, Any] = {}
        self.env = env or os.getenv("MODEL_VAULT_ENV", "dev")

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file with caching."""
        if path in self._yaml_cache:
            return self._yaml_cache[path]

        if not path.exists():
            logger.debug(f"Config file not found (using defaults): {path}")
            return {}

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        self._yaml_cache[path] = data
        logger.debug(f"Loaded config: {path}")
        return data

    def _apply_env_overrides(self, config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to config."""
        if files_dir := os.getenv("MODEL_VAULT_FILES_DIR"):
            config.setdefault("storage", {})["files_dir"] = files_dir

        if host := os.getenv("MODEL_VAULT_HOST"):
            config.setdefault("server", {})["host"] = host

        if port := os.getenv("MODEL_VAULT_PORT"):
            config.setdefault("server", {})["port"] = port

        if log_level := os.getenv("LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level

        if log_json := os.getenv("LOG_JSON"):
            config.setdefault("logging", {})["json_logs"] = log_json.lower() in {
                "1",
                "true",
                "yes",
                "on",
            }

        return config

    def _merge_dicts(self, base: dict, override: dict) -> dict:
        """Deep merge override into base dict."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def load(self) -> ConfigState:
        """
        Load complete configuration state.

        Returns:
            ConfigState: Validated configuration object

        Raises:
            ValidationError: If configuration is invalid
        """
        logger.info(f"Loading configuration from {self.config_dir} (env: {self.env})")

        config: dict[str, Any] = {}
        config = self._merge_dicts(
            config, self._load_yaml(self.config_dir / "service.yaml")
        )
        config = self._merge_dicts(
            config, self._load_yaml(self.config_dir / "env" / f"{self.env}.yaml")
        )
        config = self._apply_env_overrides(config)

        try:
            state = ConfigState(env=self.env, config_dir=str(self.config_dir), **config)
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        logger.info(
            f"Configuration loaded: files_dir={state.storage.files_dir} "
            f"port={state.server.port} classifier={state.streaming.classifier}"
        )
        return state


def get_config(config_dir: str | None = None, env: str | None = None) -> ConfigState:
    """
    Load and return the configuration state.

    Args:
        config_dir: Override config directory. Defaults to $MODEL_VAULT_CONFIG_DIR or ./config

    Returns:
        ConfigState: Validated configuration object
    """
    if config_dir is None:
        config_dir = os.getenv("MODEL_VAULT_CONFIG_DIR", "config")
        if not Path(config_dir).exists():
            logger.warning(
                f"Config directory not found at {config_dir}, using defaults"
            )

    return ConfigLoader(config_dir=config_dir, env=env).load()
