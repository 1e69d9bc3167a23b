"""Configuration management for the tracking client."""

import logging
import os
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlsplit

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from universal_analytics.exceptions import ConfigurationError
from universal_analytics.sync.queue import BatchingPolicy

logger = logging.getLogger(__name__)

# Hard limit of hits per request accepted by the collector's batch endpoint
MAX_BATCH_SIZE = 20


class TrackerConfig(BaseSettings):
    """Collector endpoint, batching and transport configuration."""

    hostname: str = Field(
        default="https://www.google-analytics.com",
        description="Collector host; the scheme is replaced according to `https`",
    )
    path: str = Field(default="/collect", description="Single-hit collect path")
    batch_path: str = Field(default="/batch", description="Batch collect path")
    https: bool = Field(default=True, description="Use https to reach the collector")
    enable_batching: bool = Field(default=False, description="Group hits into batch requests")
    batch_size: int = Field(default=10, description="Maximum number of hits per batch request")
    protocol_version: str = Field(default="1", description="Measurement Protocol version (v)")
    request_timeout: float = Field(default=10.0, description="Per-request timeout in seconds")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra HTTP headers sent with every request",
    )
    request_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed through to the HTTP client's post()",
    )
    debug: bool = Field(default=False, description="Enable debug logging and parameter checks")

    model_config = SettingsConfigDict(
        env_prefix="UA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("path", "batch_path")
    @classmethod
    def ensure_leading_slash(cls, v: str) -> str:
        """Paths are appended to the hostname, so they must start with '/'."""
        return v if v.startswith("/") else f"/{v}"

    @field_validator("batch_size")
    @classmethod
    def check_batch_size(cls, v: int) -> int:
        """Batch size must be a positive integer."""
        if v < 1:
            raise ValueError("batch_size must be a positive integer")
        if v > MAX_BATCH_SIZE:
            logger.warning(
                "batch_size %d exceeds the collector limit of %d hits per batch",
                v,
                MAX_BATCH_SIZE,
            )
        return v

    @property
    def protocol(self) -> str:
        return "https" if self.https else "http"

    @property
    def resolved_hostname(self) -> str:
        """
        Collector origin with the configured protocol applied.

        Raises:
            ConfigurationError: If no host can be parsed from `hostname`
        """
        hostname = self.hostname.strip()
        if "://" not in hostname:
            hostname = f"//{hostname}"

        host = urlsplit(hostname).netloc
        if not host:
            raise ConfigurationError(f"Invalid collector hostname: {self.hostname!r}")

        return f"{self.protocol}://{host}"

    @property
    def endpoint(self) -> str:
        """Full URL every dispatch unit is POSTed to."""
        path = self.batch_path if self.enable_batching else self.path
        return f"{self.resolved_hostname}{path}"

    @property
    def batching_policy(self) -> BatchingPolicy:
        return BatchingPolicy(enabled=self.enable_batching, batch_size=self.batch_size)

    @classmethod
    def from_yaml(cls, config_path: Path) -> "TrackerConfig":
        """Load configuration from YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = yaml.safe_load(f)

        return cls(**data if data else {})

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get default configuration file path."""
        config_locations = [
            Path.home() / ".config/universal-analytics/config.yaml",
            Path.cwd() / "ua.yaml",
        ]

        for path in config_locations:
            if path.exists():
                return path

        return config_locations[0]

    @classmethod
    def load(cls, config_path: Optional[Path] = None, **overrides: Any) -> "TrackerConfig":
        """
        Load configuration from file or environment variables.

        Priority (highest to lowest):
        1. Keyword overrides
        2. Specified config_path
        3. UA_CONFIG_PATH environment variable
        4. Default config locations
        5. Environment variables
        6. Default values
        """
        if config_path is None:
            env_config_path = os.getenv("UA_CONFIG_PATH")
            if env_config_path:
                config_path = Path(env_config_path)

        if config_path is None:
            config_path = cls.get_default_config_path()

        if config_path.exists():
            logger.debug(f"Loading tracker configuration from: {config_path}")
            config = cls.from_yaml(config_path)
        else:
            config = cls()

        if overrides:
            config = cls(**{**config.model_dump(), **overrides})

        return config
