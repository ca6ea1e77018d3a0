"""Relay configuration with Pydantic models.

- Load from YAML file
- Override with environment variables
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """HTTP/WebSocket server configuration."""
    host: str = Field("0.0.0.0", description="Server bind address")
    port: int = Field(3000, description="Server port")


class CorsConfig(BaseModel):
    """CORS configuration."""
    origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed origins for CORS",
    )
    allow_credentials: bool = Field(False, description="Allow credentials")


class SessionsConfig(BaseModel):
    """Channel session behaviour."""
    remove_on_disconnect: bool = Field(
        True,
        description="Drop a channel's announced user from the roster when the channel closes",
    )


class LoggingConfig(BaseModel):
    """Log output configuration."""
    level: str = Field("INFO", description="Root log level name")
    cloudwatch: bool = Field(False, description="Also ship logs to CloudWatch (needs watchtower)")
    log_group: str = Field("chat-relay", description="CloudWatch log group")


class AppConfig(BaseModel):
    """Application configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _default_config_path() -> Path:
    return Path(__file__).resolve().parents[2] / "config.yaml"


def load_config(path: Optional[Path | str] = None) -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Environment variables take precedence over YAML values:
    - CHAT_RELAY_CONFIG: Path of the YAML file (when ``path`` is not given)
    - HOST / PORT: Listening address
    - CORS_ORIGINS: Comma-separated list of allowed origins
    - LOG_LEVEL: Root log level
    - ENABLE_CLOUDWATCH / CLOUDWATCH_LOG_GROUP: CloudWatch shipping
    """
    if path is None:
        path = os.environ.get("CHAT_RELAY_CONFIG")
    config_path = Path(path) if path else _default_config_path()

    if not config_path.is_file():
        config = AppConfig()
    else:
        with config_path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig.model_validate(raw)

    if host := os.environ.get("HOST"):
        config.server.host = host
    if port := os.environ.get("PORT"):
        config.server.port = int(port)
    if origins := os.environ.get("CORS_ORIGINS"):
        config.cors.origins = [o.strip() for o in origins.split(",") if o.strip()]
    if level := os.environ.get("LOG_LEVEL"):
        config.logging.level = level
    if cloudwatch := os.environ.get("ENABLE_CLOUDWATCH"):
        config.logging.cloudwatch = cloudwatch.lower() == "true"
    if log_group := os.environ.get("CLOUDWATCH_LOG_GROUP"):
        config.logging.log_group = log_group

    return config
