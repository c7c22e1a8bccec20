"""Configuration management for remoteshell.

Loads settings from a YAML configuration file with environment variable
overrides (``REMOTESHELL_`` prefix, ``__`` for nested sections). Supports
.env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/remoteshell.yaml")

DEFAULT_BANNER = (
    "Connected to remote shell server.\n"
    "Type 'exit' to close the session.\n"
)


class ServerConfig(BaseModel):
    command_max: int = Field(default=4096, ge=2, description="Lines this long or longer are rejected")
    io_buffer: int = Field(default=4096, gt=0, description="Max bytes per subprocess output chunk")
    backlog: int = Field(default=8, gt=0)
    shell: str = Field(default="/bin/sh")
    banner: str = Field(default=DEFAULT_BANNER)


class ClientConfig(BaseModel):
    log_cap: int = Field(default=131072, gt=0, description="Hard cap of the output log in bytes")
    initial_capacity: int = Field(default=4096, gt=0)
    io_buffer: int = Field(default=4096, gt=0)
    command_max: int = Field(default=4096, ge=2)
    prompt_label: str = Field(default="Command: ")
    fallback_rows: int = Field(default=24, gt=0)
    fallback_cols: int = Field(default=80, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for remoteshell.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "REMOTESHELL_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML data arrives as init kwargs; environment wins over it.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.debug("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
