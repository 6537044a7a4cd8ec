"""Application settings and logging setup.

Settings come from built-in defaults, then an optional YAML file, then
MECANICO_* environment variables (highest precedence).
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.errors import InvalidInput


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MECANICO_",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="forbid",
        frozen=True,
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding vehicle and interval documents",
    )
    due_soon_ratio: float = Field(
        default=0.1,
        gt=0,
        lt=1,
        description="Share of the interval left at which an item is due soon",
    )
    offline_queue: bool = Field(
        default=False,
        description="Queue service records while the store is unavailable",
    )
    sync_interval: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between retry queue reconciliation passes",
    )
    default_user: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MECANICO_USER", "default_user"),
        description="Acting user for the CLI when --user is not given",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    secret_key: str = Field(
        default="dev-secret-key-change-in-prod",
        validation_alias=AliasChoices("SECRET_KEY", "secret_key"),
        description="Flask session key",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # Environment beats the YAML file, which arrives as init kwargs.
        return env_settings, init_settings

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def queue_path(self) -> Path:
        return self.data_dir / "sync-queue.yaml"


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
    )


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from an optional YAML file and the environment.

    Raises InvalidInput when a value is out of range or a file key is unknown.
    """
    path = path or os.environ.get("MECANICO_CONFIG")
    file_data = {}
    if path:
        with open(path, "r", encoding="utf-8") as fp:
            file_data = yaml.safe_load(fp) or {}
        if not isinstance(file_data, dict):
            raise InvalidInput(f"Settings file {path} must hold a mapping")

    try:
        return Settings(**file_data)
    except ValidationError as e:
        raise InvalidInput(f"Invalid settings: {_describe(e)}") from e


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
