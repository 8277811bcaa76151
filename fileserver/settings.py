from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from fileserver.exceptions import ConfigurationError

# Load .env file from project root
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


DEFAULT_CONFIG_PATH = "config/default.yaml"


class LocalStorageSettings(BaseModel):
    # Folder location for storing files
    location: str = "fileserver-upload"

    @field_validator("location")
    @classmethod
    def _non_empty_location(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("storage.local.location must not be empty")
        return value


class S3StorageSettings(BaseModel):
    bucket_name: str | None = None
    region: str | None = None
    endpoint_url: str | None = None
    presign_expires_seconds: int = Field(3600, gt=0, le=7 * 24 * 3600)


class StorageSettings(BaseModel):
    backend: Literal["local", "s3"] = "local"
    # Accept deletes but keep the files on the medium.
    prevent_cleanup: bool = False
    local: LocalStorageSettings = Field(default_factory=LocalStorageSettings)
    s3: S3StorageSettings = Field(default_factory=S3StorageSettings)

    @model_validator(mode="after")
    def _bucket_required_for_s3(self) -> "StorageSettings":
        if self.backend == "s3" and not self.s3.bucket_name:
            raise ValueError("storage.s3.bucket_name is required when storage.backend is 's3'")
        return self


class CorsSettings(BaseModel):
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _normalize_origins(cls, value: Any) -> list[str]:
        if value is None:
            return ["*"]
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                FILESERVER_CONFIG environment variable or defaults to config/default.yaml.

        Returns:
            Settings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ConfigurationError: If configuration is invalid.
        """
        config_path = path or Path(os.getenv("FILESERVER_CONFIG", DEFAULT_CONFIG_PATH))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            payload = yaml.safe_load(fp) or {}
        try:
            return cls(**payload)
        except Exception as exc:
            raise ConfigurationError(
                f"Invalid configuration: {exc}",
                {"path": str(config_path)},
            ) from exc


@lru_cache(maxsize=1)
def get_settings(path: str | None = None) -> Settings:
    return Settings.load(Path(path) if path else None)


__all__ = [
    "Settings",
    "StorageSettings",
    "LocalStorageSettings",
    "S3StorageSettings",
    "CorsSettings",
    "get_settings",
]
