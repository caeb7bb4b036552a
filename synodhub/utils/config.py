"""
Configuration management with schema validation and atomic writes.
Single source of truth for SynodHub settings, including the remote API URL
that switches the data layer between local and remote mode.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

SETTINGS_FILE = Path(os.getenv("SYNODHUB_SETTINGS", "data/settings.yaml"))


class AppSettings(BaseModel):
    name: str = "SynodHub"
    version: str = "1.0.0"
    environment: str = "production"


class RemoteSettings(BaseModel):
    api_url: Optional[str] = None
    connection_timeout: int = 10
    read_timeout: int = 30


class StorageSettings(BaseModel):
    data_dir: str = "data"
    key_prefix: str = "ccap"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = "logs/synodhub.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class SecuritySettings(BaseModel):
    # Off by default: stored passwords are compared as opaque strings
    hash_passwords: bool = False


class AccountSettings(BaseModel):
    rejection_grace_hours: int = 72


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    accounts: AccountSettings = Field(default_factory=AccountSettings)

    @property
    def api_url(self) -> Optional[str]:
        url = (self.remote.api_url or "").strip()
        return url or None


def normalize_api_url(url: Optional[str]) -> Optional[str]:
    """
    Validate a remote base URL. Empty means local mode (returns None).

    Raises:
        ConfigError: If the URL is not http(s)
    """
    url = (url or "").strip()
    if not url:
        return None
    if not (url.startswith("http://") or url.startswith("https://")):
        raise ConfigError(f"Invalid URL '{url}'. Must start with http:// or https://")
    return url.rstrip("/")


class ConfigManager:
    """Loads and saves settings.yaml"""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else SETTINGS_FILE
        self._settings: Optional[Settings] = None

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute ${VAR} and ${VAR:default} values"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                else:
                    return os.getenv(var_expr, value)
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self) -> Settings:
        """Load and validate settings.yaml. A missing file yields defaults."""
        if not self.settings_path.exists():
            logger.info("Settings file not found, using defaults", path=str(self.settings_path))
            self._settings = Settings()
            return self._settings

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {self.settings_path}: {str(e)}")

        if not isinstance(raw_data, dict):
            raise ConfigError(f"Settings file {self.settings_path} must contain a mapping")

        processed_data = self._substitute_env_vars(raw_data)
        try:
            self._settings = Settings(**processed_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.settings_path}: {str(e)}")
        return self._settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            return self.load_settings()
        return self._settings

    def save_settings(self, settings: Settings) -> None:
        """Atomically save settings to YAML"""
        data = settings.model_dump(mode="json")
        self._atomic_write(self.settings_path, data)
        self._settings = settings

    def set_api_url(self, url: Optional[str]) -> Settings:
        """Persist a new remote base URL (empty reverts to local mode)"""
        settings = self.settings.model_copy(deep=True)
        settings.remote.api_url = normalize_api_url(url)
        self.save_settings(settings)
        logger.info(
            "Remote API URL updated",
            api_url=settings.remote.api_url,
            is_remote=settings.api_url is not None,
        )
        return settings

    def _atomic_write(self, path: Path, data: Dict[str, Any]) -> None:
        """Write YAML file atomically"""
        path.parent.mkdir(parents=True, exist_ok=True)
        # Temp file in the same directory so the move stays on one filesystem
        with tempfile.NamedTemporaryFile(mode="w", dir=path.parent, delete=False, encoding="utf-8") as tf:
            yaml.dump(data, tf, default_flow_style=False, sort_keys=False, allow_unicode=True)
            temp_path = Path(tf.name)

        try:
            shutil.move(str(temp_path), str(path))
        except Exception as e:
            if temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config to {path}: {str(e)}")
