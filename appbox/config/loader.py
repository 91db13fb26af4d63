"""App config file loader."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from appbox.config.models import AppConfig
from appbox.config.settings import AppboxSettings
from appbox.core.errors import ConfigError

logger = logging.getLogger(__name__)


class AppConfigLoader:
    """Load an app's config file and fill in global defaults."""

    def __init__(self, settings: AppboxSettings):
        self._settings = settings

    def config_path(self, app_dir: str) -> Path:
        return Path(app_dir) / self._settings.config_filename

    def read_raw(self, app_dir: str) -> Dict[str, Any]:
        """
        Read the raw config mapping from an app directory.

        Raises:
            ConfigError: If the file is missing or not a JSON object
        """
        path = self.config_path(app_dir)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"No app config at {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read app config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"App config {path} must be a JSON object")
        return data

    def read_app_name(self, app_dir: str) -> str:
        data = self.read_raw(app_dir)
        name = data.get("appName")
        if not name:
            raise ConfigError(f"App config {self.config_path(app_dir)} has no appName")
        return name

    def get_app_config(self, app_name: str, app_dir: str) -> AppConfig:
        """Build the resolved config for ``app_name`` living in ``app_dir``."""
        data = self.read_raw(app_dir)

        merged = {
            "domain": self._settings.domain,
            "home": self._settings.home,
            "appCidsRoot": self._settings.app_cids_root(app_name),
            "srcRoot": self._settings.resolved_src_root,
            "codeDir": self._settings.code_dir,
        }
        merged.update(data)
        merged["appName"] = app_name
        merged["appRoot"] = str(Path(app_dir).resolve())

        try:
            config = AppConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid app config for [{app_name}]: {e}") from e

        logger.debug(f"[config] loaded {app_name} from {self.config_path(app_dir)}")
        return config
