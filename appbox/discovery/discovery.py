# appbox/discovery/discovery.py
"""App discovery - maps app names to their root directories."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import List

from appbox.config.loader import AppConfigLoader
from appbox.core.errors import AppNotFoundError, ConfigError

logger = logging.getLogger(__name__)


class AppDiscovery(ABC):
    """Discovery contract."""

    @abstractmethod
    def list(self) -> List[str]:
        """Names of all known apps (duplicates included)."""
        raise NotImplementedError

    @abstractmethod
    def get_app_dir(self, app_name: str) -> str:
        """Root directory of ``app_name``. Raises AppNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    def register_app_dir(self, app_dir: str) -> None:
        """Remember ``app_dir`` as an app root. Idempotent."""
        raise NotImplementedError


class FileAppDiscovery(AppDiscovery):
    """
    Discovery backed by a JSON registry file listing app directories.

    App names are read from each directory's config file, so the file
    holds paths only.
    """

    def __init__(self, registry_path: str, config_loader: AppConfigLoader):
        self._registry_path = registry_path
        self._config_loader = config_loader
        self._lock = Lock()

    def app_dirs(self) -> List[str]:
        try:
            with open(self._registry_path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read app registry {self._registry_path}: {e}") from e

        if not isinstance(data, list):
            raise ConfigError(f"App registry {self._registry_path} must be a JSON list")
        return [str(d) for d in data]

    def list(self) -> List[str]:
        names = []
        for app_dir in self.app_dirs():
            if not os.path.isdir(app_dir):
                logger.warning(f"[discovery] registered app dir {app_dir} is gone, skipping")
                continue
            names.append(self._config_loader.read_app_name(app_dir))
        return names

    def get_app_dir(self, app_name: str) -> str:
        for app_dir in self.app_dirs():
            if not os.path.isdir(app_dir):
                continue
            if self._config_loader.read_app_name(app_dir) == app_name:
                return app_dir
        raise AppNotFoundError(app_name)

    def register_app_dir(self, app_dir: str) -> None:
        app_dir = str(Path(app_dir).resolve())

        with self._lock:
            dirs = self.app_dirs()
            if app_dir in dirs:
                return

            dirs.append(app_dir)
            Path(self._registry_path).parent.mkdir(parents=True, exist_ok=True)
            tmp_path = f"{self._registry_path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(dirs, f, indent=2)
            os.replace(tmp_path, self._registry_path)

        logger.info(f"[discovery] registered app dir {app_dir}")
