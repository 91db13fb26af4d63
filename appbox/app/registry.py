"""App registry - lists and looks up known apps."""

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import List

from appbox.app.assembler import AppAssembler
from appbox.config.loader import AppConfigLoader
from appbox.core.errors import AppNotFoundError, DuplicateAppError
from appbox.core.models import App
from appbox.discovery.discovery import AppDiscovery

logger = logging.getLogger(__name__)


class AppRegistry:
    """Rebuilds App entities from discovery on every call."""

    def __init__(
        self,
        discovery: AppDiscovery,
        config_loader: AppConfigLoader,
        assembler: AppAssembler,
        max_workers: int = 8,
    ):
        self._discovery = discovery
        self._config_loader = config_loader
        self._assembler = assembler
        self.max_workers = max_workers

    def list(self) -> List[App]:
        """
        Assemble every known app.

        Raises:
            DuplicateAppError: If two apps resolve to the same name
        """
        names = self._discovery.list()
        if not names:
            return []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(names))) as pool:
            apps = list(pool.map(self._load, names))

        counts = Counter(app.name for app in apps)
        duplicates = [name for name, count in counts.items() if count > 1]
        if duplicates:
            raise DuplicateAppError(duplicates)

        logger.debug(f"[registry] found {len(apps)} apps")
        return apps

    def get(self, app_name: str) -> App:
        for app in self.list():
            if app.name == app_name:
                return app
        raise AppNotFoundError(app_name)

    def _load(self, app_name: str) -> App:
        app_dir = self._discovery.get_app_dir(app_name)
        config = self._config_loader.get_app_config(app_name, app_dir)
        return self._assembler.assemble(app_name, config)
