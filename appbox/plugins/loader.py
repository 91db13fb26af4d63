"""Plugin loader - imports plugin modules and lets them subscribe to hooks."""

import importlib
import logging
from typing import Iterable

from appbox.core.errors import PluginLoadError
from appbox.core.events import EventBus
from appbox.core.models import App

logger = logging.getLogger(__name__)


REGISTER_HOOK = "register"


class PluginLoader:
    """
    Loads plugins into an event bus.

    A plugin is an importable module exposing ``register(events)``.
    Plugins load strictly in the order given; the first failure stops
    the rest. Loading happens before any lifecycle call.
    """

    def __init__(self, events: EventBus):
        self._events = events
        self._loaded: set[str] = set()

    def require(self, plugin: str) -> None:
        if plugin in self._loaded:
            return

        try:
            module = importlib.import_module(plugin)
            register = getattr(module, REGISTER_HOOK, None)
            if not callable(register):
                raise TypeError(f"module has no callable {REGISTER_HOOK}()")
            register(self._events)
        except Exception as e:
            logger.error(f"[plugins] failed to load {plugin}: {e}")
            raise PluginLoadError(plugin, e) from e

        self._loaded.add(plugin)
        logger.info(f"[plugins] loaded {plugin}")

    def load(self, plugins: Iterable[str]) -> None:
        for plugin in plugins:
            self.require(plugin)

    def load_app_plugins(self, app: App) -> None:
        self.load(app.plugins)
