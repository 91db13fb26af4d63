# appbox/engine/engine.py

import re
from abc import ABC, abstractmethod
from typing import Any, Dict

from appbox.core.models import ContainerRef, ImageSpec


_DRIVE_PATH = re.compile(r"^([A-Za-z]):[\\/]")


def path_to_bind(path: str) -> str:
    """
    Translate a host path into the form the engine binds.

    Windows drive paths (``C:\\Users\\me``) become ``/c/Users/me``;
    everything else passes through.
    """
    match = _DRIVE_PATH.match(path)
    if not match:
        return path
    rest = path[match.end():].replace("\\", "/")
    return f"/{match.group(1).lower()}/{rest}"


class Engine(ABC):
    """
    Container runtime contract.

    Options are plain mappings in Docker Engine API casing; the engine
    owns their interpretation.
    """

    @abstractmethod
    def build(self, image: ImageSpec) -> None:
        raise NotImplementedError

    @abstractmethod
    def create(self, options: Dict[str, Any]) -> ContainerRef:
        raise NotImplementedError

    @abstractmethod
    def start(self, container_id: str, options: Dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self, container_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, container_id: str) -> None:
        raise NotImplementedError

    def path_to_bind(self, path: str) -> str:
        return path_to_bind(path)
