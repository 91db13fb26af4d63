"""Core domain models for apps and their components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


DATA_COMPONENT = "data"


class Phase(Enum):
    """Lifecycle phases that carry hook events."""

    INSTALL = "install"
    START = "start"
    STOP = "stop"
    UNINSTALL = "uninstall"


@dataclass(frozen=True)
class ImageSpec:
    """Image a component runs: pre-built by name, or built from a source root."""
    name: Optional[str] = None
    build: bool = False
    src_root: Optional[str] = None


@dataclass(frozen=True)
class Component:
    """
    Resolved view of one component of an app.

    Derived from the static component spec plus app context; the only
    persistent state behind it is the identity file at ``container_id_file``.
    """

    # Identity
    name: str
    hostname: str
    app_domain: str
    url: str
    container_name: str
    data_container_name: str
    container_id_file: str
    container_id: Optional[str] = None

    # Image
    image: ImageSpec = field(default_factory=ImageSpec)

    # Caller-supplied engine options, merged last
    install_options: Dict[str, Any] = field(default_factory=dict)
    start_options: Dict[str, Any] = field(default_factory=dict)

    # Remaining raw spec fields
    spec: Dict[str, Any] = field(default_factory=dict)

    # The reserved data entry, passed through without resolution
    placeholder: bool = False

    @property
    def buildable(self) -> bool:
        return self.image.build

    @property
    def is_data(self) -> bool:
        return self.name == DATA_COMPONENT


@dataclass
class App:
    """A named collection of components sharing a domain and filesystem root."""

    name: str
    domain: str
    url: str
    data_container_name: str
    root: str
    root_bind: str
    config: Any
    components: Dict[str, Component] = field(default_factory=dict)
    plugins: List[str] = field(default_factory=list)


@dataclass
class ComponentContext:
    """Payload handed to per-component hooks. Hooks may mutate ``options``."""

    app: App
    component: Component
    phase: Phase
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContainerRef:
    """Container created by the engine."""
    id: str
    name: Optional[str] = None
