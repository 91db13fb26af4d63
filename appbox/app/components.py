"""Component descriptor builder."""

import copy
import logging
import os
from typing import Iterable, List, Optional

from appbox.app.identity import IdentityStore
from appbox.config.models import ComponentSpec
from appbox.core.models import App, Component, DATA_COMPONENT, ImageSpec

logger = logging.getLogger(__name__)


DOCKERFILE = "Dockerfile"


def container_name(app_name: str, component_name: str) -> str:
    return "_".join(["kb", app_name, component_name])


def search_for_path(paths: Iterable[str]) -> Optional[str]:
    """Return the first path that exists, or None."""
    for path in paths:
        if os.path.exists(path):
            return path
    return None


def get_components(app: App) -> List[Component]:
    """List an app's components with the data component first."""
    components = list(app.components.values())
    data = [c for c in components if c.name == DATA_COMPONENT]
    rest = [c for c in components if c.name != DATA_COMPONENT]
    return data + rest


class ComponentBuilder:
    """Resolve a raw component spec against its app."""

    def __init__(self, identity: IdentityStore):
        self._identity = identity

    def build(self, app: App, name: str, spec: ComponentSpec) -> Component:
        """
        Build a fully resolved component.

        When the spec asks for an image build but no Dockerfile exists in
        any search root, the component comes back with its build flag
        cleared so it runs from the named image instead.
        """
        hostname = ".".join([name, app.domain])
        container_id_file = self._identity.path_for(app.config.app_cids_root, name)

        return Component(
            name=name,
            hostname=hostname,
            app_domain=app.domain,
            url=f"http://{hostname}",
            container_name=container_name(app.name, name),
            data_container_name=app.data_container_name,
            container_id_file=container_id_file,
            container_id=self._identity.read(container_id_file),
            image=self._resolve_image(app, name, spec),
            install_options=copy.deepcopy(spec.install_options),
            start_options=copy.deepcopy(spec.start_options),
            spec=spec.extra_fields(),
        )

    def build_placeholder(self, app: App, spec: ComponentSpec) -> Component:
        """
        Wrap the reserved data entry.

        Its spec is carried as-is (no build search); only the identity
        fields needed to install and remove it are derived.
        """
        container_id_file = self._identity.path_for(app.config.app_cids_root, DATA_COMPONENT)
        hostname = ".".join([DATA_COMPONENT, app.domain])

        return Component(
            name=DATA_COMPONENT,
            hostname=hostname,
            app_domain=app.domain,
            url=f"http://{hostname}",
            container_name=app.data_container_name,
            data_container_name=app.data_container_name,
            container_id_file=container_id_file,
            container_id=self._identity.read(container_id_file),
            image=ImageSpec(
                name=spec.image.name,
                build=spec.image.build,
                src_root=spec.image.src_root,
            ),
            install_options=copy.deepcopy(spec.install_options),
            start_options=copy.deepcopy(spec.start_options),
            spec=spec.extra_fields(),
            placeholder=True,
        )

    def _resolve_image(self, app: App, name: str, spec: ComponentSpec) -> ImageSpec:
        image = spec.image
        if not image.build:
            return ImageSpec(name=image.name, build=False, src_root=image.src_root)

        src_root = image.src_root or ""
        candidates = [
            os.path.join(root, src_root, DOCKERFILE)
            for root in (app.config.app_root, app.config.src_root)
        ]
        found = search_for_path(candidates)

        if found is None:
            logger.debug(f"[components] {app.name}/{name}: no {DOCKERFILE} in {candidates}, using image {image.name}")
            return ImageSpec(name=image.name, build=False, src_root=image.src_root)

        return ImageSpec(name=image.name, build=True, src_root=os.path.dirname(found))
