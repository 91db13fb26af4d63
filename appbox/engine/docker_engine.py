# appbox/engine/docker_engine.py
"""Engine backed by the local Docker daemon."""

import logging
from typing import Any, Dict, Optional

import docker
import requests

from appbox.core.errors import EngineError
from appbox.core.models import ContainerRef, ImageSpec
from appbox.engine.engine import Engine

logger = logging.getLogger(__name__)


# Engine API field -> create_container() keyword
_CREATE_FIELDS = {
    "Hostname": "hostname",
    "name": "name",
    "Env": "environment",
    "Cmd": "command",
    "Entrypoint": "entrypoint",
    "WorkingDir": "working_dir",
    "User": "user",
    "Labels": "labels",
    "Tty": "tty",
    "OpenStdin": "stdin_open",
}

# HostConfig field -> create_host_config() keyword
_HOST_CONFIG_FIELDS = {
    "VolumesFrom": "volumes_from",
    "Binds": "binds",
    "PublishAllPorts": "publish_all_ports",
    "PortBindings": "port_bindings",
    "Links": "links",
    "Privileged": "privileged",
    "NetworkMode": "network_mode",
    "Dns": "dns",
    "RestartPolicy": "restart_policy",
}

_ENGINE_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)


def _port_spec(port: str):
    """``"80/tcp"`` -> ``("80", "tcp")``, the form ``create_container`` expects."""
    number, _, proto = str(port).partition("/")
    return (number, proto or "tcp")


def _host_field_applied(current: Any, wanted: Any) -> bool:
    if isinstance(wanted, list):
        return all(item in (current or []) for item in wanted)
    return current == wanted


class DockerEngine(Engine):
    """
    Translates lifecycle options into Docker SDK calls.

    The Engine API no longer accepts host configuration when starting a
    container. Start options must already be in the container's
    HostConfig from install; start refuses options that are not.
    """

    def __init__(self, client: Optional[docker.APIClient] = None, base_url: Optional[str] = None):
        if client is None:
            try:
                client = docker.APIClient(base_url=base_url) if base_url else docker.from_env().api
            except docker.errors.DockerException as e:
                raise EngineError(f"Cannot connect to Docker: {e}") from e
        self.client = client

    # -------------------------
    # IMAGES
    # -------------------------

    def build(self, image: ImageSpec) -> None:
        if not image.build:
            self._pull(image)
            return

        logger.info(f"[docker] building {image.name} from {image.src_root}")
        try:
            for chunk in self.client.build(path=image.src_root, tag=image.name, rm=True, decode=True):
                if "error" in chunk:
                    raise EngineError(f"Build of {image.name} failed: {chunk['error'].strip()}")
                if "stream" in chunk:
                    logger.debug(f"[docker] {chunk['stream'].rstrip()}")
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Build of {image.name} failed: {e}") from e

    def _pull(self, image: ImageSpec) -> None:
        if not image.name:
            raise EngineError("Component has no image to pull")

        repository, tag = docker.utils.parse_repository_tag(image.name)
        logger.info(f"[docker] pulling {image.name}")
        try:
            self.client.pull(repository, tag=tag or "latest")
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Pull of {image.name} failed: {e}") from e

    # -------------------------
    # CONTAINERS
    # -------------------------

    def create(self, options: Dict[str, Any]) -> ContainerRef:
        kwargs = self.create_kwargs(options)
        try:
            response = self.client.create_container(**kwargs)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Create of {options.get('name')} failed: {e}") from e

        for warning in response.get("Warnings") or []:
            logger.warning(f"[docker] {options.get('name')}: {warning}")

        return ContainerRef(id=response["Id"], name=options.get("name"))

    def create_kwargs(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Map Engine API style options to ``create_container`` arguments."""
        kwargs: Dict[str, Any] = {"image": options.get("Image")}
        host_config: Dict[str, Any] = {}

        for key, value in options.items():
            if key in ("Image", "HostConfig"):
                continue
            if key in _CREATE_FIELDS:
                kwargs[_CREATE_FIELDS[key]] = value
            elif key == "Dns":
                host_config["dns"] = value
            elif key == "ExposedPorts":
                kwargs["ports"] = [_port_spec(port) for port in value]
            elif key == "Volumes":
                kwargs["volumes"] = list(value)
            else:
                logger.debug(f"[docker] ignoring unsupported create option {key}")

        for key, value in (options.get("HostConfig") or {}).items():
            if key in _HOST_CONFIG_FIELDS:
                host_config[_HOST_CONFIG_FIELDS[key]] = value
            else:
                logger.debug(f"[docker] ignoring unsupported host option {key}")

        if host_config:
            kwargs["host_config"] = self.client.create_host_config(**host_config)
        return kwargs

    def start(self, container_id: str, options: Dict[str, Any]) -> None:
        if options:
            self._check_start_options(container_id, options)
        try:
            self.client.start(container_id)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Start of {container_id[:12]} failed: {e}") from e

    def _check_start_options(self, container_id: str, options: Dict[str, Any]) -> None:
        """Raise unless every start option is already in the container's host config."""
        try:
            host_config = self.client.inspect_container(container_id).get("HostConfig") or {}
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Inspect of {container_id[:12]} failed: {e}") from e

        missing = sorted(
            key for key, value in options.items()
            if not _host_field_applied(host_config.get(key), value)
        )
        if missing:
            raise EngineError(
                f"Start options {missing} for {container_id[:12]} were not applied when it was created"
            )

    def stop(self, container_id: str) -> None:
        try:
            self.client.stop(container_id)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Stop of {container_id[:12]} failed: {e}") from e

    def remove(self, container_id: str) -> None:
        try:
            self.client.remove_container(container_id)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Remove of {container_id[:12]} failed: {e}") from e
