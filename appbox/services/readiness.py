# appbox/services/readiness.py
"""Core service readiness checks run before lifecycle transitions."""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

import docker
import requests

from appbox.core.errors import ServicesNotReadyError
from runtime_agent.client import RuntimeAgentClient

logger = logging.getLogger(__name__)


class ServiceReadiness(ABC):

    @abstractmethod
    def verify(self) -> None:
        """Raise ServicesNotReadyError unless core services are available."""
        raise NotImplementedError


class DockerServiceReadiness(ServiceReadiness):
    """Checks the local daemon answers and core service containers run."""

    def __init__(self, client, core_services: Iterable[str] = ()):
        self._client = client
        self._core_services = list(core_services)

    def verify(self) -> None:
        try:
            self._client.ping()
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            raise ServicesNotReadyError(f"Docker daemon is not reachable: {e}") from e

        stopped: List[str] = []
        for name in self._core_services:
            try:
                info = self._client.inspect_container(name)
            except docker.errors.NotFound:
                stopped.append(name)
                continue
            except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
                raise ServicesNotReadyError(f"Cannot inspect service {name}: {e}") from e

            if not info.get("State", {}).get("Running", False):
                stopped.append(name)

        if stopped:
            raise ServicesNotReadyError(f"Core services not running: {', '.join(stopped)}")

        logger.debug("[services] core services ready")


class AgentServiceReadiness(ServiceReadiness):
    """Checks the runtime agent is healthy."""

    def __init__(self, client: RuntimeAgentClient):
        self._client = client

    def verify(self) -> None:
        if not self._client.health_check():
            raise ServicesNotReadyError(f"Runtime agent at {self._client.base_url} is not healthy")
