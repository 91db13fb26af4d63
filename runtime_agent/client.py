# runtime_agent/client.py
"""Runtime Agent client for remote engine calls."""

import requests
from typing import Dict, Any, Optional
from dataclasses import dataclass
import logging

from appbox.core.errors import EngineError

logger = logging.getLogger(__name__)


@dataclass
class CreateResult:
    """Result from container creation."""
    container_id: str
    container_name: Optional[str]


class RuntimeAgentClient:
    """Client for communicating with Runtime Agent."""

    def __init__(self, agent_url: str, timeout: int = 60):
        """
        Initialize client.

        Args:
            agent_url: Base URL of runtime agent (e.g., "http://10.0.1.10:9000")
            timeout: Request timeout in seconds
        """
        self.base_url = agent_url.rstrip('/')
        self.timeout = timeout

    def health_check(self) -> bool:
        """
        Check if agent is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = requests.get(
                f"{self.base_url}/health",
                timeout=5
            )
            return response.status_code == 200
        except requests.exceptions.RequestException as e:
            logger.error(f"Health check failed: {e}")
            return False

    def build_image(self, name: Optional[str], build: bool, src_root: Optional[str]) -> None:
        """Build (or pull) an image on the agent host."""
        self._request(
            "post",
            "/images/build",
            action=f"Build of {name}",
            json={"name": name, "build": build, "src_root": src_root},
        )

    def create_container(self, options: Dict[str, Any]) -> CreateResult:
        """
        Create a container.

        Args:
            options: Install options

        Returns:
            CreateResult

        Raises:
            EngineError: If creation fails
        """
        data = self._request(
            "post",
            "/containers",
            action=f"Create of {options.get('name')}",
            json={"options": options},
        )

        logger.info(f"✅ Container created: {data['container_id'][:12]}")

        return CreateResult(
            container_id=data['container_id'],
            container_name=data.get('container_name'),
        )

    def start_container(self, container_id: str, options: Dict[str, Any]) -> None:
        self._request(
            "post",
            f"/containers/{container_id}/start",
            action=f"Start of {container_id}",
            json={"options": options},
        )

    def stop_container(self, container_id: str) -> None:
        self._request("post", f"/containers/{container_id}/stop", action=f"Stop of {container_id}")

    def remove_container(self, container_id: str) -> None:
        self._request("delete", f"/containers/{container_id}", action=f"Remove of {container_id}")

    def _request(self, method: str, path: str, *, action: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = requests.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise EngineError(f"{action} timed out after {self.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise EngineError(f"Cannot connect to runtime agent at {self.base_url}") from e
        except requests.exceptions.RequestException as e:
            raise EngineError(f"{action} failed: {e}") from e

        if response.status_code != 200:
            try:
                error_detail = response.json().get('detail', response.text)
            except ValueError:
                error_detail = response.text
            raise EngineError(f"{action} failed [{response.status_code}]: {error_detail}")

        try:
            return response.json()
        except ValueError as e:
            raise EngineError(f"{action} returned a non-JSON response: {response.text[:200]}") from e
