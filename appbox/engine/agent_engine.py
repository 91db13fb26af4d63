# appbox/engine/agent_engine.py
"""Engine that delegates to a remote Runtime Agent."""

from typing import Any, Dict

from appbox.core.models import ContainerRef, ImageSpec
from appbox.engine.engine import Engine
from runtime_agent.client import RuntimeAgentClient


class RuntimeAgentEngine(Engine):

    def __init__(self, client: RuntimeAgentClient):
        self.client = client

    def build(self, image: ImageSpec) -> None:
        self.client.build_image(image.name, image.build, image.src_root)

    def create(self, options: Dict[str, Any]) -> ContainerRef:
        result = self.client.create_container(options)
        return ContainerRef(id=result.container_id, name=result.container_name)

    def start(self, container_id: str, options: Dict[str, Any]) -> None:
        self.client.start_container(container_id, options)

    def stop(self, container_id: str) -> None:
        self.client.stop_container(container_id)

    def remove(self, container_id: str) -> None:
        self.client.remove_container(container_id)
