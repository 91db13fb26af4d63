# appbox/config/settings.py

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppboxSettings(BaseSettings):
    """Global configuration from environment variables (APPBOX_*)."""

    model_config = SettingsConfigDict(
        env_prefix="APPBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Filesystem
    home: str = Field(default_factory=lambda: str(Path.home()))
    sys_conf_root: Optional[str] = None
    src_root: Optional[str] = None
    code_dir: str = "code"
    config_filename: str = "appbox.json"
    app_registry_filename: str = "appRegistry.json"

    # Naming
    domain: str = "kbox"

    # Containers
    dns_servers: List[str] = Field(default_factory=lambda: ["8.8.8.8", "8.8.4.4"])
    core_services: List[str] = Field(default_factory=list)

    # Engine
    engine: Literal["docker", "agent"] = "docker"
    docker_base_url: Optional[str] = None
    agent_url: str = "http://127.0.0.1:9000"
    agent_timeout: int = 60

    # Batch execution
    max_workers: int = 8

    log_level: str = "INFO"

    @property
    def resolved_sys_conf_root(self) -> str:
        return self.sys_conf_root or str(Path(self.home) / ".appbox")

    @property
    def resolved_src_root(self) -> str:
        return self.src_root or self.resolved_sys_conf_root

    @property
    def app_registry_path(self) -> str:
        return str(Path(self.resolved_sys_conf_root) / self.app_registry_filename)

    def app_cids_root(self, app_name: str) -> str:
        return str(Path(self.resolved_sys_conf_root) / "appcids" / app_name)


settings = AppboxSettings()
