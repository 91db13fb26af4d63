# appbox/container.py

"""Dependency wiring - builds every collaborator once per process."""

from dataclasses import dataclass
from typing import Optional

from appbox.app.assembler import AppAssembler
from appbox.app.components import ComponentBuilder
from appbox.app.identity import IdentityStore
from appbox.app.registry import AppRegistry
from appbox.config.loader import AppConfigLoader
from appbox.config.settings import AppboxSettings, settings as default_settings
from appbox.core.events import EventBus
from appbox.discovery.discovery import AppDiscovery, FileAppDiscovery
from appbox.engine.agent_engine import RuntimeAgentEngine
from appbox.engine.docker_engine import DockerEngine
from appbox.engine.engine import Engine
from appbox.executor.batch import ComponentBatchExecutor
from appbox.orchestrator.lifecycle import AppLifecycle
from appbox.plugins.loader import PluginLoader
from appbox.services.readiness import (
    AgentServiceReadiness,
    DockerServiceReadiness,
    ServiceReadiness,
)
from runtime_agent.client import RuntimeAgentClient


@dataclass
class Services:
    settings: AppboxSettings
    events: EventBus
    engine: Engine
    readiness: ServiceReadiness
    discovery: AppDiscovery
    config_loader: AppConfigLoader
    assembler: AppAssembler
    registry: AppRegistry
    plugins: PluginLoader
    lifecycle: AppLifecycle


def build_engine(settings: AppboxSettings):
    """Engine plus the readiness check that matches it."""
    if settings.engine == "agent":
        client = RuntimeAgentClient(settings.agent_url, timeout=settings.agent_timeout)
        return RuntimeAgentEngine(client), AgentServiceReadiness(client)

    engine = DockerEngine(base_url=settings.docker_base_url)
    return engine, DockerServiceReadiness(engine.client, settings.core_services)


def build_services(
    settings: Optional[AppboxSettings] = None,
    *,
    events: Optional[EventBus] = None,
    engine: Optional[Engine] = None,
    readiness: Optional[ServiceReadiness] = None,
) -> Services:
    settings = settings or default_settings

    # ============================================
    # EVENTS
    # ============================================

    events = events or EventBus()

    # ============================================
    # ENGINE
    # ============================================

    if engine is None or readiness is None:
        built_engine, built_readiness = build_engine(settings)
        engine = engine or built_engine
        readiness = readiness or built_readiness

    # ============================================
    # APPS
    # ============================================

    identity = IdentityStore()
    config_loader = AppConfigLoader(settings)
    discovery = FileAppDiscovery(settings.app_registry_path, config_loader)
    assembler = AppAssembler(engine, identity, ComponentBuilder(identity))
    registry = AppRegistry(discovery, config_loader, assembler, max_workers=settings.max_workers)

    # ============================================
    # LIFECYCLE
    # ============================================

    lifecycle = AppLifecycle(
        engine=engine,
        services=readiness,
        discovery=discovery,
        events=events,
        identity=identity,
        executor=ComponentBatchExecutor(max_workers=settings.max_workers),
        dns_servers=settings.dns_servers,
    )

    return Services(
        settings=settings,
        events=events,
        engine=engine,
        readiness=readiness,
        discovery=discovery,
        config_loader=config_loader,
        assembler=assembler,
        registry=registry,
        plugins=PluginLoader(events),
        lifecycle=lifecycle,
    )
