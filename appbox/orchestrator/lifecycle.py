# appbox/orchestrator/lifecycle.py
"""Lifecycle orchestrator - install, start, stop, uninstall and rebuild apps."""

import copy
import logging
from dataclasses import replace
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Sequence

from appbox.app.components import get_components
from appbox.app.identity import IdentityStore
from appbox.core.errors import ComponentOperationError, EngineError
from appbox.core.events import (
    EventBus,
    post_component_event,
    post_event,
    pre_component_event,
    pre_event,
)
from appbox.core.models import App, Component, ComponentContext, DATA_COMPONENT, Phase
from appbox.discovery.discovery import AppDiscovery
from appbox.engine.engine import Engine
from appbox.executor.batch import ComponentBatchExecutor
from appbox.services.readiness import ServiceReadiness

logger = logging.getLogger(__name__)


SRC_MOUNT = "/src"


def _merge_options(opts: Dict[str, Any], extra: Dict[str, Any]) -> None:
    """Apply ``extra`` over ``opts``; HostConfig is merged key by key."""
    for key, value in copy.deepcopy(extra).items():
        if key == "HostConfig" and isinstance(value, dict):
            opts.setdefault("HostConfig", {}).update(value)
        else:
            opts[key] = value


class AppLifecycle:
    """
    Drives an app through its lifecycle phases.

    Every phase follows the same template:
    1. Verify core services (install, start, stop)
    2. Emit pre-<phase> with the app
    3. Run the component operation over all components, data first,
       each wrapped in pre/post-<phase>-component hooks
    4. Emit post-<phase> with the app

    install and uninstall raise the first component failure; start and
    stop return every component failure.
    """

    def __init__(
        self,
        *,
        engine: Engine,
        services: ServiceReadiness,
        discovery: AppDiscovery,
        events: EventBus,
        identity: IdentityStore,
        executor: ComponentBatchExecutor,
        dns_servers: Sequence[str] = ("8.8.8.8", "8.8.4.4"),
    ):
        self._engine = engine
        self._services = services
        self._discovery = discovery
        self._events = events
        self._identity = identity
        self._executor = executor
        self._dns_servers = list(dns_servers)
        self._lock = Lock()

    # -------------------------
    # INSTALL
    # -------------------------

    def install(self, app: App, install_options: Optional[Dict[str, Any]] = None) -> None:
        """
        Create containers for every component and record their identities.

        Raises:
            ServicesNotReadyError: If core services are down
            HookVetoError: If a global hook fails
            ComponentOperationError: First component failure in the batch
        """
        logger.info(f"[lifecycle] installing {app.name}")
        self._services.verify()
        self._events.emit(pre_event(Phase.INSTALL), app)

        self._discovery.register_app_dir(app.config.app_root)

        errors = self._run(app, Phase.INSTALL, lambda c: self._install_component(app, c, install_options))
        if errors:
            raise errors[0]

        self._events.emit(post_event(Phase.INSTALL), app)
        logger.info(f"[lifecycle] ✅ installed {app.name}")

    def install_options(
        self,
        app: App,
        component: Component,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        opts: Dict[str, Any] = {
            "Hostname": component.hostname,
            "name": component.container_name,
            "Image": component.image.name,
            "Dns": list(self._dns_servers),
            # Docker only takes host config at create time
            "HostConfig": self.start_options(app, component),
        }
        if DATA_COMPONENT in app.components and not component.is_data:
            opts["HostConfig"]["VolumesFrom"] = [component.data_container_name]

        _merge_options(opts, component.install_options)
        if overrides:
            _merge_options(opts, overrides)
        return opts

    def _install_component(
        self,
        app: App,
        component: Component,
        overrides: Optional[Dict[str, Any]],
    ) -> None:
        context = ComponentContext(
            app=app,
            component=component,
            phase=Phase.INSTALL,
            options=self.install_options(app, component, overrides),
        )
        self._events.emit(pre_component_event(Phase.INSTALL), context)

        # Builds from source when buildable, otherwise makes the named image available
        self._engine.build(component.image)

        container = self._engine.create(context.options)
        self._identity.write(component.container_id_file, container.id)
        context.component = self._replace_component(app, replace(component, container_id=container.id))

        logger.debug(f"[lifecycle] {app.name}/{component.name} -> {container.id[:12]}")
        self._events.emit(post_component_event(Phase.INSTALL), context)

    # -------------------------
    # START
    # -------------------------

    def start(
        self,
        app: App,
        start_options: Optional[Dict[str, Any]] = None,
    ) -> List[ComponentOperationError]:
        """
        Start every component's container.

        Returns:
            Every component failure (empty on success)

        Raises:
            ServicesNotReadyError: If core services are down
            HookVetoError: If a global hook fails
        """
        logger.info(f"[lifecycle] starting {app.name}")
        self._services.verify()
        self._events.emit(pre_event(Phase.START), app)

        errors = self._run(app, Phase.START, lambda c: self._start_component(app, c, start_options))

        self._events.emit(post_event(Phase.START), app)
        self._log_outcome(app, Phase.START, errors)
        return errors

    def start_options(
        self,
        app: App,
        component: Component,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        opts: Dict[str, Any] = {
            "PublishAllPorts": True,
            "Binds": [f"{app.root_bind}:{SRC_MOUNT}:rw"],
        }
        opts.update(copy.deepcopy(component.start_options))
        if overrides:
            opts.update(copy.deepcopy(overrides))
        return opts

    def _start_component(
        self,
        app: App,
        component: Component,
        overrides: Optional[Dict[str, Any]],
    ) -> None:
        context = ComponentContext(
            app=app,
            component=component,
            phase=Phase.START,
            options=self.start_options(app, component, overrides),
        )
        self._events.emit(pre_component_event(Phase.START), context)

        self._engine.start(self._require_container(component, Phase.START), context.options)

        self._events.emit(post_component_event(Phase.START), context)

    # -------------------------
    # STOP
    # -------------------------

    def stop(self, app: App) -> List[ComponentOperationError]:
        """
        Stop every component's container.

        Returns:
            Every component failure (empty on success)
        """
        logger.info(f"[lifecycle] stopping {app.name}")
        self._services.verify()
        self._events.emit(pre_event(Phase.STOP), app)

        errors = self._run(app, Phase.STOP, lambda c: self._stop_component(app, c))

        self._events.emit(post_event(Phase.STOP), app)
        self._log_outcome(app, Phase.STOP, errors)
        return errors

    def _stop_component(self, app: App, component: Component) -> None:
        context = ComponentContext(app=app, component=component, phase=Phase.STOP)
        self._events.emit(pre_component_event(Phase.STOP), context)

        self._engine.stop(self._require_container(component, Phase.STOP))

        self._events.emit(post_component_event(Phase.STOP), context)

    def restart(
        self,
        app: App,
        start_options: Optional[Dict[str, Any]] = None,
    ) -> List[ComponentOperationError]:
        """Stop then start. Stop failures are returned without starting."""
        errors = self.stop(app)
        if errors:
            return errors
        return self.start(app, start_options)

    # -------------------------
    # UNINSTALL
    # -------------------------

    def uninstall(self, app: App) -> None:
        """
        Remove every component's container and its identity record.

        Raises:
            HookVetoError: If a global hook fails
            ComponentOperationError: First component failure in the batch
        """
        logger.info(f"[lifecycle] uninstalling {app.name}")
        self._events.emit(pre_event(Phase.UNINSTALL), app)

        errors = self._run(app, Phase.UNINSTALL, lambda c: self._uninstall_component(app, c))
        if errors:
            raise errors[0]

        self._events.emit(post_event(Phase.UNINSTALL), app)
        logger.info(f"[lifecycle] ✅ uninstalled {app.name}")

    def _uninstall_component(self, app: App, component: Component) -> None:
        context = ComponentContext(app=app, component=component, phase=Phase.UNINSTALL)
        self._events.emit(pre_component_event(Phase.UNINSTALL), context)

        if component.container_id:
            self._engine.remove(component.container_id)
        else:
            logger.debug(f"[lifecycle] {app.name}/{component.name} has no container to remove")

        self._identity.delete(component.container_id_file)
        context.component = self._replace_component(app, replace(component, container_id=None))

        self._events.emit(post_component_event(Phase.UNINSTALL), context)

    # -------------------------
    # REBUILD
    # -------------------------

    def rebuild(self, app: App) -> None:
        """
        Stop, uninstall and reinstall every component, data included.

        Raises:
            ComponentOperationError: First failure of whichever step failed
        """
        logger.info(f"[lifecycle] rebuilding {app.name}")

        errors = self.stop(app)
        if errors:
            raise errors[0]

        self.uninstall(app)
        self.install(app)

    # -------------------------
    # HELPERS
    # -------------------------

    def _run(
        self,
        app: App,
        phase: Phase,
        operation: Callable[[Component], None],
    ) -> List[ComponentOperationError]:
        return self._executor.run(get_components(app), operation, phase.value)

    def _replace_component(self, app: App, component: Component) -> Component:
        with self._lock:
            app.components[component.name] = component
        return component

    def _require_container(self, component: Component, phase: Phase) -> str:
        if not component.container_id:
            raise ComponentOperationError(
                component.name,
                phase.value,
                EngineError(f"No container recorded in {component.container_id_file}"),
            )
        return component.container_id

    def _log_outcome(self, app: App, phase: Phase, errors: List[ComponentOperationError]) -> None:
        if errors:
            for error in errors:
                logger.error(f"[lifecycle] {app.name}: {error}")
        else:
            logger.info(f"[lifecycle] ✅ {phase.value} {app.name} done")
