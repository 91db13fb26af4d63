"""App assembler - builds the in-memory App from its resolved config."""

import logging
import os
from collections import Counter

from appbox.app.components import ComponentBuilder, container_name
from appbox.app.identity import IdentityStore
from appbox.config.models import AppConfig
from appbox.core.errors import AppValidationError
from appbox.core.models import App, DATA_COMPONENT
from appbox.engine.engine import Engine

logger = logging.getLogger(__name__)


class AppAssembler:
    """
    Assembles App entities.

    Flow:
    1. Derive domain, url, data container name and root binds
    2. Inject code_root into a copy of the config
    3. Ensure the identity root exists
    4. Resolve every component (the data entry is kept as a placeholder)
    """

    def __init__(self, engine: Engine, identity: IdentityStore, builder: ComponentBuilder):
        self._engine = engine
        self._identity = identity
        self._builder = builder

    def assemble(self, name: str, config: AppConfig) -> App:
        if not name:
            raise AppValidationError("App name is required")
        if not isinstance(config, AppConfig):
            raise AppValidationError(f"Invalid app config: {config!r}")

        domain = ".".join([name, config.domain])
        root = config.app_root

        config = config.model_copy(update={
            "home_bind": self._engine.path_to_bind(config.home),
            "code_root": os.path.join(root, config.code_dir),
        })

        app = App(
            name=name,
            domain=domain,
            url=f"http://{domain}",
            data_container_name=container_name(name, DATA_COMPONENT),
            root=root,
            root_bind=self._engine.path_to_bind(root),
            config=config,
            plugins=list(config.app_plugins),
        )

        self._identity.ensure_root(config.app_cids_root)

        for key, spec in config.app_components.items():
            if key == DATA_COMPONENT:
                app.components[key] = self._builder.build_placeholder(app, spec)
            else:
                app.components[key] = self._builder.build(app, key, spec)

        self._check_names(app)

        logger.debug(f"[assembler] assembled {name} with components {sorted(app.components)}")
        return app

    def _check_names(self, app: App) -> None:
        """Container names must be unique and must not shadow component names."""
        counts = Counter(c.container_name for c in app.components.values())
        duplicated = [n for n, count in counts.items() if count > 1]
        if duplicated:
            raise AppValidationError(
                f"App [{app.name}] has colliding container names: {', '.join(sorted(duplicated))}"
            )

        for component in app.components.values():
            for other in app.components.values():
                if other is not component and component.name == other.container_name:
                    raise AppValidationError(
                        f"App [{app.name}] component [{component.name}] collides "
                        f"with container name of [{other.name}]"
                    )
