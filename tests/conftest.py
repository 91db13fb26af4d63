#tests\conftest.py

"""Pytest configuration and fixtures."""

import json
from itertools import count
from threading import Lock

import pytest

from appbox.app.assembler import AppAssembler
from appbox.app.components import ComponentBuilder
from appbox.app.identity import IdentityStore
from appbox.config.loader import AppConfigLoader
from appbox.config.settings import AppboxSettings
from appbox.core.errors import AppNotFoundError, EngineError, ServicesNotReadyError
from appbox.core.events import RecordingEventBus
from appbox.core.models import ContainerRef
from appbox.discovery.discovery import AppDiscovery
from appbox.engine.engine import Engine
from appbox.executor.batch import ComponentBatchExecutor
from appbox.orchestrator.lifecycle import AppLifecycle


# -------------------------
# FAKE COLLABORATORS
# -------------------------

class FakeEngine(Engine):
    """In-memory engine recording every call."""

    def __init__(self):
        self.calls = []
        self.containers = {}
        self.fail = {}
        self._ids = count(1)
        self._lock = Lock()

    def fail_on(self, action, key, message="boom"):
        """Fail ``action`` for a container name (create) or id (others)."""
        self.fail[(action, key)] = message

    def _check(self, action, key):
        if (action, key) in self.fail:
            raise EngineError(f"{action} {key}: {self.fail[(action, key)]}")

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def build(self, image):
        self._record("build", image.name, image.build)
        self._check("build", image.name)

    def create(self, options):
        self._record("create", options["name"])
        self._check("create", options["name"])
        with self._lock:
            container_id = f"cid-{options['name']}-{next(self._ids)}"
            self.containers[container_id] = dict(options)
        return ContainerRef(id=container_id, name=options["name"])

    def start(self, container_id, options):
        self._record("start", container_id, dict(options))
        self._check("start", container_id)

    def stop(self, container_id):
        self._record("stop", container_id)
        self._check("stop", container_id)

    def remove(self, container_id):
        self._record("remove", container_id)
        self._check("remove", container_id)
        with self._lock:
            self.containers.pop(container_id, None)

    def actions(self, action):
        return [call for call in self.calls if call[0] == action]


class FakeReadiness:

    def __init__(self):
        self.ready = True
        self.checks = 0

    def verify(self):
        self.checks += 1
        if not self.ready:
            raise ServicesNotReadyError("core services down")


class FakeDiscovery(AppDiscovery):

    def __init__(self):
        self.dirs = {}
        self.names = []
        self.registered = []

    def add(self, name, app_dir):
        self.names.append(name)
        self.dirs.setdefault(name, app_dir)

    def list(self):
        return list(self.names)

    def get_app_dir(self, app_name):
        if app_name not in self.dirs:
            raise AppNotFoundError(app_name)
        return self.dirs[app_name]

    def register_app_dir(self, app_dir):
        self.registered.append(app_dir)


# -------------------------
# FIXTURES
# -------------------------

DRUPAL_CONFIG = {
    "appName": "drupal",
    "appComponents": {
        "data": {"image": {"name": "kalabox/data"}},
        "web": {
            "image": {"name": "kalabox/nginx", "build": True, "srcRoot": "dockerfiles/nginx"},
        },
        "db": {"image": {"name": "kalabox/mariadb"}},
    },
}


def write_app(root, config):
    root.mkdir(parents=True, exist_ok=True)
    (root / "appbox.json").write_text(json.dumps(config), encoding="utf-8")
    return root


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary home."""
    return AppboxSettings(
        home=str(tmp_path / "home"),
        sys_conf_root=str(tmp_path / "home" / ".appbox"),
        src_root=str(tmp_path / "src"),
    )


@pytest.fixture
def config_loader(settings):
    return AppConfigLoader(settings)


@pytest.fixture
def identity():
    return IdentityStore()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def readiness():
    return FakeReadiness()


@pytest.fixture
def discovery():
    return FakeDiscovery()


@pytest.fixture
def events():
    return RecordingEventBus()


@pytest.fixture
def assembler(engine, identity):
    return AppAssembler(engine, identity, ComponentBuilder(identity))


@pytest.fixture
def drupal_dir(tmp_path):
    return write_app(tmp_path / "apps" / "drupal", DRUPAL_CONFIG)


@pytest.fixture
def load_app(config_loader, assembler):
    """Assemble an app freshly from disk, as every request does."""
    def _load(name, app_dir):
        return assembler.assemble(name, config_loader.get_app_config(name, str(app_dir)))
    return _load


@pytest.fixture
def drupal_app(load_app, drupal_dir):
    return load_app("drupal", drupal_dir)


@pytest.fixture
def lifecycle(engine, readiness, discovery, events, identity):
    return AppLifecycle(
        engine=engine,
        services=readiness,
        discovery=discovery,
        events=events,
        identity=identity,
        executor=ComponentBatchExecutor(max_workers=4),
    )
