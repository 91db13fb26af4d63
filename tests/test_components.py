#tests\test_components.py

"""Test component descriptor building and app assembly."""

import os

import pytest

from appbox.app.components import get_components, search_for_path
from appbox.core.errors import AppValidationError
from appbox.core.models import DATA_COMPONENT

from conftest import write_app


class TestComponentBuilder:
    """Test resolved component fields."""

    def test_derived_fields(self, drupal_app):
        """Test hostname, url and container naming."""
        web = drupal_app.components["web"]

        assert web.name == "web"
        assert web.hostname == "web.drupal.kbox"
        assert web.url == "http://web.drupal.kbox"
        assert web.app_domain == "drupal.kbox"
        assert web.container_name == "kb_drupal_web"
        assert web.data_container_name == drupal_app.data_container_name
        assert web.container_id_file == os.path.join(drupal_app.config.app_cids_root, "web")
        assert web.container_id is None

    def test_missing_dockerfile_clears_build_flag(self, drupal_app):
        """Test build is downgraded when no search root has a Dockerfile."""
        web = drupal_app.components["web"]

        assert web.image.build is False
        assert web.buildable is False
        assert web.image.name == "kalabox/nginx"

    def test_dockerfile_in_app_root_wins(self, drupal_dir, settings, load_app):
        """Test first match wins between app root and src root."""
        for root in (drupal_dir, settings.resolved_src_root):
            dockerfile_dir = os.path.join(str(root), "dockerfiles", "nginx")
            os.makedirs(dockerfile_dir)
            with open(os.path.join(dockerfile_dir, "Dockerfile"), "w") as f:
                f.write("FROM nginx\n")

        app = load_app("drupal", drupal_dir)
        web = app.components["web"]

        assert web.image.build is True
        assert web.image.src_root == os.path.join(str(drupal_dir.resolve()), "dockerfiles", "nginx")

    def test_dockerfile_in_src_root(self, drupal_dir, settings, load_app):
        """Test the src root is searched when the app root has nothing."""
        dockerfile_dir = os.path.join(settings.resolved_src_root, "dockerfiles", "nginx")
        os.makedirs(dockerfile_dir)
        open(os.path.join(dockerfile_dir, "Dockerfile"), "w").close()

        web = load_app("drupal", drupal_dir).components["web"]

        assert web.image.build is True
        assert web.image.src_root == dockerfile_dir

    def test_recovers_recorded_container_id(self, drupal_dir, drupal_app, load_app):
        """Test a recorded identity is picked up on the next assembly."""
        with open(drupal_app.components["db"].container_id_file, "w") as f:
            f.write("abc123\n")

        app = load_app("drupal", drupal_dir)

        assert app.components["db"].container_id == "abc123"
        assert app.components["web"].container_id is None

    def test_extra_spec_fields_preserved(self, tmp_path, load_app):
        """Test unknown spec fields are carried without aliasing."""
        app_dir = write_app(tmp_path / "apps" / "solr", {
            "appName": "solr",
            "appComponents": {
                "index": {"image": {"name": "kalabox/solr"}, "proxy": [{"port": "8983/tcp"}]},
            },
        })

        app = load_app("solr", app_dir)
        index = app.components["index"]

        assert index.spec == {"proxy": [{"port": "8983/tcp"}]}
        index.spec["proxy"].append("x")
        assert app.config.app_components["index"].model_extra["proxy"] == [{"port": "8983/tcp"}]


class TestAppAssembler:
    """Test app level fields."""

    def test_app_fields(self, drupal_app, drupal_dir, settings):
        """Test domain, url, binds and injected code root."""
        root = str(drupal_dir.resolve())

        assert drupal_app.name == "drupal"
        assert drupal_app.domain == "drupal.kbox"
        assert drupal_app.url == "http://drupal.kbox"
        assert drupal_app.data_container_name == "kb_drupal_data"
        assert drupal_app.root == root
        assert drupal_app.root_bind == root
        assert drupal_app.config.code_root == os.path.join(root, "code")
        assert drupal_app.config.home_bind == settings.home

    def test_config_is_not_mutated(self, config_loader, assembler, drupal_dir):
        """Test assembly works on a copy of the config."""
        config = config_loader.get_app_config("drupal", str(drupal_dir))

        app = assembler.assemble("drupal", config)

        assert config.code_root is None
        assert app.config.code_root is not None

    def test_creates_identity_root(self, drupal_app):
        assert os.path.isdir(drupal_app.config.app_cids_root)

    def test_assembly_is_idempotent(self, drupal_dir, load_app):
        first = load_app("drupal", drupal_dir)
        second = load_app("drupal", drupal_dir)

        assert first.components.keys() == second.components.keys()

    def test_data_entry_is_placeholder(self, drupal_app):
        """Test the data entry keeps its raw spec."""
        data = drupal_app.components[DATA_COMPONENT]

        assert data.placeholder is True
        assert data.container_name == drupal_app.data_container_name
        assert data.image.name == "kalabox/data"
        assert data.hostname == "data.drupal.kbox"
        assert data.url == "http://data.drupal.kbox"
        assert drupal_app.components["web"].placeholder is False

    def test_component_name_shadowing_container_name(self, tmp_path, load_app):
        """Test a component named like another's container is rejected."""
        app_dir = write_app(tmp_path / "apps" / "x", {
            "appName": "x",
            "appComponents": {
                "web": {"image": {"name": "nginx"}},
                "kb_x_web": {"image": {"name": "nginx"}},
            },
        })

        with pytest.raises(AppValidationError):
            load_app("x", app_dir)

    def test_invalid_config_rejected(self, assembler):
        with pytest.raises(AppValidationError):
            assembler.assemble("drupal", {"domain": "kbox"})


class TestGetComponents:
    """Test batch ordering."""

    def test_data_component_first(self, drupal_app):
        components = get_components(drupal_app)

        assert components[0].name == DATA_COMPONENT
        assert len(components) == len(drupal_app.components)

    def test_without_data_component(self, tmp_path, load_app):
        app_dir = write_app(tmp_path / "apps" / "static", {
            "appName": "static",
            "appComponents": {"web": {"image": {"name": "nginx"}}},
        })

        components = get_components(load_app("static", app_dir))

        assert [c.name for c in components] == ["web"]


class TestSearchForPath:

    def test_first_existing_wins(self, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        second.touch()
        first.touch()

        assert search_for_path([str(tmp_path / "missing"), str(first), str(second)]) == str(first)

    def test_none_when_nothing_exists(self, tmp_path):
        assert search_for_path([str(tmp_path / "missing")]) is None
