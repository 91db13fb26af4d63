#tests\test_config.py

"""Test settings and app config loading."""

import os

import pytest

from appbox.config.settings import AppboxSettings
from appbox.core.errors import ConfigError

from conftest import write_app


class TestAppboxSettings:

    def test_defaults(self, tmp_path):
        settings = AppboxSettings(home=str(tmp_path))

        assert settings.domain == "kbox"
        assert settings.dns_servers == ["8.8.8.8", "8.8.4.4"]
        assert settings.engine == "docker"
        assert settings.resolved_sys_conf_root == os.path.join(str(tmp_path), ".appbox")
        assert settings.resolved_src_root == settings.resolved_sys_conf_root
        assert settings.app_registry_path == os.path.join(str(tmp_path), ".appbox", "appRegistry.json")

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("APPBOX_DOMAIN", "dev")
        monkeypatch.setenv("APPBOX_ENGINE", "agent")
        monkeypatch.setenv("APPBOX_CORE_SERVICES", '["kalabox_skydns"]')

        settings = AppboxSettings(home=str(tmp_path))

        assert settings.domain == "dev"
        assert settings.engine == "agent"
        assert settings.core_services == ["kalabox_skydns"]

    def test_app_cids_root(self, tmp_path):
        settings = AppboxSettings(home=str(tmp_path))

        assert settings.app_cids_root("drupal") == os.path.join(str(tmp_path), ".appbox", "appcids", "drupal")


class TestAppConfigLoader:

    def test_defaults_filled_in(self, config_loader, settings, drupal_dir):
        config = config_loader.get_app_config("drupal", str(drupal_dir))

        assert config.app_name == "drupal"
        assert config.domain == "kbox"
        assert config.home == settings.home
        assert config.app_root == str(drupal_dir.resolve())
        assert config.app_cids_root == settings.app_cids_root("drupal")
        assert config.src_root == settings.resolved_src_root
        assert config.app_plugins == []
        assert sorted(config.app_components) == ["data", "db", "web"]

    def test_camel_case_fields(self, config_loader, tmp_path):
        app_dir = write_app(tmp_path / "apps" / "solr", {
            "appName": "solr",
            "appPlugins": ["appbox_plugin_solr"],
            "appCidsRoot": str(tmp_path / "cids"),
            "appComponents": {
                "index": {
                    "image": {"name": "kalabox/solr", "build": True, "srcRoot": "solr"},
                    "installOptions": {"Env": ["A=1"]},
                    "startOptions": {"Privileged": True},
                },
            },
        })

        config = config_loader.get_app_config("solr", str(app_dir))
        index = config.app_components["index"]

        assert config.app_plugins == ["appbox_plugin_solr"]
        assert config.app_cids_root == str(tmp_path / "cids")
        assert index.image.build is True
        assert index.image.src_root == "solr"
        assert index.install_options == {"Env": ["A=1"]}
        assert index.start_options == {"Privileged": True}

    def test_read_app_name(self, config_loader, drupal_dir):
        assert config_loader.read_app_name(str(drupal_dir)) == "drupal"

    def test_missing_file(self, config_loader, tmp_path):
        with pytest.raises(ConfigError):
            config_loader.get_app_config("ghost", str(tmp_path))

    def test_invalid_json(self, config_loader, tmp_path):
        (tmp_path / "appbox.json").write_text("{not json")

        with pytest.raises(ConfigError):
            config_loader.read_raw(str(tmp_path))

    def test_invalid_schema(self, config_loader, tmp_path):
        app_dir = write_app(tmp_path / "bad", {"appName": "bad", "appComponents": ["web"]})

        with pytest.raises(ConfigError):
            config_loader.get_app_config("bad", str(app_dir))

    def test_missing_app_name(self, config_loader, tmp_path):
        app_dir = write_app(tmp_path / "nameless", {"appComponents": {}})

        with pytest.raises(ConfigError):
            config_loader.read_app_name(str(app_dir))
