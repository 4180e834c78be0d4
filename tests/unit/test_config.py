"""Tests for store settings resolution (cafe_kernel/config.py)."""

from datetime import timezone
from pathlib import Path

import pytest
import yaml

from cafe_kernel.config import (
    DEFAULT_DATABASE_URL,
    StoreSettings,
    load_store_settings,
    load_yaml_file,
)


def _write_yaml(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "store.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestStoreSettings:

    def test_defaults(self):
        settings = StoreSettings()
        assert settings.url == DEFAULT_DATABASE_URL
        assert settings.pool_size == 10
        assert settings.max_overflow == 0
        assert settings.max_connections == 10
        assert settings.pool_pre_ping is True
        assert settings.tzinfo is timezone.utc

    @pytest.mark.parametrize("overrides", [
        {"url": ""},
        {"pool_size": 0},
        {"max_overflow": -1},
        {"pool_timeout": 0},
        {"timezone": "Mars/Olympus_Mons"},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            StoreSettings(**overrides)


class TestLoadStoreSettings:

    def test_no_file_no_env_gives_defaults(self):
        assert load_store_settings(environ={}) == StoreSettings()

    def test_yaml_file(self, tmp_path):
        path = _write_yaml(tmp_path, {"store": {
            "url": "sqlite:///cafe.db",
            "pool_size": 3,
            "max_overflow": 2,
            "pool_timeout": 1.5,
            "echo": True,
        }})
        settings = load_store_settings(path, environ={})
        assert settings.url == "sqlite:///cafe.db"
        assert settings.pool_size == 3
        assert settings.max_connections == 5
        assert settings.pool_timeout == 1.5
        assert settings.echo is True

    def test_env_overrides_file(self, tmp_path):
        path = _write_yaml(tmp_path, {"store": {"pool_size": 3}})
        settings = load_store_settings(path, environ={
            "CAFE_POOL_SIZE": "7",
            "CAFE_DATABASE_URL": "postgresql://u:p@db/cafe",
            "CAFE_DB_ECHO": "yes",
        })
        assert settings.pool_size == 7
        assert settings.url == "postgresql://u:p@db/cafe"
        assert settings.echo is True

    def test_empty_env_value_ignored(self):
        assert load_store_settings(environ={"CAFE_POOL_SIZE": ""}).pool_size == 10

    @pytest.mark.parametrize("var, raw", [
        ("CAFE_POOL_SIZE", "ten"),
        ("CAFE_POOL_TIMEOUT", "soon"),
        ("CAFE_DB_ECHO", "maybe"),
        ("CAFE_POOL_SIZE", "0"),
        ("CAFE_TIMEZONE", "Mars/Olympus_Mons"),
    ])
    def test_invalid_env_value_raises(self, var, raw):
        with pytest.raises(ValueError):
            load_store_settings(environ={var: raw})

    def test_unknown_yaml_key_rejected(self, tmp_path):
        path = _write_yaml(tmp_path, {"store": {"pool_sise": 3}})
        with pytest.raises(ValueError, match="pool_sise"):
            load_store_settings(path, environ={})

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_store_settings(tmp_path / "absent.yaml", environ={})


class TestLoadYamlFile:

    def test_missing_store_section_is_empty(self, tmp_path):
        assert load_yaml_file(_write_yaml(tmp_path, {"other": 1})) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "store.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_yaml_file(path)
