"""Tests for the saved profile store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from absurdpg import config as config_module
from absurdpg.config import ConfigIOError, ConfigStore, ConnectionProfileConfig
from absurdpg.models import ConnectionParameters


def _profiles() -> list[ConnectionProfileConfig]:
    return [
        ConnectionProfileConfig(
            name="Local",
            host="localhost",
            port="5432",
            user="postgres",
            password="secret",
            dbname="postgres",
        ),
        ConnectionProfileConfig(name="Replica", host="replica.internal", port="6432", dbname="analytics"),
    ]


def test_load_returns_empty_list_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "configs.json")

    assert ConfigStore().load() == []


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "nested" / "configs.json")

    store.save(_profiles())
    loaded = store.load()

    assert loaded == _profiles()


def test_rewriting_loaded_profiles_preserves_meaning(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "configs.json")
    store.save(_profiles())
    before = json.loads(store.path.read_text())

    store.save(store.load())

    assert json.loads(store.path.read_text()) == before


def test_store_uses_original_json_keys(tmp_path: Path) -> None:
    path = tmp_path / "configs.json"
    path.write_text(
        json.dumps(
            [{"name": "Legacy", "host": "h", "port": "1", "user": "u", "password": "p", "dbname": "d"}]
        )
    )

    (profile,) = ConfigStore(path).load()

    assert profile.to_parameters() == ConnectionParameters(host="h", port="1", user="u", password="p", database="d")


def test_corrupt_store_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "configs.json"
    path.write_text("[{not json")

    with pytest.raises(ConfigIOError):
        ConfigStore(path).load()


def test_wrong_shape_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "configs.json"
    path.write_text(json.dumps({"name": "not a list"}))

    with pytest.raises(ConfigIOError):
        ConfigStore(path).load()


def test_unreadable_store_raises_config_error(tmp_path: Path) -> None:
    # A directory in place of the file cannot be read.
    path = tmp_path / "configs.json"
    path.mkdir()

    with pytest.raises(ConfigIOError):
        ConfigStore(path).load()


def test_unwritable_store_raises_config_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    with pytest.raises(ConfigIOError):
        ConfigStore(blocker / "configs.json").save(_profiles())


def test_upsert_replaces_by_name_and_appends(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "configs.json")
    store.save(_profiles())

    store.upsert(ConnectionProfileConfig(name="Local", host="127.0.0.1"))
    profiles = store.upsert(ConnectionProfileConfig(name="New", host="new.host"))

    assert [profile.name for profile in profiles] == ["Local", "Replica", "New"]
    assert store.load()[0].host == "127.0.0.1"
