"""Unit tests for configuration loading and the orchestrator factory."""

from __future__ import annotations

import uuid

import pytest

from facescanner.config import Config
from facescanner.engine import EngineState
from facescanner.errors import EngineInitError
from facescanner.factory import create_orchestrator, load_engine_factory, read_payloads


@pytest.fixture
def config(tmp_path):
    """Config pointing at payload files in a temp directory."""
    (tmp_path / "configure.txt").write_bytes(b"config")
    (tmp_path / "model.dat").write_bytes(b"model")
    (tmp_path / "visitor.db").write_bytes(b"database")
    work_dir = tmp_path / "work"
    work_dir.mkdir()

    return Config(
        engine_factory="",
        engine_config_path=tmp_path / "configure.txt",
        engine_model_path=tmp_path / "model.dat",
        face_db_path=tmp_path / "visitor.db",
        temp_dir=work_dir,
        log_level="INFO",
    )


def test_read_payloads(config):
    payloads = read_payloads(config)

    assert payloads.config_data == b"config"
    assert payloads.model_data == b"model"
    assert payloads.db_data == b"database"


def test_read_payloads_missing_file(config, tmp_path):
    config.engine_model_path = tmp_path / "missing.dat"

    with pytest.raises(EngineInitError):
        read_payloads(config)


def test_load_engine_factory():
    assert load_engine_factory("uuid:uuid4") is uuid.uuid4


@pytest.mark.parametrize("spec", ["uuid", ":uuid4", "uuid:", ""])
def test_load_engine_factory_bad_spec(spec):
    with pytest.raises(EngineInitError):
        load_engine_factory(spec)


def test_load_engine_factory_missing_module():
    with pytest.raises(EngineInitError):
        load_engine_factory("no_such_engine_module_xyz:create")


def test_load_engine_factory_not_callable():
    with pytest.raises(EngineInitError):
        load_engine_factory("uuid:NAMESPACE_DNS")


def test_create_orchestrator(config, engine):
    orchestrator = create_orchestrator(config, engine_factory=lambda: engine)
    try:
        assert orchestrator.state is EngineState.READY
        assert orchestrator.lifecycle.database_path.parent == config.temp_dir
        assert orchestrator.lifecycle.database_path.read_bytes() == b"database"
    finally:
        orchestrator.teardown()

    assert engine.released == 1


def test_create_orchestrator_without_engine(config):
    with pytest.raises(EngineInitError):
        create_orchestrator(config)


def test_create_orchestrator_init_failure_tears_down(config, engine):
    engine.db_status = 1

    with pytest.raises(EngineInitError):
        create_orchestrator(config, engine_factory=lambda: engine)

    assert engine.uninitialized == 1
    assert engine.released == 1
    assert list(config.temp_dir.iterdir()) == []


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ENGINE_FACTORY", "my_engine.binding:get_instance")
    monkeypatch.setenv("ENGINE_MODEL_PATH", str(tmp_path / "model.dat"))
    monkeypatch.setenv("TEMP_DIR", str(tmp_path / "scratch"))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.engine_factory == "my_engine.binding:get_instance"
    assert config.engine_model_path == tmp_path / "model.dat"
    assert config.temp_dir.is_dir()
    assert config.log_level == "DEBUG"


def test_config_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(ValueError):
        Config.from_env()


def test_config_invalid_engine_factory(monkeypatch):
    monkeypatch.setenv("ENGINE_FACTORY", "no_colon_here")

    with pytest.raises(ValueError):
        Config.from_env()


def test_config_temp_dir_is_file(monkeypatch, tmp_path):
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x")
    monkeypatch.setenv("TEMP_DIR", str(not_a_dir))

    with pytest.raises(ValueError):
        Config.from_env()
