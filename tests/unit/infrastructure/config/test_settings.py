import logging
from pathlib import Path

import pytest

from pagedrain.infrastructure.config import settings
from pagedrain.infrastructure.config.settings import (
    get_batch_size, get_config, get_max_concurrent_batches, get_redis_url, get_retry_base_delay,
    load_configuration, set_config, set_config_for_testing
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch):
    """Start every test from an empty YAML store and no PAGEDRAIN_* variables."""
    monkeypatch.chdir(tmp_path)
    for key in ("PAGEDRAIN_BATCH_SIZE", "PAGEDRAIN_BATCH_MAX_CONCURRENT", "PAGEDRAIN_REDIS_URL"):
        monkeypatch.delenv(key, raising=False)
    load_configuration(config_file=tmp_path / "missing.yaml", force=True)
    yield
    load_configuration(config_file=tmp_path / "missing.yaml", force=True)


def test_defaults_when_nothing_configured():
    assert get_batch_size() == 1000
    assert get_max_concurrent_batches() == 3
    assert get_retry_base_delay() == 0.5
    assert get_redis_url() == "redis://localhost:6379/0"

def test_yaml_nested_keys_are_flattened(tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("batch:\n  size: 250\n  max_concurrent: 5\nredis:\n  url: redis://cache:6379/1\n")

    load_configuration(config_file=config_file, force=True)

    assert get_batch_size() == 250
    assert get_max_concurrent_batches() == 5
    assert get_redis_url() == "redis://cache:6379/1"

def test_environment_overrides_yaml_and_is_coerced(tmp_path: Path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("batch:\n  size: 250\n")
    load_configuration(config_file=config_file, force=True)

    monkeypatch.setenv("PAGEDRAIN_BATCH_SIZE", "64")

    assert get_config("batch.size") == 64

def test_test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("PAGEDRAIN_BATCH_SIZE", "64")
    set_config_for_testing({"batch.size": 7})

    assert get_batch_size() == 7

def test_dotenv_file_is_loaded_without_overriding_environment(tmp_path: Path, monkeypatch):
    (tmp_path / ".env").write_text("PAGEDRAIN_REDIS_URL=redis://from-dotenv:6379/0\nPAGEDRAIN_BATCH_SIZE=11\n")
    monkeypatch.setenv("PAGEDRAIN_BATCH_SIZE", "22")
    # load_dotenv writes into os.environ; let monkeypatch restore it
    monkeypatch.setenv("PAGEDRAIN_REDIS_URL", "placeholder")
    monkeypatch.delenv("PAGEDRAIN_REDIS_URL")

    load_configuration(config_file=tmp_path / "missing.yaml", force=True)

    assert get_redis_url() == "redis://from-dotenv:6379/0"
    assert get_batch_size() == 22

def test_invalid_number_falls_back_to_default(caplog):
    set_config_for_testing({"batch.size": "lots"})

    with caplog.at_level(logging.WARNING, logger=settings.__name__):
        assert get_batch_size() == 1000

    assert "Invalid integer for 'batch.size'" in caplog.text

def test_set_config_updates_value_and_environment(monkeypatch):
    monkeypatch.setenv("PAGEDRAIN_LOGGING_LEVEL", "INFO")

    set_config("logging.level", "DEBUG")

    assert get_config("logging.level") == "DEBUG"
    assert settings.env_var_name("logging.level") == "PAGEDRAIN_LOGGING_LEVEL"
