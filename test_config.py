"""Unit tests for environment-based configuration loading."""

import pytest

import config
from open_weather_map import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_SECONDS


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    # setenv first so teardown also removes values loaded from .env files
    for name in (config.API_KEY_ENV_VAR, config.MAX_RETRIES_ENV_VAR, config.TIMEOUT_SECONDS_ENV_VAR):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults_without_environment():
    """Without variables the config has an empty key and the default budget."""
    fetch_config = config.load_fetch_config()

    assert fetch_config.api_key == ""
    assert fetch_config.max_retries == DEFAULT_MAX_RETRIES
    assert fetch_config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


def test_overrides_from_environment(monkeypatch):
    monkeypatch.setenv(config.API_KEY_ENV_VAR, "abc123")
    monkeypatch.setenv(config.MAX_RETRIES_ENV_VAR, "5")
    monkeypatch.setenv(config.TIMEOUT_SECONDS_ENV_VAR, "2.5")

    fetch_config = config.load_fetch_config()

    assert fetch_config.api_key == "abc123"
    assert fetch_config.max_retries == 5
    assert fetch_config.timeout_seconds == 2.5


def test_explicit_max_retries_wins(monkeypatch):
    monkeypatch.setenv(config.MAX_RETRIES_ENV_VAR, "5")

    assert config.load_fetch_config(max_retries=1).max_retries == 1


@pytest.mark.parametrize("name, value", [
    (config.MAX_RETRIES_ENV_VAR, "three"),
    (config.MAX_RETRIES_ENV_VAR, "0"),
    (config.TIMEOUT_SECONDS_ENV_VAR, "soon"),
])
def test_invalid_overrides_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError) as exc_info:
        config.load_fetch_config()

    if value != "0":
        assert isinstance(exc_info.value.__cause__, ValueError)


def test_load_env_file_does_not_override(tmp_path, monkeypatch):
    """Values from a .env file fill gaps but never replace the real environment."""
    env_file = tmp_path / ".env"
    env_file.write_text(f"{config.API_KEY_ENV_VAR}=from-file\n{config.MAX_RETRIES_ENV_VAR}=4\n",
                        encoding="utf-8")
    monkeypatch.setenv(config.MAX_RETRIES_ENV_VAR, "2")

    assert config.load_env_file(env_file) is True
    assert config.get_api_key() == "from-file"
    assert config.load_fetch_config().max_retries == 2


def test_load_env_file_missing(tmp_path):
    assert config.load_env_file(tmp_path / "absent.env") is False
