"""Tests for core/config.py — ServiceConfig and ServiceConfig.from_env."""
from __future__ import annotations

from pathlib import Path

import pytest

from container_service.core.config import ServiceConfig
from container_service.core.exceptions import ConfigurationError

_ENV_VARS = (
    "CLONE_BASE_DIR",
    "CONTAINER_SERVICE_HOST",
    "CONTAINER_SERVICE_PORT",
    "CONTAINER_SERVICE_METRICS_HOST",
    "CONTAINER_SERVICE_METRICS_PORT",
    "CONTAINER_SERVICE_DOCKER_TIMEOUT",
    "CONTAINER_SERVICE_LOG_LEVEL",
    "CONTAINER_SERVICE_LOG_JSON",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_defaults() -> None:
    config = ServiceConfig()
    assert config.clone_base_dir == Path("/temp")
    assert config.port == 8080
    assert config.metrics_port == 2112
    assert config.docker_timeout is None
    assert config.log_level == "INFO"
    assert config.log_json is True


def test_from_env_without_variables_matches_defaults() -> None:
    assert ServiceConfig.from_env() == ServiceConfig()


def test_clone_path_is_absolute() -> None:
    config = ServiceConfig(clone_base_dir=Path("relative"))
    path = config.clone_path("octo", "hello")
    assert path.is_absolute()
    assert path.parts[-3:] == ("relative", "octo", "hello")


def test_clone_path_default_base() -> None:
    assert ServiceConfig().clone_path("octo", "hello") == Path("/temp/octo/hello")


# ---------------------------------------------------------------------------
# from_env
# ---------------------------------------------------------------------------


def test_from_env_reads_every_variable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CLONE_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("CONTAINER_SERVICE_HOST", "127.0.0.1")
    monkeypatch.setenv("CONTAINER_SERVICE_PORT", "9000")
    monkeypatch.setenv("CONTAINER_SERVICE_METRICS_HOST", "127.0.0.2")
    monkeypatch.setenv("CONTAINER_SERVICE_METRICS_PORT", "9100")
    monkeypatch.setenv("CONTAINER_SERVICE_DOCKER_TIMEOUT", "120")
    monkeypatch.setenv("CONTAINER_SERVICE_LOG_LEVEL", "debug")
    monkeypatch.setenv("CONTAINER_SERVICE_LOG_JSON", "false")

    config = ServiceConfig.from_env()

    assert config.clone_base_dir == tmp_path
    assert config.host == "127.0.0.1"
    assert config.port == 9000
    assert config.metrics_host == "127.0.0.2"
    assert config.metrics_port == 9100
    assert config.docker_timeout == 120
    assert config.log_level == "DEBUG"
    assert config.log_json is False


def test_from_env_empty_values_keep_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_PORT", "")
    monkeypatch.setenv("CLONE_BASE_DIR", "")
    config = ServiceConfig.from_env()
    assert config.port == 8080
    assert config.clone_base_dir == Path("/temp")


@pytest.mark.parametrize("value", ["1", "TRUE", "yes", "on"])
def test_from_env_truthy_log_json(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_LOG_JSON", value)
    assert ServiceConfig.from_env().log_json is True


def test_from_env_non_integer_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_PORT", "eighty")
    with pytest.raises(ConfigurationError) as exc_info:
        ServiceConfig.from_env()
    assert exc_info.value.code == "INVALID_ENV"
    assert exc_info.value.details == {"variable": "CONTAINER_SERVICE_PORT"}


def test_from_env_port_out_of_range(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_METRICS_PORT", "70000")
    with pytest.raises(ConfigurationError):
        ServiceConfig.from_env()


def test_from_env_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_LOG_LEVEL", "verbose")
    with pytest.raises(ConfigurationError):
        ServiceConfig.from_env()


def test_from_env_invalid_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTAINER_SERVICE_LOG_JSON", "maybe")
    with pytest.raises(ConfigurationError) as exc_info:
        ServiceConfig.from_env()
    assert exc_info.value.details == {"variable": "CONTAINER_SERVICE_LOG_JSON"}
