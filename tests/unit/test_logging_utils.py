"""Tests for utils/logging.py — configure_logging and get_logger."""
from __future__ import annotations

import json
import logging

import pytest

from container_service.builder.renderer import StructlogSink
from container_service.utils.logging import configure_logging, get_logger


# ---------------------------------------------------------------------------
# configure_logging
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("level", "expected"),
    [("DEBUG", logging.DEBUG), ("info", logging.INFO), ("WARNING", logging.WARNING), ("ERROR", logging.ERROR)],
)
def test_configure_logging_sets_root_level(level: str, expected: int) -> None:
    configure_logging(level, json=False)
    assert logging.getLogger().level == expected


def test_configure_logging_installs_single_handler() -> None:
    configure_logging("INFO", json=True)
    configure_logging("INFO", json=True)
    assert len(logging.getLogger().handlers) == 1


def test_configure_logging_invalid_level_falls_back_to_info() -> None:
    configure_logging("NOTAREAL_LEVEL", json=False)
    assert logging.getLogger().level == logging.INFO


def test_configure_logging_quiets_engine_client_loggers() -> None:
    configure_logging("DEBUG", json=True)
    assert logging.getLogger("docker").level == logging.WARNING
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_configure_logging_error_level_keeps_engine_loggers_at_error() -> None:
    configure_logging("ERROR", json=True)
    assert logging.getLogger("docker").level == logging.ERROR


def test_json_output_is_one_object_per_line(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("INFO", json=True)
    get_logger("test.json").info("build_started", image_tag="owner/app")
    out = capsys.readouterr().out.strip().splitlines()
    record = json.loads(out[-1])
    assert record["event"] == "build_started"
    assert record["image_tag"] == "owner/app"
    assert record["level"] == "info"


def test_stdlib_records_share_the_format(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("INFO", json=True)
    logging.getLogger("tests.stdlib").info("Started server process")
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "Started server process"


def test_build_log_lines_render_as_json(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("INFO", json=True)
    StructlogSink().write_line("[2024-05-01 12:00:00.000] Step 1/2 : FROM scratch")
    record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert record["event"] == "build_log_line"
    assert record["line"].endswith("Step 1/2 : FROM scratch")
    assert record["logger"] == "container_service.build_log"


def test_engine_client_debug_is_dropped(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("DEBUG", json=True)
    logging.getLogger("docker.api.build").debug("Looking for auth config")
    assert "Looking for auth config" not in capsys.readouterr().out


def test_below_level_is_filtered(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("WARNING", json=True)
    get_logger("test.filter").info("hidden")
    assert "hidden" not in capsys.readouterr().out


# ---------------------------------------------------------------------------
# get_logger
# ---------------------------------------------------------------------------


def test_get_logger_has_level_methods() -> None:
    logger = get_logger("container_service.builder")
    for method in ("debug", "info", "warning", "error"):
        assert hasattr(logger, method)


def test_get_logger_can_log_without_configuration() -> None:
    get_logger("test.noop").info("test message", key="value")
