"""Tests for logging setup."""

import json
import sys

import pytest
from loguru import logger

from bff_api.config import Settings
from bff_api.log import configure_logging


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def read_records(path) -> list[dict]:
    return [json.loads(line)["record"] for line in path.read_text().splitlines() if line]


def test_file_sinks_split_by_level(tmp_path, restore_logger):
    """Combined log gets everything, error log only errors, both as JSON."""
    settings = Settings(_env_file=None, log_dir=str(tmp_path / "logs"), log_level="INFO")

    configure_logging(settings)
    logger.info("request served", path="/graphql", method="POST")
    logger.error("request failed", path="/graphql", method="POST")
    logger.remove()

    combined = read_records(tmp_path / "logs" / "combined.log")
    errors = read_records(tmp_path / "logs" / "error.log")

    assert [r["message"] for r in combined] == ["request served", "request failed"]
    assert [r["message"] for r in errors] == ["request failed"]
    assert errors[0]["extra"] == {"path": "/graphql", "method": "POST"}
    assert "timestamp" in errors[0]["time"]


def test_console_is_json_in_production(tmp_path, capsys, restore_logger):
    settings = Settings(
        _env_file=None, log_dir=str(tmp_path / "logs"), log_level="INFO", node_env="production"
    )

    configure_logging(settings)
    logger.info("server ready")
    logger.remove()

    line = capsys.readouterr().err.strip().splitlines()[-1]
    assert json.loads(line)["record"]["message"] == "server ready"


def test_console_is_text_in_development(tmp_path, capsys, restore_logger):
    settings = Settings(_env_file=None, log_dir=str(tmp_path / "logs"), log_level="INFO")

    configure_logging(settings)
    logger.info("server ready")
    logger.remove()

    line = capsys.readouterr().err.strip().splitlines()[-1]
    assert line.endswith("- server ready")
