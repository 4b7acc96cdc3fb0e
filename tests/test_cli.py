"""Tests for the tether command line interface."""

import json

import pytest
import structlog
from typer.testing import CliRunner

import tether.cli.__main__ as cli
from tether.cli.__main__ import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def logging_calls(monkeypatch):
    """Record logging setup instead of pointing structlog at the runner's streams."""
    calls = []
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: calls.append(kwargs))
    yield calls
    structlog.reset_defaults()


@pytest.fixture
def config_file(tmp_path):
    root = tmp_path / "configs"
    (root / "production").mkdir(parents=True)
    (root / "application.properties").write_text("app.name=demo\napp.port=8080\napp.debug=true\n")
    (root / "production" / "application.properties").write_text("app.name=demo-prod\napp.port=80\n")
    config = tmp_path / "tether.yaml"
    config.write_text("source:\n  type: files\n  path: configs\n")
    return config


def test_get_value(config_file):
    result = runner.invoke(app, ["get", "app.name", "--config", str(config_file)])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"key": "app.name", "value": "demo", "environment": ""}


def test_get_typed_value_for_environment(config_file):
    result = runner.invoke(
        app, ["get", "app.port", "--type", "int", "--env", "production", "--config", str(config_file)]
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"key": "app.port", "value": 80, "environment": "production"}


def test_get_missing_key_fails(config_file):
    result = runner.invoke(app, ["get", "app.nope", "--config", str(config_file)])
    assert result.exit_code == 1


def test_get_bad_conversion_fails(config_file):
    result = runner.invoke(app, ["get", "app.name", "--type", "int", "--config", str(config_file)])
    assert result.exit_code == 1


def test_get_unsupported_type(config_file):
    result = runner.invoke(app, ["get", "app.name", "--type", "uuid", "--config", str(config_file)])
    assert result.exit_code == 2


def test_unknown_environment_fails(config_file):
    result = runner.invoke(app, ["dump", "--env", "qa", "--config", str(config_file)])
    assert result.exit_code == 1


def test_missing_config_fails(tmp_path):
    result = runner.invoke(app, ["dump", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1


def test_dump_properties(config_file):
    result = runner.invoke(app, ["dump", "--config", str(config_file)])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["app.debug=true", "app.name=demo", "app.port=8080"]


def test_dump_json(config_file):
    result = runner.invoke(app, ["dump", "--json", "--env", "production", "--config", str(config_file)])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"app.name": "demo-prod", "app.port": "80"}


def test_log_options_are_applied(config_file, logging_calls):
    result = runner.invoke(
        app, ["--log-level", "DEBUG", "--log-format", "json", "dump", "--config", str(config_file)]
    )
    assert result.exit_code == 0
    assert logging_calls == [{"level": "DEBUG", "format": "json"}]
