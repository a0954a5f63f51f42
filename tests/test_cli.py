"""Tests for the root lenctl CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from lenctl import __version__
from lenctl.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "lenctl" in result.output
    for command in ("check", "expect", "constants"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


# --- Global flags ---


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json"])
def test_global_flag_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_invalid_toml(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "lenctl.toml").write_text("[constraints\n")
    monkeypatch.chdir(tmp_path)
    result = cli_runner.invoke(cli, ["constants"])
    assert result.exit_code == 1
    assert "Invalid TOML" in result.output


def test_env_limit(
    cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LENCTL_LIMITS__MAX_LENGTH", "4096")
    result = cli_runner.invoke(cli, ["--json", "constants"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["data"]["max_length"] == 4096
