"""Shared pytest fixtures and test helpers for lenctl tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from lenctl.config.settings import LenSettings

PROJECT_TOML = """\
[constraints.key]
fixed = 32
description = "AES-256 key"

[constraints.nonce]
fixed = 12

[constraints.plaintext]
range = [0, 65536]

[constraints.ciphertext]
relative = "add:16"
relative_to = "plaintext"

[constraints.header]
relative = "sub:4"
relative_to = 20
"""


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's LENCTL_* environment out of the tests."""
    monkeypatch.delenv("LENCTL_CONFIG", raising=False)
    monkeypatch.delenv("LENCTL_LIMITS__MAX_LENGTH", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary project directory with a ``lenctl.toml`` and sample buffers.

    This is the single source of truth for the test project layout.
    """
    (tmp_path / "lenctl.toml").write_text(PROJECT_TOML)
    write_buffer(tmp_path, "key.bin", 32)
    write_buffer(tmp_path, "nonce.bin", 12)
    write_buffer(tmp_path, "msg.txt", 9)
    write_buffer(tmp_path, "msg.enc", 25)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> LenSettings:
    """Settings loaded from the test project's ``lenctl.toml``."""
    return LenSettings.from_cli(root=project_root)


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the test project so the CLI discovers its config.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(project_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_buffer(root: Path, name: str, length: int) -> Path:
    """Write *length* bytes to ``root / name`` and return the path."""
    path = root / name
    path.write_bytes(bytes(range(256)) * (length // 256) + bytes(range(length % 256)))
    return path
