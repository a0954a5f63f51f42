"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs:  CLI flags passed by Click
  2. Env vars:     ``LENCTL_*`` prefix, ``__`` for nesting
  3. TOML file:    ``lenctl.toml`` discovered via walk-up
  4. Code defaults: baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from lenctl.config.discovery import find_config
from lenctl.config.models import ConstraintConfig, LimitsConfig
from lenctl.domain.constraints import Constraint


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``lenctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class LenSettings(BaseSettings):
    """Settings for the lenctl CLI and services.

    Attributes:
        root: Project directory (parent of ``lenctl.toml``, or CWD).
        config_path: The TOML file in effect, if any.
        constraints: Named constraint declarations from ``[constraints.*]``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LENCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    constraints: dict[str, ConstraintConfig] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> LenSettings:
        """Construct settings from a CLI invocation.

        Discovers ``lenctl.toml`` via walk-up from *root* (or uses the
        explicit *config_path*) and merges CLI flags as highest priority.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    def constraint(self, name: str) -> Constraint:
        """The domain descriptor declared as ``[constraints.<name>]``.

        Raises:
            KeyError: No constraint with that name is configured.
        """
        try:
            declared = self.constraints[name]
        except KeyError:
            msg = f"No constraint named {name!r} in {self.config_path or 'configuration'}"
            raise KeyError(msg) from None
        return declared.to_constraint(limit=self.limits.max_length)
