"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``METASCHEMA_*`` prefix
  3. TOML file    — ``metaschema.toml`` or ``[tool.metaschema]``
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`metaschema.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from metaschema.config.discovery import find_config, read_config_table
from metaschema.config.models import PluginsConfig, RegistryConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from the config file found by :func:`find_config`."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = read_config_table(toml_path)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class MetaschemaSettings(BaseSettings):
    """Unified settings for the metaschema CLI.

    Stored on the :class:`~metaschema.commands._context.AppContext` at
    the CLI root level.

    Attributes:
        workspace_root: Project directory (parent of ``metaschema.toml``,
            or CWD if no config found). Relative fragment file paths
            resolve against it.
        config_path: The TOML file in use, or None.
        schemas: ``--schemas`` override of ``[registry] fragments``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "METASCHEMA_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (derived from config location, not in TOML) ---
    workspace_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    schemas: str | None = None

    # --- TOML sections ---
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @property
    def fragments(self) -> str | None:
        """Fragment reference to load: ``--schemas`` wins over the TOML value."""
        return self.schemas or self.registry.fragments

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
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
        workspace_root: Path | None = None,
        **cli_flags: Any,
    ) -> MetaschemaSettings:
        """Construct settings from CLI invocation.

        Discovers ``metaschema.toml`` via walk-up (or explicit
        *config_path*), resolves *workspace_root* from the config file's
        parent directory, and merges CLI flags as highest-priority
        overrides. Flags passed as None are left to the lower layers.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(workspace_root)

        resolved_root = workspace_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        flags = {key: value for key, value in cli_flags.items() if value is not None}
        _tls.toml_path = toml_path
        try:
            return cls(
                workspace_root=resolved_root,
                config_path=toml_path,
                **flags,
            )
        finally:
            _tls.toml_path = None
