"""Config file discovery and loading.

Settings live either in a dedicated ``metaschema.toml`` or in the
``[tool.metaschema]`` table of a project's ``pyproject.toml``. Discovery
walks up from the working directory like git looking for ``.git/``; in
each directory ``metaschema.toml`` wins over ``pyproject.toml``, and a
``pyproject.toml`` without the table is skipped. ``METASCHEMA_CONFIG``
and ``--config`` name a file directly.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from metaschema.config.models import MetaschemaConfig

CONFIG_FILENAME = "metaschema.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "METASCHEMA_CONFIG"


def _tool_table(data: dict[str, Any]) -> dict[str, Any] | None:
    table = data.get("tool", {}).get("metaschema")
    return table if isinstance(table, dict) else None


def read_config_table(path: Path) -> dict[str, Any]:
    """Parse *path* and return the metaschema settings table.

    For ``pyproject.toml`` that is ``[tool.metaschema]`` (empty if absent);
    any other file is read whole.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        return _tool_table(data) or {}
    return data


def _claims_pyproject(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return False
    return _tool_table(data) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    ``METASCHEMA_CONFIG`` short-circuits the walk; a dangling value means
    no config rather than a fallback to discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        dedicated = directory / CONFIG_FILENAME
        if dedicated.is_file():
            return dedicated
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _claims_pyproject(pyproject):
            return pyproject
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> MetaschemaConfig:
    """Load and validate config, discovering the file from *cwd* if needed.

    Returns the default MetaschemaConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return MetaschemaConfig()
    return MetaschemaConfig.model_validate(read_config_table(path))
