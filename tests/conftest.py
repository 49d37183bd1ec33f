"""Shared pytest fixtures and test helpers for metaschema tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from metaschema import create_and_process
from metaschema.config.settings import MetaschemaSettings
from metaschema.core.decorators import Action, Catalog, Enum, Flags, Hierarchy, Include, Many
from metaschema.core.registry import Metaschema
from metaschema.infrastructure.workspace import Workspace

# ---------------------------------------------------------------------------
# Schema fixtures
# ---------------------------------------------------------------------------

DOMAINS: dict[str, Any] = {
    "Nomen": {"type": "string", "min": 1, "length": 64},
    "Age": {"type": "number", "min": 0, "max": 150},
    "Count": {"type": "bigint"},
    "Flag": {"type": "boolean"},
    "Price": {"type": "object", "class": "Money"},
    "Labels": {"type": "object", "class": "set", "length": 3},
    "Color": Enum("Red", "Green"),
    "Palette": Flags(enum="Color"),
}


def people_fragments() -> list[tuple[str, dict[str, Any]]]:
    """A small schema touching every fragment kind, in deliberately mixed order."""
    return [
        (
            "view",
            {"name": "PersonList", "category": "Person", "definition": {"Fields": ["Name", "Age"]}},
        ),
        (
            "category",
            {
                "name": "Person",
                "source": "people.py",
                "definition": {
                    "Name": {"domain": "Nomen", "required": True},
                    "Age": {"domain": "Age"},
                    "Color": {"domain": "Color"},
                    "Company": Catalog("Company"),
                    "Parent": Hierarchy(),
                    "Friends": Many("Person"),
                    "Address": Include("Address"),
                    "Greet": Action(
                        Args={"Greeting": {"domain": "Nomen", "required": True}},
                        Execute=lambda args: f"Hello, {args['Greeting']}",
                    ),
                },
            },
        ),
        ("domains", {"definition": DOMAINS, "source": "domains.py"}),
        (
            "category",
            {
                "name": "Account",
                "definition": {
                    "Id": {"domain": "Count", "readOnly": True},
                    "Owner": {"domain": "Nomen"},
                },
            },
        ),
        (
            "category",
            {"name": "Company", "definition": {"Name": {"domain": "Nomen", "required": True}}},
        ),
        (
            "category",
            {
                "name": "Address",
                "definition": {
                    "City": {"domain": "Nomen", "required": True},
                    "Zip": {"domain": "Nomen"},
                },
            },
        ),
        (
            "form",
            {"name": "Greet", "category": "Person", "definition": {"Fields": ["Name"], "Action": "Greet"}},
        ),
        ("display", {"name": "Card", "category": "Person", "definition": {"Fields": ["Name", "Color"]}}),
    ]


@pytest.fixture
def registry() -> Metaschema:
    """Registry with :func:`people_fragments` registered and resolved."""
    error, ms = create_and_process(people_fragments())
    assert error is None, str(error)
    return ms


@pytest.fixture
def unresolved_registry() -> Metaschema:
    """Registry with :func:`people_fragments` registered but not resolved."""
    from metaschema import create

    error, ms = create(people_fragments())
    assert error is None, str(error)
    return ms


# ---------------------------------------------------------------------------
# Workspace / CLI fixtures
# ---------------------------------------------------------------------------

SCHEMA_MODULE = '''\
from metaschema.core.decorators import Enum, Include, Many

FRAGMENTS = [
    ("domains", {"definition": {
        "Nomen": {"type": "string", "min": 1, "length": 64},
        "Age": {"type": "number", "min": 0, "max": 150},
        "Color": Enum("Red", "Green"),
    }}),
    ("category", {"name": "Person", "definition": {
        "Name": {"domain": "Nomen", "required": True},
        "Age": {"domain": "Age"},
        "Color": {"domain": "Color"},
        "Friends": Many("Person"),
        "Address": Include("Address"),
    }}),
    ("category", {"name": "Address", "definition": {
        "City": {"domain": "Nomen", "required": True},
    }}),
    ("action", {"name": "Rename", "category": "Person", "definition": {
        "Args": {"Name": {"domain": "Nomen", "required": True}},
    }}),
]

BROKEN = FRAGMENTS + [
    ("category", {"name": "Person", "definition": {}}),
    ("view", {"name": "Orphan", "category": "Ghost", "definition": {}}),
]
'''


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer METASCHEMA_* variables out of the tests."""
    for var in ("METASCHEMA_CONFIG", "METASCHEMA_SCHEMAS", "METASCHEMA_REGISTRY__FRAGMENTS"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def schema_root(tmp_path: Path) -> Path:
    """Project directory with ``schema.py`` and a ``metaschema.toml`` pointing at it."""
    (tmp_path / "schema.py").write_text(SCHEMA_MODULE, encoding="utf-8")
    (tmp_path / "metaschema.toml").write_text(
        '[registry]\nfragments = "schema.py:FRAGMENTS"\n', encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def _isolated_workspace(schema_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the schema project so the CLI discovers its config.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(schema_root)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Workspace over :func:`people_fragments`, with entry-point plugins off."""
    settings = MetaschemaSettings.from_cli(workspace_root=tmp_path, plugins={"entry_points": False})
    return Workspace(settings, fragments=people_fragments())
