"""Tests for SchemaService — check, describe, validate and build."""

from __future__ import annotations

from pathlib import Path

from metaschema.config.settings import MetaschemaSettings
from metaschema.infrastructure.workspace import Workspace
from metaschema.services.schema import SchemaService
from tests.conftest import people_fragments


def _service(root: Path, fragments: list | None = None, **flags: object) -> SchemaService:
    settings = MetaschemaSettings.from_cli(workspace_root=root, plugins={"entry_points": False}, **flags)
    return SchemaService(Workspace(settings, fragments=fragments))


class TestCheck:
    def test_clean_schema(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).check()
        assert result.ok is True
        assert result.op == "check"
        assert result.data == {
            "domains": 8,
            "categories": 4,
            "actions": 1,
            "views": 1,
            "forms": 1,
            "display_modes": 1,
            "sources": 2,
            "resolved": True,
        }

    def test_registration_errors(self, tmp_path: Path) -> None:
        fragments = people_fragments() + [
            ("category", {"name": "Person", "definition": {}}),
            ("view", {"name": "Orphan", "category": "Ghost", "definition": {}}),
        ]
        result = _service(tmp_path, fragments).check()
        assert result.ok is False
        assert result.error.code == "SCHEMA_INVALID"
        assert result.error.detail["phase"] == "registration"
        assert [e["kind"] for e in result.error.errors] == ["duplicate", "unresolvedCategory"]
        assert result.error.detail["categories"] == 4

    def test_resolution_error(self, tmp_path: Path) -> None:
        fragments = people_fragments() + [
            ("form", {"name": "Poke", "category": "Person", "definition": {"Action": "Nope"}}),
        ]
        result = _service(tmp_path, fragments).check()
        assert result.error.code == "SCHEMA_INVALID"
        assert result.error.detail["phase"] == "resolution"
        assert "resolution failed with 1 error(s)" in result.error.message

    def test_unconfigured_workspace(self, tmp_path: Path) -> None:
        result = _service(tmp_path).check()
        assert result.ok is False
        assert result.error.code == "LOAD_FAILED"

    def test_unresolved_when_processing_disabled(self, tmp_path: Path) -> None:
        result = _service(tmp_path, people_fragments(), registry={"process": False}).check()
        assert result.ok is True
        assert result.data["resolved"] is False


class TestDescribe:
    def test_lists_domains_and_categories(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).describe()
        assert result.ok is True
        domains = {d["name"]: d for d in result.data["domains"]}
        assert domains["Nomen"] == {"name": "Nomen", "type": "string", "decorator": None}
        assert domains["Palette"]["decorator"] == "Flags"
        person = next(c for c in result.data["categories"] if c["name"] == "Person")
        assert person["fields"] == ["Name", "Age", "Color", "Company", "Parent", "Friends", "Address"]
        assert person["actions"] == ["Greet"]
        assert person["views"] == ["PersonList"]
        assert person["relations"] == {"catalog": "Company", "hierarchy": "Parent"}

    def test_partial_registry_warns(self, tmp_path: Path) -> None:
        fragments = people_fragments() + [("category", {"name": "Person", "definition": {}})]
        result = _service(tmp_path, fragments).describe()
        assert result.ok is True
        assert result.warnings == ["Schema registration reported 1 error(s); results may be partial"]


class TestValidate:
    def test_valid_instance(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate("Person", {"Name": "Ann", "Age": 30})
        assert result.ok is True
        assert result.data == {"category": "Person", "patch": False, "valid": True}

    def test_invalid_instance(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate("Person", {"Age": 200, "Nick": "A"})
        assert result.ok is False
        assert result.error.code == "VALIDATION_FAILED"
        kinds = {(e["kind"], e["path"]) for e in result.error.errors}
        assert kinds == {
            ("missingProperty", "Person.Name"),
            ("domainValidation", "Person.Age"),
            ("unresolvedProperty", "Person.Nick"),
        }

    def test_patch_mode(self, workspace: Workspace) -> None:
        service = SchemaService(workspace)
        assert service.validate("Person", {"Age": 31}, patch=True).ok is True
        result = service.validate("Account", {"Owner": "Ann"}, patch=True)
        assert result.ok is False
        assert result.error.errors[0]["kind"] == "immutable"
        assert result.error.detail["patch"] is True

    def test_unknown_category(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate("Ghost", {})
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {"category": "Ghost"}


class TestValidateAction:
    def test_valid_args(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate_action("Person", "Greet", {"Greeting": "Hi"})
        assert result.ok is True
        assert result.data == {"category": "Person", "action": "Greet", "valid": True}

    def test_invalid_args(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate_action("Person", "Greet", {})
        assert result.error.code == "VALIDATION_FAILED"
        assert result.error.errors == [{"kind": "missingProperty", "path": "Person.Greet.Greeting"}]

    def test_unknown_action(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).validate_action("Person", "Wave", {})
        assert result.error.code == "NOT_FOUND"
        assert result.error.message == "No such action: Person.Wave"

    def test_unknown_category(self, workspace: Workspace) -> None:
        assert SchemaService(workspace).validate_action("Ghost", "Wave", {}).error.code == "NOT_FOUND"


class TestBuild:
    def test_keyed_input(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).build("Person", {"Name": "Ann", "Color": "Red", "Friends": ["2"]})
        assert result.ok is True
        assert result.data == {
            "category": "Person",
            "instance": {"Name": "Ann", "Color": "Red", "Friends": [2]},
        }

    def test_positional_input(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).build("Address", ["Oslo", "0150"])
        assert result.data["instance"] == {"City": "Oslo", "Zip": "0150"}

    def test_build_failure(self, workspace: Workspace) -> None:
        result = SchemaService(workspace).build("Address", ["Oslo", "0150", "x"])
        assert result.ok is False
        assert result.error.code == "BUILD_FAILED"
        assert result.error.message.startswith("Cannot build Address: arity: Address")
        assert result.error.errors == [{"kind": "arity", "path": "Address", "detail": {"expected": 2, "actual": 3}}]

    def test_unknown_category(self, workspace: Workspace) -> None:
        assert SchemaService(workspace).build("Ghost", {}).error.code == "NOT_FOUND"
