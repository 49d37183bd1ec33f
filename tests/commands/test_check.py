"""Tests for the check and describe CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from metaschema.cli import cli


@pytest.mark.usefixtures("_isolated_workspace")
class TestCheckCommand:
    def test_check_no_flags(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "categories: 2" in result.output

    def test_check_json_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["op"] == "check"
        assert data["data"]["domains"] == 3
        assert data["data"]["actions"] == 1
        assert data["data"]["resolved"] is True

    def test_check_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "check"])
        assert result.exit_code == 0
        assert result.output.strip() == "OK: check"

    def test_check_broken_schema(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-s", "schema.py:BROKEN", "check"])
        assert result.exit_code == 1
        assert result.stdout == ""
        data = json.loads(result.output)
        assert data["ok"] is False
        assert data["error"]["code"] == "SCHEMA_INVALID"
        assert data["error"]["detail"]["phase"] == "registration"
        kinds = [e["kind"] for e in data["error"]["detail"]["errors"]]
        assert kinds == ["duplicate", "unresolvedCategory"]

    def test_check_broken_schema_rich(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-s", "schema.py:BROKEN", "check"])
        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert "unresolvedCategory" in result.output

    def test_check_missing_attribute(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-s", "schema.py:NOPE", "check"])
        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "LOAD_FAILED"

    def test_check_fragment_callable_raising(self, cli_runner: CliRunner, schema_root: Path) -> None:
        (schema_root / "lazy.py").write_text("def build():\n    raise RuntimeError('no db')\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "-s", "lazy.py:build", "check"])
        assert result.exit_code == 1
        error = json.loads(result.output)["error"]
        assert error["code"] == "LOAD_FAILED"
        assert "no db" in error["message"]


class TestCheckWithoutConfig:
    def test_nothing_configured(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["--json", "check"])
        assert result.exit_code == 1
        error = json.loads(result.output)["error"]
        assert error["code"] == "LOAD_FAILED"
        assert "No schema fragments configured" in error["message"]

    def test_explicit_config_flag(self, cli_runner: CliRunner, schema_root: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "-c", str(schema_root / "metaschema.toml"), "check"])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["categories"] == 2


@pytest.mark.usefixtures("_isolated_workspace")
class TestDescribeCommand:
    def test_describe(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["describe"])
        assert result.exit_code == 0
        assert "Domains" in result.output
        assert "Person" in result.output
        assert "Rename" in result.output

    def test_describe_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "describe"])
        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert [d["name"] for d in data["domains"]] == ["Nomen", "Age", "Color"]
        person = data["categories"][0]
        assert person["name"] == "Person"
        assert person["actions"] == ["Rename"]

    def test_describe_partial_registry_warns(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-s", "schema.py:BROKEN", "describe"])
        assert result.exit_code == 0
        assert "results may be partial" in result.output
