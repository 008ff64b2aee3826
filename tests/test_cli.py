"""Tests for the `layerdog` CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner

from layerdog import __version__
from layerdog.cli import main
from layerdog.rules.store import RULES_FILE_NAME, read_bundled_rules

if TYPE_CHECKING:
    from pathlib import Path

    from click.testing import Result


MODEL = """\
classes:
  - name: com.example.web.UserController
    methods:
      - name: show
        calls:
          - {method: findUser, target: com.example.service.UserService}
  - name: com.example.service.UserService
    methods:
      - name: findUser
"""


def _invoke(config_dir: Path, *args: str, stdin: str | None = None) -> Result:
    runner = CliRunner()
    return runner.invoke(main, ["--config-dir", str(config_dir), *args], input=stdin)


class TestConfigCommands:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_path(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "path")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == str(tmp_path / RULES_FILE_NAME)

    def test_init_creates_then_keeps(self, tmp_path: Path) -> None:
        config_dir = tmp_path / "cfg"
        result = _invoke(config_dir, "init")
        assert result.exit_code == 0, result.output
        assert "Created" in result.output
        rules = config_dir / RULES_FILE_NAME
        assert rules.read_text(encoding="utf-8") == read_bundled_rules()

        rules.write_text('{"layers": {}}', encoding="utf-8")
        result = _invoke(config_dir, "init")
        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert rules.read_text(encoding="utf-8") == '{"layers": {}}'

    def test_reset_with_yes(self, tmp_path: Path) -> None:
        rules = tmp_path / RULES_FILE_NAME
        rules.write_text('{"layers": {}}', encoding="utf-8")
        result = _invoke(tmp_path, "reset", "--yes")
        assert result.exit_code == 0, result.output
        assert rules.read_text(encoding="utf-8") == read_bundled_rules()

    def test_reset_declined(self, tmp_path: Path) -> None:
        rules = tmp_path / RULES_FILE_NAME
        rules.write_text('{"layers": {}}', encoding="utf-8")
        result = _invoke(tmp_path, "reset", stdin="n\n")
        assert result.exit_code == 1
        assert rules.read_text(encoding="utf-8") == '{"layers": {}}'

    def test_status_bundled(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "status")
        assert result.exit_code == 0, result.output
        assert "bundled" in result.output
        assert "missing" in result.output
        assert "CONTROLLER" in result.output

    def test_status_external(self, tmp_path: Path) -> None:
        (tmp_path / RULES_FILE_NAME).write_text(
            json.dumps({"version": "9", "layers": {"API": {"allowedCalls": ["DAO"]}}}),
            encoding="utf-8",
        )
        result = _invoke(tmp_path, "status")
        assert result.exit_code == 0, result.output
        assert "external" in result.output
        assert "API" in result.output


class TestQueryCommands:
    def test_classify(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "classify", "com.example.web.UserController")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "CONTROLLER"

    def test_classify_annotation(self, tmp_path: Path) -> None:
        result = _invoke(
            tmp_path,
            "classify",
            "com.example.users.UserLogic",
            "--annotation",
            "org.springframework.stereotype.Service",
        )
        assert result.output.strip() == "API"

    def test_classify_package_override(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "classify", "Users", "--package", "com.example.dao")
        assert result.output.strip() == "DAO"

    def test_classify_unknown(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "classify", "com.example.util.Strings")
        assert result.output.strip() == "UNKNOWN"

    def test_check_call_allowed(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check-call", "controller", "dto")
        assert result.exit_code == 0, result.output
        assert "CONTROLLER -> DTO: allowed" in result.output

    def test_check_call_denied(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check-call", "CONTROLLER", "API")
        assert result.exit_code == 1
        assert "not allowed" in result.output

    def test_check_call_bad_layer(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check-call", "SERVICE", "API")
        assert result.exit_code == 2
        assert "unknown layer" in result.output


class TestCheckCommand:
    def _model(self, tmp_path: Path) -> Path:
        path = tmp_path / "model.yml"
        path.write_text(MODEL, encoding="utf-8")
        return path

    def test_rich(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check", str(self._model(tmp_path)), "--format", "rich")
        assert result.exit_code == 0, result.output
        assert "controller-layer UserController.show" in result.output
        assert "1 violations found" in result.output

    def test_json(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check", str(self._model(tmp_path)), "--format", "json")
        assert result.exit_code == 0, result.output
        parsed = json.loads(result.output)
        assert parsed["summary"]["violations_count"] == 1

    def test_porcelain_default_when_piped(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check", str(self._model(tmp_path)))
        assert result.exit_code == 0, result.output
        parts = result.output.strip().split(":")
        assert len(parts) == 5
        assert parts[0] == "controller-layer"

    def test_strict(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path, "check", str(self._model(tmp_path)), "--strict")
        assert result.exit_code == 1

    def test_strict_clean(self, tmp_path: Path) -> None:
        path = tmp_path / "clean.yml"
        path.write_text("classes:\n  - name: com.example.util.Strings\n", encoding="utf-8")
        result = _invoke(tmp_path, "check", str(path), "--strict")
        assert result.exit_code == 0, result.output
        assert result.output == ""

    def test_malformed_model(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("classes: 3\n", encoding="utf-8")
        result = _invoke(tmp_path, "check", str(path))
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_bell_follows_sound_configuration(self, tmp_path: Path) -> None:
        rules = json.loads(read_bundled_rules())
        rules["globalRules"]["soundConfiguration"].update(
            {"enabled": True, "playOnInspection": True}
        )
        (tmp_path / RULES_FILE_NAME).write_text(json.dumps(rules), encoding="utf-8")
        with patch("rich.console.Console.bell") as bell:
            result = _invoke(tmp_path, "check", str(self._model(tmp_path)), "--bell")
        assert result.exit_code == 0, result.output
        bell.assert_called_once_with()

    def test_bell_silent_when_sounds_disabled(self, tmp_path: Path) -> None:
        with patch("rich.console.Console.bell") as bell:
            result = _invoke(tmp_path, "check", str(self._model(tmp_path)), "--bell")
        assert result.exit_code == 0, result.output
        bell.assert_not_called()


class TestWatchCommand:
    def test_requires_rules_directory(self, tmp_path: Path) -> None:
        result = _invoke(tmp_path / "missing", "watch")
        assert result.exit_code == 1
        assert "layerdog init" in result.output
