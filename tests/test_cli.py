# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Smoke tests for the chalk-lsp command line."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from chalk_lsp.cli import app
from chalk_lsp.models import DiagnosticRecord, Range
from chalk_lsp.severity import Severity
from tests.helpers.fakes import flat_payload


def _fake_chalk(tmp_path: Path, stdout: str, exit_code: int) -> Path:
    script = tmp_path / "fake-chalk"
    script.write_text(f"#!{sys.executable}\nimport sys\nprint({stdout!r})\nsys.exit({exit_code})\n", encoding="utf-8")
    script.chmod(0o755)
    return script


def test_lint_json_runs_linter_end_to_end(tmp_path: Path, source_file: Path) -> None:
    script = _fake_chalk(tmp_path, flat_payload(), exit_code=1)

    result = CliRunner().invoke(
        app,
        ["lint", str(source_file), "--executable", str(script), "--json", "--root", str(tmp_path)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert len(payload) == 1
    assert payload[0]["message"] == "unused variable"
    assert payload[0]["severity"] == "warning"
    assert payload[0]["range"] == {"start": {"line": 2, "character": 0}, "end": {"line": 2, "character": 5}}


def test_lint_exits_one_when_errors_are_reported(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source_file: Path
) -> None:
    async def fake_collect(*args: Any, **kwargs: Any) -> list[DiagnosticRecord]:
        return [DiagnosticRecord(range=Range(), message="resolver has no output", severity=Severity.ERROR, code="E1")]

    monkeypatch.setattr("chalk_lsp.cli.collect_diagnostics", fake_collect)
    monkeypatch.setattr("chalk_lsp.logging._CONSOLES", {})
    monkeypatch.setenv("COLUMNS", "400")

    result = CliRunner().invoke(app, ["lint", str(source_file), "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 1
    assert "resolver has no output" in result.output
    assert "1 error" in result.output


def test_lint_reports_missing_executable(tmp_path: Path, source_file: Path) -> None:
    result = CliRunner().invoke(
        app,
        ["lint", str(source_file), "--executable", "definitely-not-a-chalk-binary", "--root", str(tmp_path)],
    )

    assert result.exit_code == 2
    assert "not found" in result.output


def test_lint_rejects_invalid_severity(tmp_path: Path, source_file: Path) -> None:
    result = CliRunner().invoke(app, ["lint", str(source_file), "--min-severity", "loud", "--root", str(tmp_path)])

    assert result.exit_code == 2


def test_serve_starts_stdio_server(monkeypatch: pytest.MonkeyPatch) -> None:
    started: list[str] = []

    class FakeServer:
        def start_io(self) -> None:
            started.append("io")

        def start_tcp(self, host: str, port: int) -> None:
            started.append(f"tcp://{host}:{port}")

    monkeypatch.setattr("chalk_lsp.server.create_server", lambda: FakeServer())

    assert CliRunner().invoke(app, ["serve"]).exit_code == 0
    assert CliRunner().invoke(app, ["serve", "--tcp", "--port", "9999"]).exit_code == 0
    assert started == ["io", "tcp://127.0.0.1:9999"]


def test_serve_rejects_unknown_log_level() -> None:
    result = CliRunner().invoke(app, ["serve", "--log-level", "chatty"])

    assert result.exit_code != 0


def test_lint_reads_settings_from_current_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source_file: Path
) -> None:
    script = _fake_chalk(tmp_path, flat_payload(), exit_code=1)
    (tmp_path / "pyproject.toml").write_text(f'[tool.chalk-lsp]\nexecutable = "{script}"\n', encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["lint", str(source_file), "--json"])

    assert result.exit_code == 0, result.output
    assert [item["message"] for item in json.loads(result.stdout)] == ["unused variable"]
