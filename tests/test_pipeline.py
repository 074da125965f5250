# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the single-pass validation pipeline."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from chalk_lsp.config import ServerConfig
from chalk_lsp.errors import FatalExit, SpawnFailure
from chalk_lsp.models import DiagnosticRecord, Range
from chalk_lsp.pipeline import apply_limits, collect_diagnostics
from chalk_lsp.severity import Severity
from chalk_lsp.uris import path_to_uri
from tests.helpers.fakes import FakeRunner, flat_payload, proto_payload


def _collect(path: Path, runner: FakeRunner, config: ServerConfig | None = None) -> list[DiagnosticRecord]:
    return asyncio.run(collect_diagnostics(path_to_uri(path), path, config or ServerConfig(), runner=runner))


def test_exit_code_one_still_yields_diagnostics(source_file: Path, runner: FakeRunner) -> None:
    runner.stdout = flat_payload()
    runner.exit_code = 1

    records = _collect(source_file, runner)

    assert [record.message for record in records] == ["unused variable"]


def test_exit_code_two_is_fatal(source_file: Path, runner: FakeRunner) -> None:
    runner.stdout = flat_payload()
    runner.exit_code = 2

    with pytest.raises(FatalExit):
        _collect(source_file, runner)


def test_spawn_error_is_reported(source_file: Path, runner: FakeRunner) -> None:
    runner.spawn_error = "Executable 'chalk' was not found on PATH"
    runner.exit_code = None

    with pytest.raises(SpawnFailure):
        _collect(source_file, runner)


def test_runner_receives_command_cwd_and_timeout(source_file: Path, runner: FakeRunner) -> None:
    _collect(source_file, runner, ServerConfig(timeout_seconds=5))

    args, cwd, timeout = runner.calls[0]
    assert args == ("chalk", "lint", "--format=lsp", str(source_file))
    assert cwd == source_file.parent
    assert timeout == 5


def test_only_groups_for_the_document_are_kept(source_file: Path, runner: FakeRunner) -> None:
    payload = json.loads(proto_payload(str(source_file).upper(), message="mine"))
    payload["lsp_proto"]["diagnostics"].append(
        {"uri": str(source_file.parent / "imported.py"), "diagnostics": [{"message": "theirs", "severity": 1}]}
    )
    runner.stdout = json.dumps(payload)

    records = _collect(source_file, runner)

    assert [record.message for record in records] == ["mine"]


def _record(severity: Severity) -> DiagnosticRecord:
    return DiagnosticRecord(range=Range(), message=severity.label, severity=severity)


def test_apply_limits_filters_and_caps() -> None:
    records = [_record(severity) for severity in (Severity.HINT, Severity.ERROR, Severity.WARNING, Severity.INFORMATION)]

    filtered = apply_limits(records, ServerConfig(minimum_severity="warning"))
    assert [record.severity for record in filtered] == [Severity.ERROR, Severity.WARNING]

    capped = apply_limits(records, ServerConfig(max_problems=2))
    assert [record.severity for record in capped] == [Severity.HINT, Severity.ERROR]
