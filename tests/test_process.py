# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for spawning the linter and classifying its exit status."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

from chalk_lsp.config import ServerConfig
from chalk_lsp.errors import FatalExit, SpawnFailure
from chalk_lsp.models import RawToolOutput
from chalk_lsp.process import (
    ExitStatus,
    build_command,
    classify_exit,
    ensure_usable,
    invoke,
    resolve_command,
    resolve_working_directory,
)


def test_working_directory_defaults_to_file_parent(source_file: Path) -> None:
    assert resolve_working_directory(source_file, project_markers=()) == source_file.parent


def test_working_directory_walks_up_to_project_marker(tmp_path: Path) -> None:
    (tmp_path / "chalk.yaml").write_text("project: demo\n", encoding="utf-8")
    nested = tmp_path / "src" / "features"
    nested.mkdir(parents=True)
    target = nested / "user.py"
    target.write_text("", encoding="utf-8")

    assert resolve_working_directory(target, project_markers=("chalk.yaml",)) == tmp_path


def test_working_directory_stops_at_workspace_root(tmp_path: Path) -> None:
    (tmp_path / "chalk.yaml").write_text("", encoding="utf-8")
    workspace = tmp_path / "workspace"
    package = workspace / "pkg"
    package.mkdir(parents=True)
    target = package / "mod.py"
    target.write_text("", encoding="utf-8")

    resolved = resolve_working_directory(target, workspace_root=workspace, project_markers=("chalk.yaml",))

    assert resolved == package


def test_build_command_appends_target_path() -> None:
    config = ServerConfig()

    assert build_command(config, Path("/project/app.py")) == ["chalk", "lint", "--format=lsp", "/project/app.py"]


def test_build_command_for_whole_project() -> None:
    config = ServerConfig(executable="/opt/chalk", lint_whole_project=True)

    assert build_command(config, Path("/project/app.py")) == ["/opt/chalk", "lint", "--format=lsp"]


def test_resolve_command_requires_known_executable() -> None:
    with pytest.raises(FileNotFoundError):
        resolve_command(["definitely-not-a-chalk-binary"])
    with pytest.raises(ValueError):
        resolve_command([])


def test_invoke_captures_output_and_exit_code(tmp_path: Path) -> None:
    script = "import sys; print('{\"errors\": []}'); print('careful', file=sys.stderr); sys.exit(1)"

    raw = asyncio.run(invoke([sys.executable, "-c", script], tmp_path))

    assert raw.exit_code == 1
    assert raw.stdout.strip() == '{"errors": []}'
    assert raw.stderr.strip() == "careful"
    assert raw.spawn_error is None


def test_invoke_runs_in_requested_directory(tmp_path: Path) -> None:
    raw = asyncio.run(invoke([sys.executable, "-c", "import os; print(os.getcwd())"], tmp_path))

    assert Path(raw.stdout.strip()).resolve() == tmp_path.resolve()


def test_invoke_reports_missing_executable(tmp_path: Path) -> None:
    raw = asyncio.run(invoke(["definitely-not-a-chalk-binary", "lint"], tmp_path))

    assert raw.spawn_error is not None
    assert raw.exit_code is None
    assert classify_exit(raw) is ExitStatus.FATAL


def test_invoke_times_out(tmp_path: Path) -> None:
    raw = asyncio.run(invoke([sys.executable, "-c", "import time; time.sleep(10)"], tmp_path, timeout=0.2))

    assert raw.exit_code is None
    assert "timed out" in raw.stderr


def test_cancelled_invoke_reaps_child(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    spawned: list[asyncio.subprocess.Process] = []
    create = asyncio.create_subprocess_exec

    async def tracking_create(*args: Any, **kwargs: Any) -> asyncio.subprocess.Process:
        process = await create(*args, **kwargs)
        spawned.append(process)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", tracking_create)

    async def scenario() -> None:
        task = asyncio.create_task(invoke([sys.executable, "-c", "import time; time.sleep(10)"], tmp_path))
        while not spawned:
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert spawned[0].returncode is not None


@pytest.mark.parametrize(
    ("exit_code", "expected"),
    [(0, ExitStatus.SUCCESS), (1, ExitStatus.TOLERATED), (2, ExitStatus.FATAL), (-9, ExitStatus.FATAL), (None, ExitStatus.FATAL)],
)
def test_classify_exit(exit_code: int | None, expected: ExitStatus) -> None:
    assert classify_exit(RawToolOutput(exit_code=exit_code)) is expected


def test_ensure_usable_raises_for_fatal_outcomes() -> None:
    assert ensure_usable(RawToolOutput(exit_code=1)) is ExitStatus.TOLERATED
    with pytest.raises(FatalExit, match="status 2"):
        ensure_usable(RawToolOutput(command=("chalk", "lint"), exit_code=2, stderr="boom"))
    with pytest.raises(SpawnFailure, match="not found"):
        ensure_usable(RawToolOutput(command=("chalk",), spawn_error="Executable 'chalk' was not found on PATH"))
