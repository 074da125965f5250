# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Spawning the linter and classifying how it exited."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from pathlib import Path
from typing import Final

from .config import ServerConfig
from .errors import FatalExit, SpawnFailure
from .models import RawToolOutput

LOGGER = logging.getLogger(__name__)

# ``chalk lint`` exits 1 when it found problems; stdout is still valid.
TOLERATED_EXIT_CODES: Final[frozenset[int]] = frozenset({1})

CommandRunner = Callable[[Sequence[str], Path, float | None], Awaitable[RawToolOutput]]


class ExitStatus(str, Enum):
    """Classification of a finished invocation."""

    SUCCESS = "success"
    TOLERATED = "tolerated"
    FATAL = "fatal"


def resolve_command(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved against ``PATH``.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable cannot be located.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def resolve_working_directory(
    path: Path,
    *,
    workspace_root: Path | None = None,
    project_markers: Sequence[str] = (),
) -> Path:
    """Return the directory ``chalk`` should run from when linting ``path``.

    Starting at the file's directory, ancestors are searched for a project
    marker (``chalk.yaml`` by default). The search never climbs above
    ``workspace_root`` when the file lives inside it.

    Args:
        path: File being linted (or a directory when linting a project).
        workspace_root: Workspace folder reported by the editor.
        project_markers: File names identifying a project root.

    Returns:
        Path: Nearest ancestor holding a marker, otherwise the file's directory.
    """

    start = path if path.is_dir() else path.parent
    if not project_markers:
        return start
    for candidate in (start, *start.parents):
        if any((candidate / marker).is_file() for marker in project_markers):
            return candidate
        if workspace_root is not None and candidate == workspace_root:
            break
    return start


def build_command(config: ServerConfig, path: Path | None) -> list[str]:
    """Return the argument vector for linting ``path`` (or the whole project)."""

    args = [config.executable, *config.lint_args]
    if path is not None and not config.lint_whole_project:
        args.append(str(path))
    return args


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


async def invoke(args: Sequence[str], cwd: Path, timeout: float | None = None) -> RawToolOutput:
    """Run ``args`` from ``cwd`` and capture its output.

    Spawn problems are reported through :attr:`RawToolOutput.spawn_error`
    rather than raised. A timeout kills the child and leaves ``exit_code``
    unset.
    """

    command = tuple(args)
    try:
        normalized = resolve_command(args)
        process = await asyncio.create_subprocess_exec(
            *normalized,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as exc:
        return RawToolOutput(command=command, spawn_error=str(exc))

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return RawToolOutput(
            command=command,
            stderr=f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out",
            exit_code=None,
        )
    except asyncio.CancelledError:
        process.kill()
        await asyncio.shield(process.wait())
        raise
    return RawToolOutput(
        command=command,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        exit_code=process.returncode,
    )


def classify_exit(raw: RawToolOutput) -> ExitStatus:
    """Return how ``raw`` finished: success, tolerated failure or fatal."""

    if raw.spawn_error is not None or raw.exit_code is None:
        return ExitStatus.FATAL
    if raw.exit_code == 0:
        return ExitStatus.SUCCESS
    if raw.exit_code in TOLERATED_EXIT_CODES:
        return ExitStatus.TOLERATED
    return ExitStatus.FATAL


def ensure_usable(raw: RawToolOutput) -> ExitStatus:
    """Return the exit classification, raising when the output must be discarded.

    Raises:
        SpawnFailure: If the executable could not be started.
        FatalExit: If the process ended with a status other than 0 or 1.
    """

    status = classify_exit(raw)
    if status is not ExitStatus.FATAL:
        return status
    if raw.spawn_error is not None:
        raise SpawnFailure(raw.command, raw.spawn_error)
    raise FatalExit(raw.command, raw.exit_code, raw.stderr)


__all__ = [
    "CommandRunner",
    "ExitStatus",
    "TOLERATED_EXIT_CODES",
    "build_command",
    "classify_exit",
    "ensure_usable",
    "invoke",
    "resolve_command",
    "resolve_working_directory",
]
