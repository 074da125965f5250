# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy for the validation pipeline."""

from __future__ import annotations

from collections.abc import Sequence


class ChalkLspError(Exception):
    """Base class for failures contained to a single validation cycle."""


class ConfigError(ChalkLspError):
    """Raised when configuration input is invalid."""


class SpawnFailure(ChalkLspError):
    """Raised when the linter executable cannot be started."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        head = command[0] if command else "<empty>"
        super().__init__(f"Unable to run '{head}': {reason}")
        self.command = tuple(command)
        self.reason = reason


class FatalExit(ChalkLspError):
    """Raised when the linter exits with a status that is not tolerated."""

    def __init__(self, command: Sequence[str], exit_code: int | None, stderr: str) -> None:
        head = command[0] if command else "<empty>"
        status = "no exit status" if exit_code is None else f"status {exit_code}"
        super().__init__(f"Command '{head}' exited with {status}. stderr: {stderr.strip() or '<none>'}")
        self.command = tuple(command)
        self.exit_code = exit_code
        self.stderr = stderr


class MalformedOutput(ChalkLspError):
    """Raised by a response decoder when its envelope cannot be read."""


__all__ = [
    "ChalkLspError",
    "ConfigError",
    "FatalExit",
    "MalformedOutput",
    "SpawnFailure",
]
