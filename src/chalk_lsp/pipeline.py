# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""One validation pass: invoke, classify, parse, match and filter."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .config import ServerConfig
from .matching import select_for_document
from .models import DiagnosticRecord
from .parsers import parse_output
from .process import CommandRunner, ExitStatus, build_command, ensure_usable, invoke, resolve_working_directory

LOGGER = logging.getLogger(__name__)


def apply_limits(records: Sequence[DiagnosticRecord], config: ServerConfig) -> list[DiagnosticRecord]:
    """Drop records below ``config.minimum_severity`` and cap the count at ``config.max_problems``."""

    kept = [record for record in records if record.severity.is_at_least(config.minimum_severity)]
    if config.max_problems is not None and len(kept) > config.max_problems:
        LOGGER.debug("truncating %d diagnostics to %d", len(kept), config.max_problems)
        kept = kept[: config.max_problems]
    return kept


async def collect_diagnostics(
    uri: str,
    path: Path,
    config: ServerConfig,
    *,
    workspace_root: Path | None = None,
    runner: CommandRunner = invoke,
) -> list[DiagnosticRecord]:
    """Run ``chalk`` for ``path`` and return the diagnostics that belong to it.

    Args:
        uri: Document URI; used for response shapes that omit the file name.
        path: Filesystem path of the document.
        config: Active server configuration.
        workspace_root: Workspace folder bounding the project-root search.
        runner: Coroutine spawning the command; replaced in tests.

    Returns:
        list[DiagnosticRecord]: Full replacement diagnostic set for ``uri``.

    Raises:
        SpawnFailure: If the linter could not be started.
        FatalExit: If the linter exited with a status other than 0 or 1.
    """

    cwd = resolve_working_directory(path, workspace_root=workspace_root, project_markers=config.project_markers)
    args = build_command(config, path)
    LOGGER.debug("running %s in %s", " ".join(args), cwd)
    raw = await runner(args, cwd, config.timeout_seconds)
    status = ensure_usable(raw)
    if status is ExitStatus.TOLERATED:
        LOGGER.debug("%s reported problems (exit %s)", config.executable, raw.exit_code)
    if raw.stderr.strip():
        LOGGER.info("%s stderr: %s", config.executable, raw.stderr.strip())
    groups = parse_output(raw, uri, source=config.source)
    return apply_limits(select_for_document(groups, path), config)


__all__ = ["apply_limits", "collect_diagnostics"]
