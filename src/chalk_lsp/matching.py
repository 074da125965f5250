# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Select the diagnostic groups that belong to the document being validated."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from .models import DiagnosticGroup, DiagnosticRecord
from .uris import as_path_text

LOGGER = logging.getLogger(__name__)


def _comparable(target: str | Path) -> str:
    text = as_path_text(str(target)).replace("\\", "/")
    if len(text) > 1:
        text = text.rstrip("/")
    return text.casefold()


def _basename(comparable: str) -> str:
    return PurePosixPath(comparable).name


def group_matches(group: DiagnosticGroup, document_path: str | Path) -> bool:
    """Return ``True`` when ``group`` reports on ``document_path``.

    The tool may print paths with different casing, or with a different
    drive/mount prefix than the editor uses, so the full path is compared
    case-insensitively first and the file name alone second.
    """

    wanted = _comparable(document_path)
    candidate = _comparable(group.target_uri)
    if candidate == wanted:
        return True
    wanted_name = _basename(wanted)
    return bool(wanted_name) and _basename(candidate) == wanted_name


def select_for_document(groups: Sequence[DiagnosticGroup], document_path: str | Path) -> list[DiagnosticRecord]:
    """Return the records of every group matching ``document_path``.

    Args:
        groups: Groups in the order the linter reported them.
        document_path: Filesystem path (or URI) of the validated document.

    Returns:
        list[DiagnosticRecord]: Concatenated records, preserving group order
        and the order within each group. Empty when nothing matches.
    """

    selected: list[DiagnosticRecord] = []
    for group in groups:
        if group_matches(group, document_path):
            selected.extend(group.diagnostics)
        else:
            LOGGER.debug("ignoring %d diagnostic(s) for %s", len(group.diagnostics), group.target_uri)
    return selected


__all__ = ["group_matches", "select_for_document"]
