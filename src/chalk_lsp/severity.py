# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from lsprotocol import types as lsp


class Severity(IntEnum):
    """Canonical severity scale; lower values are more urgent.

    The numbering follows the Language Server Protocol so members convert
    directly to :class:`lsprotocol.types.DiagnosticSeverity`.
    """

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        """Return the lowercase name used in configuration and reports."""

        return self.name.lower()

    def is_at_least(self, threshold: Severity) -> bool:
        """Return ``True`` when this severity is as urgent as ``threshold`` or more."""

        return self.value <= threshold.value

    def to_lsp(self) -> lsp.DiagnosticSeverity:
        return lsp.DiagnosticSeverity(self.value)


_NUMERIC_SEVERITIES: Final[dict[int, Severity]] = {member.value: member for member in Severity}

# Anything the tool reports that we cannot classify is surfaced as an error.
FALLBACK_SEVERITY: Final[Severity] = Severity.ERROR

_LABEL_ALIASES: Final[dict[str, str]] = {"info": "information", "warn": "warning"}


def map_severity(raw: object) -> Severity:
    """Map any of the linter's severity encodings onto :class:`Severity`.

    Args:
        raw: Severity as emitted by the tool. Older releases use the strings
            ``"error"``/``"warning"``; LSP-style envelopes use the integers 1-4.

    Returns:
        Severity: Canonical severity. Strings other than ``"error"`` map to
        :attr:`Severity.WARNING`; unknown numbers and other types map to
        :data:`FALLBACK_SEVERITY`.
    """

    if isinstance(raw, Severity):
        return raw
    if isinstance(raw, str):
        return Severity.ERROR if raw.strip().lower() == "error" else Severity.WARNING
    if isinstance(raw, bool):
        return FALLBACK_SEVERITY
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    if isinstance(raw, int):
        return _NUMERIC_SEVERITIES.get(raw, FALLBACK_SEVERITY)
    return FALLBACK_SEVERITY


def severity_from_label(label: str) -> Severity:
    """Return the member named by ``label`` (``"error"``, ``"hint"``, ...).

    Raises:
        ValueError: If ``label`` does not name a severity.
    """

    key = label.strip().lower()
    try:
        return Severity[_LABEL_ALIASES.get(key, key).upper()]
    except KeyError as exc:
        raise ValueError(f"unknown severity '{label}'") from exc


__all__ = ["FALLBACK_SEVERITY", "Severity", "map_severity", "severity_from_label"]
