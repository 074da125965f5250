# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console and JSON rendering of diagnostics for the command line."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Final

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import DiagnosticRecord
from .severity import Severity

SEVERITY_STYLES: Final[dict[Severity, str]] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFORMATION: "cyan",
    Severity.HINT: "dim",
}


def format_location(path: Path | str, record: DiagnosticRecord) -> str:
    """Return ``path:line:col`` using one-based line and column numbers."""

    start = record.range.start
    return f"{path}:{start.line + 1}:{start.character + 1}"


def serialize_record(record: DiagnosticRecord) -> dict[str, Any]:
    """Convert a record into a JSON-friendly mapping."""

    payload = record.model_dump(mode="json")
    payload["severity"] = record.severity.label
    return payload


def serialize_records(records: Sequence[DiagnosticRecord]) -> list[dict[str, Any]]:
    return [serialize_record(record) for record in records]


def severity_counts(records: Sequence[DiagnosticRecord]) -> Counter[Severity]:
    return Counter(record.severity for record in records)


def render_table(console: Console, path: Path | str, records: Sequence[DiagnosticRecord]) -> None:
    """Print ``records`` for ``path`` as a Rich table."""

    table = Table(title=str(path), box=box.SIMPLE, expand=True)
    table.add_column("Location", style="bold", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Code")
    table.add_column("Message", overflow="fold")
    for record in records:
        style = SEVERITY_STYLES.get(record.severity, "")
        table.add_row(
            Text(format_location(path, record)),
            f"[{style}]{record.severity.label}[/]" if style else record.severity.label,
            Text(record.code or "-"),
            Text(record.message),
        )
    console.print(table)


def summarize(records: Sequence[DiagnosticRecord]) -> str:
    """Return a one-line summary such as ``1 error, 2 warnings``."""

    counts = severity_counts(records)
    parts = []
    for severity in Severity:
        count = counts.get(severity, 0)
        if count:
            noun = severity.label if count == 1 else f"{severity.label}s"
            parts.append(f"{count} {noun}")
    return ", ".join(parts) if parts else "no problems"


__all__ = [
    "format_location",
    "render_table",
    "serialize_record",
    "serialize_records",
    "severity_counts",
    "summarize",
]
