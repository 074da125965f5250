# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point: run the language server or lint a single file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from .config import load_config
from .errors import ChalkLspError, ConfigError
from .logging import LOG_LEVELS, configure_logging, fail, get_console, ok, warn
from .pipeline import collect_diagnostics
from .reporting import render_table, serialize_records, summarize
from .severity import Severity
from .uris import path_to_uri

EXIT_PROBLEMS = 1
EXIT_UNAVAILABLE = 2

app = typer.Typer(
    help="Language server publishing chalk lint diagnostics.",
    add_completion=False,
    no_args_is_help=True,
)


def _validate_log_level(value: str) -> str:
    if value.upper() not in LOG_LEVELS:
        raise typer.BadParameter(f"choose one of {', '.join(LOG_LEVELS)}")
    return value.upper()


@app.command("serve")
def serve_command(
    tcp: bool = typer.Option(False, "--tcp", help="Listen on TCP instead of stdio."),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind with --tcp."),
    port: int = typer.Option(2087, "--port", help="Port to bind with --tcp."),
    log_level: str = typer.Option("INFO", "--log-level", callback=_validate_log_level, help="Logging level."),
) -> None:
    """Run the language server."""

    from .server import create_server

    configure_logging(log_level)
    server = create_server()
    if tcp:
        server.start_tcp(host, port)
    else:
        server.start_io()


@app.command("lint")
def lint_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="File to lint."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Workspace root holding pyproject.toml (default: cwd)."),
    executable: str | None = typer.Option(None, "--executable", "-e", help="Linter executable to run."),
    min_severity: str | None = typer.Option(None, "--min-severity", help="Hide less urgent diagnostics."),
    output_json: bool = typer.Option(False, "--json", help="Print diagnostics as JSON."),
    use_emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji output."),
    log_level: str = typer.Option("WARNING", "--log-level", callback=_validate_log_level, help="Logging level."),
) -> None:
    """Lint PATH once and print the diagnostics an editor would receive."""

    configure_logging(log_level)
    workspace_root = (root or Path.cwd()).resolve()
    overrides: dict[str, Any] = {}
    if executable:
        overrides["executable"] = executable
    if min_severity:
        overrides["minimum_severity"] = min_severity
    try:
        config = load_config(workspace_root, overrides)
    except ConfigError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=EXIT_UNAVAILABLE) from exc

    try:
        records = asyncio.run(collect_diagnostics(path_to_uri(path), path, config, workspace_root=workspace_root))
    except ChalkLspError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=EXIT_UNAVAILABLE) from exc

    has_errors = any(record.severity is Severity.ERROR for record in records)
    if output_json:
        typer.echo(json.dumps(serialize_records(records), indent=2))
    else:
        if records:
            render_table(get_console(emoji=use_emoji), path, records)
        summary = summarize(records)
        if has_errors:
            warn(f"{path.name}: {summary}", use_emoji=use_emoji)
        else:
            ok(f"{path.name}: {summary}", use_emoji=use_emoji)
    raise typer.Exit(code=EXIT_PROBLEMS if has_errors else 0)


def main() -> None:
    app()


__all__ = ["app", "main"]
