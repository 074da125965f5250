# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Logging setup and user-facing console helpers.

Log records go to stderr through :class:`rich.logging.RichHandler`; stdout
is reserved for the LSP stream when the server runs over stdio.
"""

from __future__ import annotations

import logging
import sys
from typing import Final, Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_CONSOLES: dict[tuple[bool, bool, bool, bool], Console] = {}


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def get_console(*, color: bool = True, emoji: bool = True, stderr: bool = False) -> Console:
    """Return a cached Rich console configured for the given presentation flags.

    Args:
        color: ``True`` when ANSI colour output should be enabled.
        emoji: ``True`` when Rich should render emoji glyphs.
        stderr: ``True`` to write to standard error instead of standard output.

    Returns:
        Console: Console instance shared by callers asking for the same flags.
    """

    tty = detect_tty()
    key = (color, emoji, stderr, tty)
    if key not in _CONSOLES:
        color_system: Literal["auto"] | None = "auto" if color and tty else None
        _CONSOLES[key] = Console(
            color_system=color_system,
            no_color=not (color and tty),
            emoji=emoji,
            stderr=stderr,
            soft_wrap=True,
        )
    return _CONSOLES[key]


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    """Route all log records through a single stderr :class:`RichHandler`.

    Raises:
        ValueError: If ``level`` is not a standard logging level name.
    """

    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"unknown log level '{level}'")
    handler = RichHandler(
        console=console or get_console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(level=normalized, format="%(name)s: %(message)s", handlers=[handler], force=True)


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(msg: str, *, style: str, use_emoji: bool, use_color: bool | None, stderr: bool = False) -> None:
    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console(color=color_enabled, emoji=use_emoji, stderr=stderr)
    text = Text(msg)
    if color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool = True, use_color: bool | None = None) -> None:
    """Emit an error message on standard error."""

    _print_line(
        f"{emoji('❌ ', use_emoji)}{msg}",
        style="red",
        use_emoji=use_emoji,
        use_color=use_color,
        stderr=True,
    )


__all__ = [
    "LOG_LEVELS",
    "configure_logging",
    "detect_tty",
    "emoji",
    "fail",
    "get_console",
    "info",
    "ok",
    "warn",
]
