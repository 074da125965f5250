# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and layered loading for the language server."""

from __future__ import annotations

import logging
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .severity import Severity, severity_from_label

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_SECTION: Final[str] = "chalk-lsp"
_CAMEL_BOUNDARY: Final[re.Pattern[str]] = re.compile(r"(?<!^)(?=[A-Z])")


class ServerConfig(BaseModel):
    """Settings controlling how ``chalk`` is invoked and what gets published."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    executable: str = "chalk"
    lint_args: list[str] = Field(default_factory=lambda: ["lint", "--format=lsp"])
    lint_whole_project: bool = False
    project_markers: list[str] = Field(default_factory=lambda: ["chalk.yaml", "chalk.yml"])
    timeout_seconds: float | None = Field(default=60.0, gt=0)
    debounce_seconds: float = Field(default=0.3, ge=0)
    source: str = "chalk"
    minimum_severity: Severity = Severity.HINT
    max_problems: int | None = Field(default=None, ge=1)

    @field_validator("minimum_severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> object:
        """Accept severity labels such as ``"warning"`` as well as LSP numbers."""
        if isinstance(value, str):
            return severity_from_label(value)
        return value

    @field_validator("executable")
    @classmethod
    def _require_executable(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("executable must not be empty")
        return value.strip()


def normalize_key(key: str) -> str:
    """Return ``key`` in snake_case (``lintArgs`` and ``lint-args`` become ``lint_args``)."""

    return _CAMEL_BOUNDARY.sub("_", key.replace("-", "_")).lower()


def _normalize_settings(settings: Mapping[str, Any]) -> dict[str, Any]:
    return {normalize_key(str(key)): value for key, value in settings.items()}


def merge_settings(base: ServerConfig, overrides: Mapping[str, Any] | None) -> ServerConfig:
    """Return a new config with ``overrides`` layered on top of ``base``.

    Raises:
        ConfigError: If the merged settings fail validation.
    """

    if not overrides:
        return base
    merged = base.model_dump()
    merged.update(_normalize_settings(overrides))
    try:
        return ServerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid chalk-lsp settings: {exc}") from exc


def load_pyproject_settings(root: Path) -> dict[str, Any]:
    """Return the ``[tool.chalk-lsp]`` table from ``root/pyproject.toml`` if present.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """

    pyproject = root / PYPROJECT_FILENAME
    if not pyproject.is_file():
        return {}
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"unable to read {pyproject}: {exc}") from exc
    tool = data.get("tool")
    if not isinstance(tool, dict):
        return {}
    section = tool.get(PYPROJECT_SECTION)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION}] in {pyproject} must be a table")
    return dict(section)


def load_config(
    workspace_root: Path | None = None,
    init_options: Mapping[str, Any] | None = None,
    *,
    base: ServerConfig | None = None,
) -> ServerConfig:
    """Resolve configuration from defaults, the workspace ``pyproject.toml`` and editor options.

    Args:
        workspace_root: Root folder reported by the client, if any.
        init_options: ``initializationOptions`` sent by the editor.
        base: Starting configuration; defaults to :class:`ServerConfig` defaults.

    Returns:
        ServerConfig: Fully validated configuration.

    Raises:
        ConfigError: If any layer holds invalid settings.
    """

    config = base or ServerConfig()
    if workspace_root is not None:
        config = merge_settings(config, load_pyproject_settings(workspace_root))
    config = merge_settings(config, init_options)
    LOGGER.debug("resolved configuration: %s", config.model_dump())
    return config


__all__ = [
    "PYPROJECT_SECTION",
    "ServerConfig",
    "load_config",
    "load_pyproject_settings",
    "merge_settings",
    "normalize_key",
]
