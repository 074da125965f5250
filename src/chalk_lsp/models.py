# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the chalk_lsp package."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .severity import Severity


class Position(BaseModel):
    """Zero-based line/character offset inside a document."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(default=0, ge=0)
    character: int = Field(default=0, ge=0)

    def as_tuple(self) -> tuple[int, int]:
        return (self.line, self.character)


class Range(BaseModel):
    """Half-open span between two positions; ``start`` never follows ``end``."""

    model_config = ConfigDict(frozen=True)

    start: Position = Field(default_factory=Position)
    end: Position = Field(default_factory=Position)

    @model_validator(mode="after")
    def _check_order(self) -> Range:
        """Reject spans whose end precedes their start."""
        if self.end.as_tuple() < self.start.as_tuple():
            raise ValueError(f"range end {self.end.as_tuple()} precedes start {self.start.as_tuple()}")
        return self


class Location(BaseModel):
    """A range inside the resource identified by ``uri``."""

    model_config = ConfigDict(frozen=True)

    uri: str
    range: Range


class RelatedInformation(BaseModel):
    """Secondary location attached to a diagnostic (e.g. the original definition)."""

    model_config = ConfigDict(frozen=True)

    location: Location
    message: str


class DiagnosticRecord(BaseModel):
    """Normalized diagnostic ready for publication to the client."""

    model_config = ConfigDict(frozen=True)

    range: Range
    message: str
    severity: Severity
    code: str | None = None
    source: str = "chalk"
    related_information: tuple[RelatedInformation, ...] = Field(default_factory=tuple)


class DiagnosticGroup(BaseModel):
    """Diagnostics the linter attributes to a single file within one response."""

    model_config = ConfigDict(frozen=True)

    target_uri: str
    diagnostics: tuple[DiagnosticRecord, ...] = Field(default_factory=tuple)


class Document(BaseModel):
    """Snapshot of an editor document taken for one validation cycle."""

    model_config = ConfigDict(frozen=True)

    uri: str
    version: int | None = None
    text: str = ""


class RawToolOutput(BaseModel):
    """Captured result of a single linter invocation."""

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...] = Field(default_factory=tuple)
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    spawn_error: str | None = None


__all__ = [
    "DiagnosticGroup",
    "DiagnosticRecord",
    "Document",
    "Location",
    "Position",
    "Range",
    "RawToolOutput",
    "RelatedInformation",
]
