# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Conversion of individual linter entries into diagnostic records."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..models import DiagnosticGroup, DiagnosticRecord, Location, Position, Range, RelatedInformation
from ..severity import map_severity
from .base import DecodeContext, JsonValue, coerce_mapping, coerce_optional_int, coerce_optional_str, iter_dicts

LOGGER = logging.getLogger(__name__)


def _coordinate(value: JsonValue | None) -> int:
    number = coerce_optional_int(value)
    if number is None or number < 0:
        return 0
    return number


def build_position(value: JsonValue | None) -> Position:
    """Return a :class:`Position` with negative or missing coordinates clamped to zero."""

    payload = coerce_mapping(value)
    return Position(line=_coordinate(payload.get("line")), character=_coordinate(payload.get("character")))


def build_range(value: JsonValue | None) -> Range:
    """Return a well-ordered :class:`Range` from a tool-supplied range object.

    Args:
        value: ``{"start": {...}, "end": {...}}`` mapping as emitted by the tool.

    Returns:
        Range: Clamped span. An end that precedes the start collapses onto
        the start; a missing end equals the start.
    """

    payload = coerce_mapping(value)
    start = build_position(payload.get("start"))
    end = build_position(payload.get("end")) if "end" in payload else start
    if end.as_tuple() < start.as_tuple():
        end = start
    return Range(start=start, end=end)


def _code(value: JsonValue | None) -> str | None:
    if isinstance(value, Mapping):
        # LSP 3.16 code descriptions nest the value.
        return coerce_optional_str(value.get("value"))
    return coerce_optional_str(value)


def build_related_information(value: JsonValue | None) -> tuple[RelatedInformation, ...]:
    """Return related locations, skipping entries without a usable location."""

    related: list[RelatedInformation] = []
    for item in iter_dicts(value):
        location = coerce_mapping(item.get("location"))
        uri = coerce_optional_str(location.get("uri"))
        if uri is None:
            LOGGER.debug("skipping related information without a location uri: %r", item)
            continue
        related.append(
            RelatedInformation(
                location=Location(uri=uri, range=build_range(location.get("range"))),
                message=coerce_optional_str(item.get("message")) or "",
            )
        )
    return tuple(related)


def build_record(entry: Mapping[str, JsonValue], context: DecodeContext) -> DiagnosticRecord | None:
    """Return a :class:`DiagnosticRecord` for ``entry`` or ``None`` when it has no message.

    Args:
        entry: One diagnostic object from any supported response shape.
        context: Decode context supplying the source tag.

    Returns:
        DiagnosticRecord | None: Normalized record, or ``None`` for entries
        that cannot be shown to the user.
    """

    message = entry.get("message")
    if not isinstance(message, str) or not message.strip():
        LOGGER.debug("skipping diagnostic entry without a message: %r", entry)
        return None
    raw_severity = entry.get("severity")
    severity = context.missing_severity if raw_severity is None else map_severity(raw_severity)
    return DiagnosticRecord(
        range=build_range(entry.get("range")),
        message=message,
        severity=severity,
        code=_code(entry.get("code")),
        source=context.source,
        related_information=build_related_information(entry.get("relatedInformation")),
    )


def build_group(target_uri: str, entries: JsonValue | None, context: DecodeContext) -> DiagnosticGroup:
    """Return a :class:`DiagnosticGroup` holding every decodable entry in order."""

    records = [record for entry in iter_dicts(entries) if (record := build_record(entry, context)) is not None]
    return DiagnosticGroup(target_uri=target_uri, diagnostics=tuple(records))


__all__ = [
    "build_group",
    "build_position",
    "build_range",
    "build_record",
    "build_related_information",
]
