# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared parser infrastructure: JSON loading, coercion and the decoder contract."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias, cast

from ..errors import MalformedOutput
from ..models import DiagnosticGroup
from ..severity import FALLBACK_SEVERITY, Severity

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]


@dataclass(frozen=True, slots=True)
class DecodeContext:
    """Request-level values every decoder needs.

    Attributes:
        requested_uri: URI of the document the linter was invoked for; used
            by shapes that do not name the file they report on.
        source: Tag written to ``DiagnosticRecord.source``.
        missing_severity: Severity given to entries that carry none.
    """

    requested_uri: str
    source: str = "chalk"
    missing_severity: Severity = FALLBACK_SEVERITY


@dataclass(frozen=True, slots=True)
class Decoded:
    """Successful decode carrying the normalized groups."""

    decoder: str
    groups: tuple[DiagnosticGroup, ...]

    @property
    def has_diagnostics(self) -> bool:
        return any(group.diagnostics for group in self.groups)


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """Decoder did not recognise (or could not read) the payload."""

    decoder: str
    reason: str


DecodeResult: TypeAlias = Decoded | DecodeFailure
GroupTransform = Callable[[JsonValue, DecodeContext], Sequence[DiagnosticGroup]]


@dataclass(frozen=True, slots=True)
class ResponseDecoder:
    """Named decoder for one response envelope.

    ``transform`` raises :class:`MalformedOutput` when the payload is not the
    envelope it understands; :meth:`decode` turns that into a
    :class:`DecodeFailure` so nothing escapes the stage.
    """

    name: str
    transform: GroupTransform

    def decode(self, payload: JsonValue, context: DecodeContext) -> DecodeResult:
        try:
            groups = tuple(self.transform(payload, context))
        except MalformedOutput as exc:
            return DecodeFailure(decoder=self.name, reason=str(exc))
        return Decoded(decoder=self.name, groups=groups)


def load_json_documents(stdout: str) -> list[JsonValue]:
    """Return the JSON documents contained in ``stdout``.

    The whole stream is tried first; when that fails each non-blank line is
    decoded on its own so line-delimited output and stray log lines are
    tolerated.

    Args:
        stdout: Raw standard output captured from the linter.

    Returns:
        list[JsonValue]: Decoded documents, empty when ``stdout`` is blank.

    Raises:
        MalformedOutput: If ``stdout`` is not blank but contains no JSON.
    """

    text = stdout.strip()
    if not text:
        return []
    try:
        return [cast(JsonValue, json.loads(text))]
    except (json.JSONDecodeError, RecursionError) as exc:
        first_error = exc
    documents: list[JsonValue] = []
    for raw_line in text.splitlines():
        trimmed = raw_line.strip()
        if not trimmed:
            continue
        try:
            documents.append(cast(JsonValue, json.loads(trimmed)))
        except (json.JSONDecodeError, RecursionError):
            continue
    if not documents:
        raise MalformedOutput(f"stdout is not JSON: {first_error}")
    return documents


def require_mapping(value: JsonValue | None, what: str) -> Mapping[str, JsonValue]:
    """Return ``value`` as a mapping or raise :class:`MalformedOutput`."""

    if isinstance(value, Mapping):
        return value
    raise MalformedOutput(f"{what} is not an object")


def require_sequence(value: JsonValue | None, what: str) -> Sequence[JsonValue]:
    """Return ``value`` as a list or raise :class:`MalformedOutput`."""

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise MalformedOutput(f"{what} is not an array")


def iter_dicts(value: JsonValue | None) -> Iterator[Mapping[str, JsonValue]]:
    """Yield mapping items from ``value`` when it is a sequence of dict-like objects."""

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        for item in value:
            if isinstance(item, Mapping):
                yield item


def coerce_mapping(value: JsonValue | None) -> Mapping[str, JsonValue]:
    return value if isinstance(value, Mapping) else {}


def coerce_optional_int(value: JsonValue | None) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_optional_str(value: JsonValue | None) -> str | None:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None


__all__ = [
    "DecodeContext",
    "DecodeFailure",
    "DecodeResult",
    "Decoded",
    "GroupTransform",
    "JsonValue",
    "ResponseDecoder",
    "coerce_mapping",
    "coerce_optional_int",
    "coerce_optional_str",
    "iter_dicts",
    "load_json_documents",
    "require_mapping",
    "require_sequence",
]
