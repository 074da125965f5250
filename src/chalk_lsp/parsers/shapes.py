# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decoders for the response envelopes emitted by different ``chalk`` releases."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Final, cast

from ..errors import MalformedOutput
from ..models import DiagnosticGroup
from ..severity import Severity
from .base import DecodeContext, JsonValue, ResponseDecoder, coerce_optional_str, require_mapping, require_sequence
from .records import build_group

LOGGER = logging.getLogger(__name__)


def _decode_group_list(value: JsonValue | None, context: DecodeContext, what: str) -> list[DiagnosticGroup]:
    """Return groups from a ``[{"uri": ..., "diagnostics": [...]}, ...]`` array."""

    groups: list[DiagnosticGroup] = []
    for index, item in enumerate(require_sequence(value, what)):
        if not isinstance(item, Mapping):
            LOGGER.debug("%s[%d] is not an object; skipping", what, index)
            continue
        uri = coerce_optional_str(item.get("uri")) or coerce_optional_str(item.get("path"))
        if uri is None:
            LOGGER.debug("%s[%d] names no file; skipping", what, index)
            continue
        groups.append(build_group(uri, item.get("diagnostics"), context))
    return groups


def decode_flat_list(payload: JsonValue, context: DecodeContext) -> Sequence[DiagnosticGroup]:
    """Decode ``{"errors": [...]}``; every entry belongs to the requested document.

    This shape predates numeric severities; entries without one are warnings.
    """

    envelope = require_mapping(payload, "response")
    if "errors" not in envelope:
        raise MalformedOutput("no 'errors' field")
    entries = envelope["errors"]
    require_sequence(entries, "'errors'")
    flat_context = replace(context, missing_severity=Severity.WARNING)
    return [build_group(context.requested_uri, entries, flat_context)]


def decode_nested_error(payload: JsonValue, context: DecodeContext) -> Sequence[DiagnosticGroup]:
    """Decode ``{"error": "<json>"}`` whose inner document carries ``lsp.diagnostics``."""

    envelope = require_mapping(payload, "response")
    if "error" not in envelope:
        raise MalformedOutput("no 'error' field")
    inner: JsonValue = envelope["error"]
    if isinstance(inner, str):
        try:
            inner = cast(JsonValue, json.loads(inner))
        except (json.JSONDecodeError, RecursionError) as exc:
            raise MalformedOutput(f"'error' does not hold JSON: {exc}") from exc
    lsp_section = require_mapping(require_mapping(inner, "'error'").get("lsp"), "'error.lsp'")
    return _decode_group_list(lsp_section.get("diagnostics"), context, "'error.lsp.diagnostics'")


def decode_proto_envelope(payload: JsonValue, context: DecodeContext) -> Sequence[DiagnosticGroup]:
    """Decode ``{"lsp_proto": {"diagnostics": [...]}}`` with numeric severities."""

    envelope = require_mapping(payload, "response")
    if "lsp_proto" not in envelope:
        raise MalformedOutput("no 'lsp_proto' field")
    proto = require_mapping(envelope["lsp_proto"], "'lsp_proto'")
    return _decode_group_list(proto.get("diagnostics"), context, "'lsp_proto.diagnostics'")


FLAT_LIST: Final[ResponseDecoder] = ResponseDecoder(name="flat-list", transform=decode_flat_list)
NESTED_ERROR: Final[ResponseDecoder] = ResponseDecoder(name="nested-error", transform=decode_nested_error)
PROTO_ENVELOPE: Final[ResponseDecoder] = ResponseDecoder(name="proto-envelope", transform=decode_proto_envelope)

DEFAULT_DECODERS: Final[tuple[ResponseDecoder, ...]] = (FLAT_LIST, NESTED_ERROR, PROTO_ENVELOPE)


__all__ = [
    "DEFAULT_DECODERS",
    "FLAT_LIST",
    "NESTED_ERROR",
    "PROTO_ENVELOPE",
    "decode_flat_list",
    "decode_nested_error",
    "decode_proto_envelope",
]
