# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn raw ``chalk lint`` output into normalized diagnostic groups."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..errors import MalformedOutput
from ..models import DiagnosticGroup, RawToolOutput
from .base import DecodeContext, DecodeFailure, Decoded, JsonValue, ResponseDecoder, load_json_documents
from .shapes import DEFAULT_DECODERS

LOGGER = logging.getLogger(__name__)


def decode_document(
    payload: JsonValue,
    context: DecodeContext,
    decoders: Sequence[ResponseDecoder] = DEFAULT_DECODERS,
) -> list[DiagnosticGroup]:
    """Run ``decoders`` in priority order against one JSON document.

    The first decoder whose groups carry at least one diagnostic wins. A
    decoder that recognises its envelope but finds nothing lets later
    decoders try; if none finds anything the document reports no problems.

    Args:
        payload: One decoded JSON document from the tool's stdout.
        context: Request-level decode context.
        decoders: Candidate decoders, most preferred first.

    Returns:
        list[DiagnosticGroup]: Groups produced by the winning decoder.
    """

    failures: list[DecodeFailure] = []
    recognised = False
    for decoder in decoders:
        result = decoder.decode(payload, context)
        if isinstance(result, DecodeFailure):
            failures.append(result)
            continue
        recognised = True
        if result.has_diagnostics:
            LOGGER.debug("decoded %d group(s) with %s", len(result.groups), result.decoder)
            return list(result.groups)
    if not recognised:
        reasons = "; ".join(f"{failure.decoder}: {failure.reason}" for failure in failures)
        LOGGER.warning("Unrecognised linter response (%s)", reasons)
    return []


def parse_output(
    raw: RawToolOutput,
    requested_uri: str,
    *,
    source: str = "chalk",
    decoders: Sequence[ResponseDecoder] = DEFAULT_DECODERS,
) -> list[DiagnosticGroup]:
    """Return every diagnostic group found in ``raw.stdout``.

    Never raises for bad output: blank stdout means no problems and
    unreadable stdout is logged and treated the same way.
    """

    context = DecodeContext(requested_uri=requested_uri, source=source)
    try:
        documents = load_json_documents(raw.stdout)
    except MalformedOutput as exc:
        LOGGER.warning("Failed to parse linter output: %s", exc)
        return []
    groups: list[DiagnosticGroup] = []
    for payload in documents:
        groups.extend(decode_document(payload, context, decoders))
    return groups


__all__ = [
    "DEFAULT_DECODERS",
    "DecodeContext",
    "DecodeFailure",
    "Decoded",
    "ResponseDecoder",
    "decode_document",
    "parse_output",
]
