# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the language server wiring and protocol conversion."""

from __future__ import annotations

from typing import Any

from lsprotocol import types as lsp

from chalk_lsp.models import DiagnosticRecord, Location, Position, Range, RelatedInformation
from chalk_lsp.server import LanguageServerPublisher, create_server, to_lsp_diagnostic
from chalk_lsp.severity import Severity


def _record(**overrides: Any) -> DiagnosticRecord:
    values: dict[str, Any] = {
        "range": Range(start=Position(line=2, character=0), end=Position(line=2, character=5)),
        "message": "unused variable",
        "severity": Severity.WARNING,
    }
    values.update(overrides)
    return DiagnosticRecord(**values)


class _CapturingServer:
    def __init__(self) -> None:
        self.params: list[lsp.PublishDiagnosticsParams] = []

    def text_document_publish_diagnostics(self, params: lsp.PublishDiagnosticsParams) -> None:
        self.params.append(params)


def test_to_lsp_diagnostic_copies_every_field() -> None:
    related = RelatedInformation(
        location=Location(uri="/project/features.py", range=Range()),
        message="declared here",
    )
    diagnostic = to_lsp_diagnostic(_record(code="W104", related_information=(related,)))

    assert diagnostic.range.start == lsp.Position(line=2, character=0)
    assert diagnostic.range.end == lsp.Position(line=2, character=5)
    assert diagnostic.severity is lsp.DiagnosticSeverity.Warning
    assert diagnostic.code == "W104"
    assert diagnostic.source == "chalk"
    assert diagnostic.related_information is not None
    assert diagnostic.related_information[0].location.uri == "file:///project/features.py"
    assert diagnostic.related_information[0].message == "declared here"


def test_to_lsp_diagnostic_omits_empty_related_information() -> None:
    assert to_lsp_diagnostic(_record()).related_information is None


def test_publisher_sends_full_replacement_set() -> None:
    server = _CapturingServer()
    publisher = LanguageServerPublisher(server)  # type: ignore[arg-type]

    publisher.publish("file:///project/app.py", [_record(), _record(severity=Severity.ERROR)], 7)
    publisher.publish("file:///project/app.py", [], None)

    first, second = server.params
    assert first.uri == "file:///project/app.py"
    assert first.version == 7
    assert [item.severity for item in first.diagnostics] == [
        lsp.DiagnosticSeverity.Warning,
        lsp.DiagnosticSeverity.Error,
    ]
    assert second.diagnostics == []


def test_create_server_registers_document_features() -> None:
    server = create_server()

    features = server.protocol.fm.features
    for method in (
        lsp.TEXT_DOCUMENT_DID_OPEN,
        lsp.TEXT_DOCUMENT_DID_CHANGE,
        lsp.TEXT_DOCUMENT_DID_SAVE,
        lsp.TEXT_DOCUMENT_DID_CLOSE,
        lsp.WORKSPACE_DID_CHANGE_CONFIGURATION,
    ):
        assert method in features
    assert server.orchestrator.config.executable == "chalk"
