# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""pygls language server exposing ``chalk lint`` diagnostics."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from . import __version__
from .config import ServerConfig, load_config, merge_settings
from .errors import ConfigError
from .models import DiagnosticRecord, Document, Range
from .orchestrator import ValidationOrchestrator
from .process import CommandRunner, invoke
from .uris import as_uri

LOGGER = logging.getLogger(__name__)

SERVER_NAME = "chalk-lsp"
SETTINGS_KEYS = ("chalk-lsp", "chalkLsp", "chalk")


def to_lsp_range(value: Range) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=value.start.line, character=value.start.character),
        end=lsp.Position(line=value.end.line, character=value.end.character),
    )


def to_lsp_diagnostic(record: DiagnosticRecord) -> lsp.Diagnostic:
    """Convert a :class:`DiagnosticRecord` into its protocol representation."""

    related = [
        lsp.DiagnosticRelatedInformation(
            location=lsp.Location(uri=as_uri(item.location.uri), range=to_lsp_range(item.location.range)),
            message=item.message,
        )
        for item in record.related_information
    ]
    return lsp.Diagnostic(
        range=to_lsp_range(record.range),
        message=record.message,
        severity=record.severity.to_lsp(),
        code=record.code,
        source=record.source,
        related_information=related or None,
    )


class LanguageServerPublisher:
    """Publish diagnostic sets as ``textDocument/publishDiagnostics`` notifications."""

    def __init__(self, server: LanguageServer) -> None:
        self._server = server

    def publish(self, uri: str, diagnostics: Sequence[DiagnosticRecord], version: int | None) -> None:
        self._server.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(
                uri=uri,
                version=version,
                diagnostics=[to_lsp_diagnostic(record) for record in diagnostics],
            )
        )


class ChalkLanguageServer(LanguageServer):
    """Language server owning a :class:`ValidationOrchestrator`."""

    def __init__(self, config: ServerConfig | None = None, *, runner: CommandRunner = invoke) -> None:
        super().__init__(
            name=SERVER_NAME,
            version=__version__,
            text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
        )
        self.base_config = config or ServerConfig()
        self.publisher = LanguageServerPublisher(self)
        self.orchestrator = ValidationOrchestrator(self.publisher, self.base_config, runner=runner)

    def snapshot(self, uri: str) -> Document:
        """Return the current contents of ``uri`` as tracked by the workspace."""

        text_document = self.workspace.get_text_document(uri)
        return Document(uri=uri, version=text_document.version, text=text_document.source)


def _section(settings: Any) -> Mapping[str, Any] | None:
    if not isinstance(settings, Mapping):
        return None
    for key in SETTINGS_KEYS:
        value = settings.get(key)
        if isinstance(value, Mapping):
            return value
    return settings


def create_server(config: ServerConfig | None = None, *, runner: CommandRunner = invoke) -> ChalkLanguageServer:
    """Build a :class:`ChalkLanguageServer` with all LSP features registered.

    Args:
        config: Base configuration before workspace and editor overrides.
        runner: Coroutine used to spawn the linter.

    Returns:
        ChalkLanguageServer: Server ready for ``start_io``/``start_tcp``.
    """

    server = ChalkLanguageServer(config, runner=runner)

    @server.feature(lsp.INITIALIZE)
    def on_initialize(ls: ChalkLanguageServer, params: lsp.InitializeParams) -> None:
        root = Path(ls.workspace.root_path) if ls.workspace.root_path else None
        ls.orchestrator.workspace_root = root
        options = _section(params.initialization_options)
        try:
            ls.orchestrator.config = load_config(root, options, base=ls.base_config)
        except ConfigError as exc:
            LOGGER.error("Ignoring invalid configuration: %s", exc)

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    async def did_open(ls: ChalkLanguageServer, params: lsp.DidOpenTextDocumentParams) -> None:
        item = params.text_document
        ls.orchestrator.open(Document(uri=item.uri, version=item.version, text=item.text))

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    async def did_change(ls: ChalkLanguageServer, params: lsp.DidChangeTextDocumentParams) -> None:
        ls.orchestrator.change(ls.snapshot(params.text_document.uri))

    @server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
    async def did_save(ls: ChalkLanguageServer, params: lsp.DidSaveTextDocumentParams) -> None:
        ls.orchestrator.save(ls.snapshot(params.text_document.uri))

    @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
    def did_close(ls: ChalkLanguageServer, params: lsp.DidCloseTextDocumentParams) -> None:
        ls.orchestrator.close(params.text_document.uri)

    @server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
    async def did_change_configuration(ls: ChalkLanguageServer, params: lsp.DidChangeConfigurationParams) -> None:
        options = _section(params.settings)
        if not options:
            return
        try:
            ls.orchestrator.config = merge_settings(ls.orchestrator.config, options)
        except ConfigError as exc:
            LOGGER.error("Ignoring invalid configuration: %s", exc)
            return
        for uri in ls.orchestrator.tracked_uris():
            ls.orchestrator.schedule(ls.snapshot(uri), delay=0.0)

    @server.feature(lsp.SHUTDOWN)
    def on_shutdown(ls: ChalkLanguageServer, params: None) -> None:
        ls.orchestrator.shutdown()

    return server


__all__ = [
    "ChalkLanguageServer",
    "LanguageServerPublisher",
    "SERVER_NAME",
    "create_server",
    "to_lsp_diagnostic",
    "to_lsp_range",
]
