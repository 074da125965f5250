# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document validation scheduling and publication.

Every document moves ``IDLE -> VALIDATING -> IDLE``. Each scheduled
validation receives a sequence number; when a run finishes, its result is
published only if no newer run has been scheduled for that document since,
so slow invocations can never overwrite fresher diagnostics.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from .config import ServerConfig
from .errors import ChalkLspError
from .models import DiagnosticRecord, Document
from .pipeline import collect_diagnostics
from .process import CommandRunner, invoke
from .uris import uri_to_path

LOGGER = logging.getLogger(__name__)


class DiagnosticPublisher(Protocol):
    """Destination for a document's full replacement diagnostic set."""

    def publish(self, uri: str, diagnostics: Sequence[DiagnosticRecord], version: int | None) -> None: ...


class ValidationPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"


@dataclass(slots=True)
class DocumentState:
    """Bookkeeping for one open document."""

    sequence: int = 0
    in_flight: int = 0
    pending: asyncio.Task[bool] | None = None
    published: tuple[DiagnosticRecord, ...] | None = None

    @property
    def phase(self) -> ValidationPhase:
        debouncing = self.pending is not None and not self.pending.done()
        if debouncing or self.in_flight:
            return ValidationPhase.VALIDATING
        return ValidationPhase.IDLE


class ValidationOrchestrator:
    """Drive validations for open documents and publish their diagnostics.

    Args:
        publisher: Receives each accepted diagnostic set.
        config: Active configuration; may be replaced later via :attr:`config`.
        workspace_root: Workspace folder bounding project-root discovery.
        runner: Coroutine used to spawn the linter.
    """

    def __init__(
        self,
        publisher: DiagnosticPublisher,
        config: ServerConfig | None = None,
        *,
        workspace_root: Path | None = None,
        runner: CommandRunner = invoke,
    ) -> None:
        self._publisher = publisher
        self._config = config or ServerConfig()
        self._runner = runner
        self._states: dict[str, DocumentState] = {}
        self._tasks: set[asyncio.Task[bool]] = set()
        self.workspace_root = workspace_root

    @property
    def config(self) -> ServerConfig:
        return self._config

    @config.setter
    def config(self, value: ServerConfig) -> None:
        self._config = value

    def phase(self, uri: str) -> ValidationPhase:
        state = self._states.get(uri)
        return state.phase if state is not None else ValidationPhase.IDLE

    def published(self, uri: str) -> tuple[DiagnosticRecord, ...] | None:
        """Return the last diagnostic set published for ``uri``, if any."""

        state = self._states.get(uri)
        return state.published if state is not None else None

    def tracked_uris(self) -> tuple[str, ...]:
        return tuple(self._states)

    def open(self, document: Document) -> asyncio.Task[bool]:
        """Track a newly opened document and validate it right away."""

        self._states.setdefault(document.uri, DocumentState())
        return self.schedule(document, delay=0.0)

    def change(self, document: Document) -> asyncio.Task[bool]:
        return self.schedule(document)

    def save(self, document: Document) -> asyncio.Task[bool]:
        return self.schedule(document, delay=0.0)

    def close(self, uri: str) -> None:
        """Forget ``uri``, discard any outstanding result and clear its diagnostics."""

        state = self._states.pop(uri, None)
        if state is not None and state.pending is not None:
            state.pending.cancel()
        self._publisher.publish(uri, [], None)

    def schedule(self, document: Document, *, delay: float | None = None) -> asyncio.Task[bool]:
        """Start a validation of ``document`` after ``delay`` seconds.

        A validation for the same document that is still waiting out its
        delay is cancelled, so bursts of edits coalesce into one run. Runs
        already talking to the linter are left alone; their results are
        discarded on completion because their sequence number is stale.

        Args:
            document: Snapshot to validate.
            delay: Seconds to wait first; defaults to ``config.debounce_seconds``.

        Returns:
            asyncio.Task[bool]: Resolves to ``True`` when diagnostics were published.
        """

        state = self._states.setdefault(document.uri, DocumentState())
        if state.pending is not None and not state.pending.done():
            state.pending.cancel()
        state.sequence += 1
        wait = self._config.debounce_seconds if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._run(document, state.sequence, wait))
        state.pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, document: Document, sequence: int, delay: float) -> bool:
        if delay > 0:
            await asyncio.sleep(delay)
        state = self._states.get(document.uri)
        if state is not None and state.pending is asyncio.current_task():
            state.pending = None
        return await self.validate(document, sequence)

    async def validate(self, document: Document, sequence: int | None = None) -> bool:
        """Run one validation cycle for ``document`` and publish the outcome.

        Failures are logged and leave the previously published diagnostics in
        place; nothing propagates to the caller.

        Args:
            document: Snapshot to validate.
            sequence: Sequence number issued by :meth:`schedule`; a fresh one
                is issued when omitted.

        Returns:
            bool: ``True`` when a diagnostic set was published.
        """

        path = uri_to_path(document.uri)
        if path is None:
            LOGGER.debug("skipping %s: not a file URI", document.uri)
            return False
        state = self._states.setdefault(document.uri, DocumentState())
        if sequence is None:
            state.sequence += 1
            sequence = state.sequence

        state.in_flight += 1
        try:
            records = await collect_diagnostics(
                document.uri,
                path,
                self._config,
                workspace_root=self.workspace_root,
                runner=self._runner,
            )
        except ChalkLspError as exc:
            LOGGER.error("Validation of %s failed: %s", document.uri, exc)
            return False
        except Exception:
            LOGGER.exception("Unexpected error while validating %s", document.uri)
            return False
        finally:
            state.in_flight -= 1

        if self._states.get(document.uri) is not state or sequence != state.sequence:
            LOGGER.debug("dropping stale result #%d for %s", sequence, document.uri)
            return False
        state.published = tuple(records)
        self._publisher.publish(document.uri, records, document.version)
        LOGGER.debug("published %d diagnostic(s) for %s", len(records), document.uri)
        return True

    async def drain(self) -> None:
        """Wait until every scheduled validation has finished."""

        while True:
            tasks = [task for task in self._tasks if not task.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def shutdown(self) -> None:
        """Cancel all outstanding validations."""

        for task in tuple(self._tasks):
            task.cancel()


__all__ = ["DiagnosticPublisher", "DocumentState", "ValidationOrchestrator", "ValidationPhase"]
