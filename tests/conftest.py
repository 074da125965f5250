# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.fakes import FakeRunner, RecordingPublisher


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """Return an on-disk Python file to validate."""
    path = tmp_path / "project" / "app.py"
    path.parent.mkdir(parents=True)
    path.write_text("x = 1\n", encoding="utf-8")
    return path


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
