# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers for converting between document URIs and filesystem paths."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from pygls.uris import from_fs_path, to_fs_path

FILE_SCHEME = "file"


def is_file_uri(value: str) -> bool:
    return urlparse(value).scheme == FILE_SCHEME


def uri_to_path(uri: str) -> Path | None:
    """Return the filesystem path behind ``uri`` or ``None`` for non-file schemes."""

    if not is_file_uri(uri):
        return None
    fs_path = to_fs_path(uri)
    return Path(fs_path) if fs_path else None


def path_to_uri(path: str | Path) -> str:
    """Return a ``file://`` URI for ``path``.

    Raises:
        ValueError: If the path cannot be expressed as a URI.
    """

    uri = from_fs_path(str(path))
    if uri is None:
        raise ValueError(f"cannot convert '{path}' to a file URI")
    return uri


def as_uri(target: str) -> str:
    """Return ``target`` unchanged when it is a URI, otherwise convert the path."""

    if urlparse(target).scheme and not _looks_like_drive(target):
        return target
    return path_to_uri(target)


def as_path_text(target: str) -> str:
    """Return a path string for ``target`` whether it is a ``file://`` URI or a plain path."""

    if is_file_uri(target):
        return to_fs_path(target) or target
    return target


def _looks_like_drive(target: str) -> bool:
    # "C:\\foo" parses with scheme "c".
    return len(target) > 1 and target[1] == ":" and target[0].isalpha()


__all__ = ["FILE_SCHEME", "as_path_text", "as_uri", "is_file_uri", "path_to_uri", "uri_to_path"]
