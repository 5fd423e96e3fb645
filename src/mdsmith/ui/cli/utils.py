"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import sys

from mdsmith.core.exceptions import DocumentParseError


def decode_document(data: bytes, source: str) -> str:
    """Decode UTF-8 ``data`` without translating line endings."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentParseError(f"{source} is not valid UTF-8: {exc.reason}.") from exc


def read_document(path: Path) -> str:
    return decode_document(path.read_bytes(), str(path))


def read_inputs(paths: Iterable[Path] | None) -> str:
    """Return the concatenated content of ``paths`` or standard input when none are given."""
    documents = list(paths or ())
    if not documents:
        return sys.stdin.read()
    return "".join(read_document(path) for path in documents)


def write_if_changed(path: Path, original: str, updated: str) -> bool:
    """Write ``updated`` to ``path`` unless it equals ``original``."""
    if updated == original:
        return False
    path.write_bytes(updated.encode("utf-8"))
    return True


__all__ = ["decode_document", "read_document", "read_inputs", "write_if_changed"]
