"""Custom exception hierarchy for the markdown conversion tools."""

from __future__ import annotations


class MdsmithError(RuntimeError):
    """Base exception for conversion failures."""


class DocumentParseError(MdsmithError):
    """Raised when a document cannot be decoded or parsed at all."""


class ConfigError(MdsmithError):
    """Raised when a configuration file is unreadable or invalid."""


class TransformLookupError(MdsmithError):
    """Raised when a transform slug is not registered."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None
