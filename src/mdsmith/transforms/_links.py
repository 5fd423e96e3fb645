"""Formatting helpers for link syntax emitted by the link transforms."""

from __future__ import annotations

from mdsmith.core.occurrences import LinkTarget


def _balanced_parentheses(url: str) -> bool:
    depth = 0
    escaped = False
    for char in url:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def format_destination(url: str) -> str:
    """Return ``url`` as a link destination, using ``<...>`` when a bare one would not parse."""
    needs_brackets = (
        not url
        or any(char.isspace() for char in url)
        or "<" in url
        or ">" in url
        or not _balanced_parentheses(url)
    )
    if not needs_brackets:
        return url
    escaped = url.replace("<", "\\<").replace(">", "\\>")
    return f"<{escaped}>"


def format_title(title: str) -> str:
    escaped = title.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_target(target: LinkTarget) -> str:
    """Return ``url`` or ``url "title"`` for use in either link form."""
    destination = format_destination(target.url)
    if not target.title:
        return destination
    return f"{destination} {format_title(target.title)}"


def format_inline_link(label: str, target: LinkTarget, *, image: bool = False) -> str:
    prefix = "!" if image else ""
    return f"{prefix}[{label}]({format_target(target)})"


def format_reference_definition(number: int, target: LinkTarget) -> str:
    return f"[{number}]: {format_target(target)}"
