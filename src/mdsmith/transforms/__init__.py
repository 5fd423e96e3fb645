"""Central registry of the document transforms shipped with mdsmith."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from mdsmith.core.config import MdsmithConfig
from mdsmith.core.diagnostics import DiagnosticEmitter
from mdsmith.core.exceptions import DocumentParseError, TransformLookupError


__all__ = [
    "TransformFunc",
    "TransformSpec",
    "available_transforms",
    "get_transform_spec",
    "load_transform",
]


TransformFunc = Callable[[str, MdsmithConfig | None, DiagnosticEmitter | None], str]


def _load_attribute(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        msg = f"Transform entry point '{path}' must use the 'module:attribute' format."
        raise ValueError(msg)
    target: Any = import_module(module_name)
    for chunk in attribute.split("."):
        target = getattr(target, chunk)
    return target


@dataclass(frozen=True, slots=True)
class TransformSpec:
    """Describe a transform and where its implementation lives."""

    slug: str
    entry: str
    description: str

    def load(self) -> TransformFunc:
        return _load_attribute(self.entry)

    def apply(
        self,
        content: str,
        config: MdsmithConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> str:
        return self.load()(content, config, emitter)

    def apply_bytes(
        self,
        data: bytes,
        config: MdsmithConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> bytes:
        """Apply the transform to UTF-8 encoded ``data``."""
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentParseError(f"Input is not valid UTF-8: {exc.reason}.") from exc
        return self.apply(content, config, emitter).encode("utf-8")


_TRANSFORMS: dict[str, TransformSpec] = {
    "ref": TransformSpec(
        slug="ref",
        entry="mdsmith.transforms.references:transform",
        description="Convert links into numbered reference links.",
    ),
    "inline": TransformSpec(
        slug="inline",
        entry="mdsmith.transforms.inline:transform",
        description="Convert reference links into inline links.",
    ),
    "sidenote": TransformSpec(
        slug="sidenote",
        entry="mdsmith.transforms.sidenotes:transform",
        description="Convert footnotes into HTML sidenotes.",
    ),
    "footnote": TransformSpec(
        slug="footnote",
        entry="mdsmith.transforms.footnotes:transform",
        description="Convert HTML sidenotes into footnotes.",
    ),
    "wrap": TransformSpec(
        slug="wrap",
        entry="mdsmith.transforms.wrap:transform",
        description="Wrap paragraphs to the configured width.",
    ),
    "join": TransformSpec(
        slug="join",
        entry="mdsmith.transforms.join:transform",
        description="Join each paragraph onto a single line.",
    ),
    "split": TransformSpec(
        slug="split",
        entry="mdsmith.transforms.split:transform",
        description="Put each sentence on its own line.",
    ),
}


def available_transforms() -> tuple[TransformSpec, ...]:
    """Return registered transforms in registration order."""
    return tuple(_TRANSFORMS.values())


def get_transform_spec(slug: str) -> TransformSpec:
    try:
        return _TRANSFORMS[slug.lower()]
    except KeyError as exc:
        known = ", ".join(_TRANSFORMS)
        msg = f"Unknown transform '{slug}' (expected one of: {known})."
        raise TransformLookupError(msg) from exc


def load_transform(slug: str) -> TransformFunc:
    return get_transform_spec(slug).load()
