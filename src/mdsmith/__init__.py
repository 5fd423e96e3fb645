"""Primary public API for mdsmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from mdsmith.core.config import MdsmithConfig, load_config
from mdsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from mdsmith.core.exceptions import (
    ConfigError,
    DocumentParseError,
    MdsmithError,
    TransformLookupError,
)
from mdsmith.transforms import (
    TransformSpec,
    available_transforms,
    get_transform_spec,
    load_transform,
)
from mdsmith.version import get_version


try:
    __version__ = _pkg_version("mdsmith")
except PackageNotFoundError:
    __version__ = "0.0.0"


def transform(
    slug: str,
    content: str,
    config: MdsmithConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Apply the transform registered as ``slug`` to ``content``."""
    return get_transform_spec(slug).apply(content, config, emitter)


__all__ = [
    "ConfigError",
    "DiagnosticEmitter",
    "DocumentParseError",
    "LoggingEmitter",
    "MdsmithConfig",
    "MdsmithError",
    "NullEmitter",
    "TransformLookupError",
    "TransformSpec",
    "__version__",
    "available_transforms",
    "get_transform_spec",
    "get_version",
    "load_config",
    "load_transform",
    "transform",
]
