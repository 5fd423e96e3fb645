"""Configuration model shared by the transforms and the CLI.

MdsmithConfig

`wrap_width` (`int`)
: Column limit used by the ``wrap`` transform. Link and image constructs are
  never broken and may overflow it.

`markdown_extensions` (`list[str]`)
: Python-Markdown extensions used when rendering footnote bodies into sidenote
  HTML. Entries use the same names Python-Markdown accepts (``"abbr"``,
  ``"package.module:ExtensionClass"``).

`strip_hidden_spans` (`bool`)
: Drop ``<span class="hidden">`` helper elements from sidenote content before it
  is converted back to markdown.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from mdsmith.core.exceptions import ConfigError


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "DEFAULT_WRAP_WIDTH",
    "MdsmithConfig",
    "load_config",
]


DEFAULT_WRAP_WIDTH = 80

DEFAULT_MARKDOWN_EXTENSIONS = ["sane_lists"]


class MdsmithConfig(BaseModel):
    """Settings accepted in a YAML configuration file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    wrap_width: int = Field(default=DEFAULT_WRAP_WIDTH, ge=20)
    markdown_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MARKDOWN_EXTENSIONS)
    )
    strip_hidden_spans: bool = True

    @field_validator("markdown_extensions", mode="before")
    @classmethod
    def _split_extension_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [chunk for chunk in value.replace(",", " ").split() if chunk]
        return value


def load_config(path: str | Path | None = None) -> MdsmithConfig:
    """Load configuration from a YAML file, returning defaults when ``path`` is None."""
    if path is None:
        return MdsmithConfig()

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file '{config_path}': {exc}") from exc

    try:
        payload = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in configuration file '{config_path}'.") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Configuration file '{config_path}' must contain a mapping.")

    try:
        return MdsmithConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in '{config_path}': {exc}") from exc
