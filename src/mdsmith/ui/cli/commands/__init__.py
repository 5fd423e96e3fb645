"""Command implementations for the mdsmith CLI."""

from __future__ import annotations

from .transform import build_transform_command


__all__ = ["build_transform_command"]
