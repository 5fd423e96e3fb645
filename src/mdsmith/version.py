"""Package version helper shared by the API and the CLI."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version


def get_version() -> str:
    """Return the installed mdsmith version, or ``0.0.0`` when running from a checkout."""
    try:
        return _pkg_version("mdsmith")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
