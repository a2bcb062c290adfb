"""deis_cli package bootstrap.

This module exposes lightweight metadata that other modules (and packaging
machinery) rely upon, such as the version reported by ``deis version`` and
embedded in the controller ``User-Agent`` header.
"""
from __future__ import annotations

__all__ = ["__version__", "get_version"]

# NOTE: The version is duplicated in ``pyproject.toml`` and managed by Hatch.
__version__ = "2.4.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
