"""Enumerations for CLI exit codes."""
from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Well-known exit codes enforced across the CLI.

    ``OK`` also covers the "known domain, unknown verb" path, which prints
    usage without failing.
    """

    OK = 0
    FAILURE = 1
