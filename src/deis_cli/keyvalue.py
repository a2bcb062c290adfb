"""Parsers for the ``key=value`` style arguments accepted by deis commands.

Every parser validates the whole batch before returning: a single malformed
token aborts the operation with an :class:`~deis_cli.errors.ArgumentError`
and nothing is sent to the controller.
"""
from __future__ import annotations

import base64
import re
from collections.abc import Iterable
from pathlib import Path

import yaml

from .errors import ArgumentError

CONFIG_PATTERN = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=([\s\S]+)$")
SCALE_PATTERN = re.compile(r"^([a-z0-9]+)=([0-9]+)$")
SSH_KEY_PATTERN = re.compile(r"^-.+ .SA PRIVATE KEY-*")
PROCESS_TYPE_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
MEMORY_LIMIT_PATTERN = re.compile(r"^[0-9]+[BKMG]?$", re.IGNORECASE)
CPU_LIMIT_PATTERN = re.compile(r"^(?:[0-9]+(?:\.[0-9]+)?|[0-9]+m)$")
REGISTRY_KEYS = ("username", "password")
LIMIT_KINDS = ("memory", "cpu")


def parse_config(entries: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=value`` assignments into a mapping.

    Keys start with a letter or underscore; the value is everything after the
    first ``=`` and may itself contain ``=`` or newlines. Tokens starting with
    ``#`` are comments and skipped.
    """
    values: dict[str, str] = {}
    for entry in entries:
        if entry.startswith("#"):
            continue
        match = CONFIG_PATTERN.match(entry)
        if match is None:
            raise ArgumentError(
                f"'{entry}' does not match the pattern 'key=var', ex: MODE=test"
            )
        values[match.group(1)] = match.group(2)
    return values


def encode_ssh_key(value: str) -> str:
    """Return the base64 encoding of the private key named by ``SSH_KEY``.

    *value* may be the key text itself or the path of a file holding it.
    """
    key_text = value
    candidate = Path(value)
    try:
        is_file = candidate.is_file()
    except OSError:
        is_file = False
    if is_file:
        try:
            key_text = candidate.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ArgumentError(
                f"Could not parse SSH private key: {value} is not a text file"
            ) from None
    if not SSH_KEY_PATTERN.match(key_text):
        raise ArgumentError(f"Could not parse SSH private key:\n {key_text}")
    return base64.b64encode(key_text.encode("utf-8")).decode("ascii")


def parse_tags(entries: Iterable[str]) -> dict[str, str]:
    """Parse ``key=value`` scheduler tags; exactly one ``=`` is allowed."""
    tags: dict[str, str] = {}
    for entry in entries:
        parts = entry.split("=")
        if len(parts) != 2:
            raise ArgumentError(
                f"{entry} is invalid, Must be in format key=value\n"
                "Examples: rack=1 evironment=production"
            )
        tags[parts[0]] = parts[1]
    return tags


def parse_registry(entries: Iterable[str]) -> dict[str, str]:
    """Parse private registry credentials (``username``/``password`` only)."""
    info: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep:
            raise ArgumentError(
                f"{entry} is invalid. Must be in format key=value\n"
                "Examples: username=bob password=s3cur3pw1"
            )
        if key not in REGISTRY_KEYS:
            raise ArgumentError(
                f'{key} is invalid. Valid keys are "username" or "password"'
            )
        info[key] = value
    return info


def unset_values(keys: Iterable[str]) -> dict[str, None]:
    """Return deletion markers for *keys*."""
    return {key: None for key in keys}


def parse_scale_targets(entries: Iterable[str]) -> dict[str, int]:
    """Parse ``type=count`` scale targets."""
    targets: dict[str, int] = {}
    for entry in entries:
        match = SCALE_PATTERN.match(entry)
        if match is None:
            raise ArgumentError(
                f"'{entry}' does not match the pattern 'type=num', ex: web=2"
            )
        targets[match.group(1)] = int(match.group(2))
    return targets


def parse_limits(entries: Iterable[str], kind: str) -> dict[str, str]:
    """Parse ``type=limit`` resource limits for *kind* (``memory`` or ``cpu``)."""
    if kind not in LIMIT_KINDS:
        raise ArgumentError(f"Unknown limit type '{kind}'. Expected memory or cpu.")
    pattern = MEMORY_LIMIT_PATTERN if kind == "memory" else CPU_LIMIT_PATTERN
    example = "web=1G" if kind == "memory" else "web=500m"
    limits: dict[str, str] = {}
    for entry in entries:
        proc_type, sep, value = entry.partition("=")
        if not sep or not PROCESS_TYPE_PATTERN.match(proc_type) or not pattern.match(value):
            raise ArgumentError(
                f"'{entry}' does not match the pattern 'type=limit', ex: {example}"
            )
        limits[proc_type] = value.upper() if kind == "memory" else value
    return limits


def parse_version(text: str) -> int:
    """Parse a release version given as ``v3`` or ``3``."""
    raw = text.strip()
    digits = raw[1:] if raw[:1] in {"v", "V"} else raw
    if not digits:
        raise ArgumentError(f"{text} is not in the form 'v#'")
    try:
        return int(digits)
    except ValueError as exc:
        raise ArgumentError(f"{text} is not in the form 'v#'") from exc


def parse_procfile(text: str) -> dict[str, str]:
    """Parse a Procfile (a YAML mapping of process type to command)."""
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ArgumentError(f"Failed to parse Procfile: {exc}") from exc
    if not isinstance(data, dict):
        raise ArgumentError("Procfile must contain a mapping of process types to commands.")
    return {str(key): str(value) for key, value in data.items()}


def parse_limit(text: str | None) -> int:
    """Parse the ``--limit`` option; an empty value means the profile default."""
    if text is None or text == "":
        return -1
    try:
        return int(text)
    except ValueError as exc:
        raise ArgumentError(f"Invalid limit: {text!r} is not an integer.") from exc


def parse_env_file(text: str) -> list[str]:
    """Split an env file into assignments, dropping blank lines."""
    return [line for line in text.split("\n") if line]


__all__ = [
    "encode_ssh_key",
    "parse_config",
    "parse_env_file",
    "parse_limit",
    "parse_limits",
    "parse_procfile",
    "parse_registry",
    "parse_scale_targets",
    "parse_tags",
    "parse_version",
    "unset_values",
]
