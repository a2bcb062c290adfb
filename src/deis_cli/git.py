"""Git remote helpers for deis applications.

Applications are deployed with ``git push`` to the builder, which listens on
``deis-builder.<domain>:2222``. These helpers create and remove the matching
remotes and recover the application name from them.
"""
from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import GitError

GIT_BIN = "git"
BUILDER_PORT = 2222
REMOTE_EXISTS_EXIT_CODES = frozenset({3, 128})


class GitRemoteExistsError(GitError):
    """Raised when ``git remote add`` finds a remote with the same name."""


@dataclass(frozen=True, slots=True)
class Remote:
    """A single fetch remote of the current repository."""

    name: str
    url: str


def builder_host(controller_host: str) -> str:
    """Return the builder hostname for *controller_host*."""
    hostname = controller_host.split(":", 1)[0]
    return hostname.replace("deis.", "deis-builder.", 1)


def remote_url(controller_host: str, app: str) -> str:
    """Return the git URL for *app* on the builder behind *controller_host*."""
    return f"ssh://git@{builder_host(controller_host)}:{BUILDER_PORT}/{app}.git"


def run_git(args: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run ``git`` with *args* and return the completed process."""
    command = [GIT_BIN, *args]
    try:
        result = subprocess.run(  # noqa: S603, S607
            command,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise GitError(f"{GIT_BIN} not found: {exc}") from exc
    if check and result.returncode != 0:
        message = (result.stderr or "").strip() or (result.stdout or "").strip() or "no output"
        joined = " ".join(command)
        raise GitError(f"{joined} failed (exit {result.returncode}): {message}")
    return result


def list_remotes() -> list[Remote]:
    """Return the fetch remotes configured for the current repository."""
    result = run_git(["remote", "-v"])
    remotes: list[Remote] = []
    seen: set[str] = set()
    for line in result.stdout.splitlines():
        parts = line.split()
        if len(parts) < 2 or parts[0] in seen:
            continue
        seen.add(parts[0])
        remotes.append(Remote(name=parts[0], url=parts[1]))
    return remotes


def _app_from_url(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1].split(".", 1)[0]


def find_app_remotes(controller_host: str, app: str | None = None) -> list[Remote]:
    """Return remotes pointing at the builder, optionally only those for *app*."""
    prefix = f"ssh://git@{builder_host(controller_host)}:{BUILDER_PORT}/"
    return [
        remote
        for remote in list_remotes()
        if remote.url.startswith(prefix) and (app is None or _app_from_url(remote.url) == app)
    ]


def detect_app_name(controller_host: str, cwd: Path | None = None) -> str:
    """Return the application named by a builder remote.

    Falls back to the lower-cased name of the working directory when no
    matching remote exists or the directory is not a git repository.
    """
    try:
        remotes = find_app_remotes(controller_host)
    except GitError:
        remotes = []
    if remotes:
        return _app_from_url(remotes[0].url)
    return (cwd or Path.cwd()).name.lower()


def create_remote(controller_host: str, remote: str, app: str) -> None:
    """Add *remote* pointing at *app*."""
    result = run_git(["remote", "add", remote, remote_url(controller_host, app)], check=False)
    if result.returncode == 0:
        return
    stderr = (result.stderr or "").strip()
    if result.returncode in REMOTE_EXISTS_EXIT_CODES and "already exists" in stderr:
        raise GitRemoteExistsError(stderr)
    raise GitError(
        f"git remote add {remote} failed (exit {result.returncode}): {stderr or 'no output'}"
    )


def delete_remote(remote: str) -> None:
    """Remove *remote* from the current repository."""
    run_git(["remote", "remove", remote])


def delete_app_remotes(controller_host: str, app: str) -> list[str]:
    """Remove every remote pointing at *app*; return the removed names."""
    removed: list[str] = []
    for remote in find_app_remotes(controller_host, app):
        delete_remote(remote.name)
        removed.append(remote.name)
    return removed


__all__ = [
    "GitRemoteExistsError",
    "Remote",
    "builder_host",
    "create_remote",
    "delete_app_remotes",
    "delete_remote",
    "detect_app_name",
    "find_app_remotes",
    "list_remotes",
    "remote_url",
    "run_git",
]
