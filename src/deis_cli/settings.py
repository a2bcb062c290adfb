"""Client profile store for deis.

A profile is a small JSON document holding the controller URL, the bearer
token and a handful of preferences. Profiles live in ``~/.deis`` and are
selected in the following order:

1. The ``-c/--config`` value passed to a command.
2. The ``DEIS_PROFILE`` environment variable.
3. The default profile name, ``client``.

A value ending in ``.json`` or containing a path separator is treated as a
path; anything else names ``~/.deis/<value>.json``. Loader functions accept an
explicit ``env`` mapping so tests never depend on the process environment.
"""
from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import SettingsError

PROFILE_ENV_VAR = "DEIS_PROFILE"
DEFAULT_PROFILE = "client"
DEFAULT_LIMIT = 100
SETTINGS_DIR_NAME = ".deis"
FILE_MODE = 0o600


@dataclass(frozen=True)
class Settings:
    """Resolved client profile."""

    controller: str
    token: str = ""
    username: str = ""
    response_limit: int = DEFAULT_LIMIT
    ssl_verify: bool = True
    path: Path | None = None

    def with_values(self, **changes: object) -> Settings:
        """Return a copy of the settings with *changes* applied."""
        return replace(self, **changes)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, object]:
        """Return the JSON document persisted for this profile."""
        return {
            "username": self.username,
            "ssl_verify": self.ssl_verify,
            "controller": self.controller,
            "token": self.token,
            "response_limit": self.response_limit,
        }


def settings_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the directory holding client profiles."""
    resolved_env = os.environ if env is None else env
    home = resolved_env.get("HOME")
    base = Path(home) if home else Path.home()
    return base / SETTINGS_DIR_NAME


def locate_settings_file(
    cf: str | os.PathLike[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Resolve the profile path for *cf* following the documented order."""
    resolved_env = os.environ if env is None else env
    value = str(cf) if cf else resolved_env.get(PROFILE_ENV_VAR, "")
    if not value:
        value = DEFAULT_PROFILE
    if value.endswith(".json") or os.sep in value or "/" in value:
        return Path(value).expanduser()
    return settings_dir(resolved_env) / f"{value}.json"


def load_settings(
    cf: str | os.PathLike[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load the profile selected by *cf*."""
    path = locate_settings_file(cf, env)
    if not path.exists():
        raise SettingsError(
            f"Client configuration file not found at: {path}\n"
            "Are you logged in? Use 'deis login' or 'deis register' to get started."
        )
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Failed to parse client configuration {path}: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"Failed to read client configuration {path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise SettingsError(f"Client configuration {path} must contain a JSON object.")
    return _build_settings(raw, path)


def save_settings(
    settings: Settings,
    cf: str | os.PathLike[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Persist *settings* atomically and return the written path."""
    path = settings.path if cf is None and settings.path is not None else locate_settings_file(cf, env)
    payload = json.dumps(settings.to_dict(), indent=2) + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise SettingsError(f"Failed to write client configuration {path}: {exc}") from exc
    return path


def delete_settings(
    cf: str | os.PathLike[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Remove the selected profile; a missing file is not an error."""
    path = locate_settings_file(cf, env)
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        raise SettingsError(f"Failed to remove client configuration {path}: {exc}") from exc
    return path


def normalize_controller(url: str) -> str:
    """Return *url* with an ``http://`` scheme when none was supplied."""
    url = url.strip()
    if not url:
        return url
    if "://" not in url:
        url = f"http://{url}"
    return url


def _build_settings(raw: Mapping[str, object], path: Path) -> Settings:
    controller = _expect_str(raw.get("controller"), "controller", path)
    if not controller:
        raise SettingsError(f"Client configuration {path} does not name a controller.")
    limit = _expect_int(raw.get("response_limit"), "response_limit", path, default=DEFAULT_LIMIT)
    if limit <= 0:
        limit = DEFAULT_LIMIT
    ssl_verify = raw.get("ssl_verify", True)
    if not isinstance(ssl_verify, bool):
        raise SettingsError(f"Expected ssl_verify in {path} to be a boolean. Got {ssl_verify!r}.")
    return Settings(
        controller=normalize_controller(controller),
        token=_expect_str(raw.get("token"), "token", path),
        username=_expect_str(raw.get("username"), "username", path),
        response_limit=limit,
        ssl_verify=ssl_verify,
        path=path,
    )


def _expect_str(value: object | None, label: str, path: Path) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise SettingsError(f"Expected {label} in {path} to be a string. Got {type(value).__name__}.")


def _expect_int(value: object | None, label: str, path: Path, *, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise SettingsError(f"Expected {label} in {path} to be an integer. Got boolean {value!r}.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError as exc:
            raise SettingsError(f"Invalid integer for {label} in {path}: {value!r}.") from exc
    raise SettingsError(f"Expected {label} in {path} to be an integer. Got {type(value).__name__}.")


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_PROFILE",
    "PROFILE_ENV_VAR",
    "Settings",
    "delete_settings",
    "load_settings",
    "locate_settings_file",
    "normalize_controller",
    "save_settings",
    "settings_dir",
]
