"""``deis keys`` commands: SSH public keys used for ``git push``."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from .. import runtime
from ..errors import ArgumentError, DeisError
from ..formatting import format_key, limit_count
from ..router import domain_app
from ..runtime import CONFIG_OPTION, LIMIT_OPTION, command_scope, echo
from ..settings import settings_dir

PUBLIC_KEY_SUFFIX = ".pub"

keys_app = domain_app("keys")


@dataclass(frozen=True, slots=True)
class PublicKey:
    """A public key read from disk, ready to upload."""

    id: str
    public: str
    path: Path


def read_public_key(path: Path) -> PublicKey:
    """Load and validate the OpenSSH public key stored at *path*.

    The key's comment becomes its id; keys without one fall back to the file
    name up to the first dot.
    """
    try:
        contents = path.read_text(encoding="utf-8").strip()
        serialization.load_ssh_public_key(contents.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm):
        raise ArgumentError(f"{path} is not a valid ssh key") from None
    fields = contents.split(None, 2)
    comment = fields[2].strip() if len(fields) > 2 else ""
    return PublicKey(id=comment or path.name.split(".")[0], public=contents, path=path)


def discover_public_keys(folder: Path | None = None) -> list[PublicKey]:
    """Return every public key found in ``~/.ssh``."""
    folder = folder or settings_dir().parent / ".ssh"
    return [
        read_public_key(candidate)
        for candidate in sorted(folder.iterdir())
        if candidate.suffix == PUBLIC_KEY_SUFFIX
    ]


def choose_public_key(keys: list[PublicKey]) -> PublicKey:
    """Ask the user which discovered key to upload."""
    echo("Found the following SSH public keys:")
    for index, key in enumerate(keys, start=1):
        echo(f"{index}) {key.path.name} {key.id}")
    echo("0) Enter path to pubfile (or use keys:add <key_path>)")

    selected = typer.prompt(
        "Which would you like to use with Deis?",
        default="",
        show_default=False,
        prompt_suffix=" ",
    )
    try:
        choice = int(selected)
    except ValueError:
        raise ArgumentError(f"{selected} is not a valid integer") from None
    if choice < 0 or choice > len(keys):
        raise ArgumentError(f"{choice} is not a valid option")
    if choice == 0:
        filename = typer.prompt(
            "Enter the path to the pubkey file:",
            default="",
            show_default=False,
            prompt_suffix=" ",
        )
        return read_public_key(Path(filename).expanduser())
    return keys[choice - 1]


@keys_app.command("list", short_help="list SSH keys for the logged in user")
def list_keys(
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists SSH keys for the logged in user."""
    with command_scope("keys list", args={"limit": limit}) as op:
        session = runtime.load_session(config, need_app=False)
        result = session.api.list_keys(runtime.resolve_limit(session, limit))
        echo(f"=== {session.settings.username} Keys{limit_count(len(result), result.count)}", nl=False)
        for key in result:
            echo(format_key(key.id, key.public))
        op.success("Listed keys.", changed=0, context={"count": result.count})


@keys_app.command("add", short_help="add an SSH key")
def add_key(
    key: Path | None = typer.Argument(
        None, metavar="[<key>]", help="A local file path to an SSH public key.", show_default=False
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Adds SSH keys for the logged in user.

    Without a path the keys found in ~/.ssh are offered for selection.
    """
    with command_scope("keys add", target={"key": key}) as op:
        session = runtime.load_session(config, need_app=False)
        if key is None:
            selected = choose_public_key(discover_public_keys())
        else:
            selected = read_public_key(key)

        echo(f"Uploading {selected.path.name} to deis...", nl=False)
        try:
            session.api.add_key(selected.id, selected.public)
        except DeisError:
            echo()
            raise
        echo(" done")
        op.success("Key uploaded.", changed=1, context={"id": selected.id})


@keys_app.command("remove", short_help="remove an SSH key")
def remove_key(
    key_id: str = typer.Argument(..., metavar="<key>", help="The SSH public key id to remove."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Removes an SSH key for the logged in user."""
    with command_scope("keys remove", target={"id": key_id}) as op:
        session = runtime.load_session(config, need_app=False)
        echo(f"Removing {key_id} SSH Key...", nl=False)
        try:
            session.api.remove_key(key_id)
        except DeisError:
            echo()
            raise
        echo(" done")
        op.success("Key removed.", changed=1, context={"id": key_id})


__all__ = [
    "PublicKey",
    "choose_public_key",
    "discover_public_keys",
    "keys_app",
    "read_public_key",
]
