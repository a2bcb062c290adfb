"""``deis config`` commands: environment variables for an application."""
from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path

import typer

from .. import runtime
from ..errors import ArgumentError
from ..formatting import CONFIG_SPACING, format_config, format_config_oneline, format_value, pretty_tabs
from ..keyvalue import encode_ssh_key, parse_config, parse_env_file, unset_values
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

ENV_FILE = ".env"
SSH_KEY = "SSH_KEY"
HEALTHCHECK_MARKER = "HEALTHCHECK_"
HEALTHCHECK_NOTICE = (
    "Hey there! We've noticed that you're using 'deis config:set HEALTHCHECK_URL'\n"
    "to set up healthchecks. This functionality has been deprecated. In the future, please use\n"
    "'deis healthchecks' to set up application health checks. Thanks!"
)

config_app = domain_app("config")


def render_config(session: Session, *, oneline: bool = False) -> None:
    """Fetch and print the application's config."""
    values = session.api.get_config(session.app).values
    if oneline:
        echo(format_config_oneline(values), nl=False)
        return
    echo(f"=== {session.app} Config")
    echo(pretty_tabs(values, CONFIG_SPACING), nl=False)


def apply_config(session: Session, values: dict[str, object]) -> None:
    """Send new config *values*, then print the merged result."""
    if SSH_KEY in values:
        values[SSH_KEY] = encode_ssh_key(str(values[SSH_KEY]))
    for key in values:
        if HEALTHCHECK_MARKER in key:
            echo(HEALTHCHECK_NOTICE)
    echo("Creating config... ", nl=False)
    with runtime.progress():
        session.api.set_config(session.app, {"values": values})
    echo("done\n")
    render_config(session)


def _merge_interactively(
    local: Mapping[str, str], remote: Mapping[str, object]
) -> dict[str, object]:
    merged: dict[str, object] = dict(local)
    for key in sorted(remote):
        remote_value = format_value(remote[key])
        if key not in merged:
            merged[key] = remote_value
            continue
        if merged[key] == remote_value:
            continue
        answer = typer.prompt(
            f"{key}: overwrite {merged[key]} with {remote_value}? (y/N) ",
            default="",
            show_default=False,
            prompt_suffix="",
        )
        if answer.strip().lower() == "y":
            merged[key] = remote_value
    return merged


@config_app.command("list", short_help="list environment variables for an app")
def list_config(
    app: str | None = APP_OPTION,
    oneline: bool = typer.Option(False, "--oneline", help="Print output on one line."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists environment variables for an application."""
    with command_scope("config list", args={"app": app, "oneline": oneline}) as op:
        session = runtime.load_session(config, app)
        render_config(session, oneline=oneline)
        op.success("Listed config.", changed=0, context={"app": session.app})


@config_app.command("set", short_help="set environment variables for an app")
def set_config(
    assignments: list[str] = typer.Argument(..., metavar="<var>=<value>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets environment variables for an application."""
    with command_scope("config set", args={"app": app, "keys": len(assignments)}) as op:
        session = runtime.load_session(config, app)
        values: dict[str, object] = dict(parse_config(assignments))
        apply_config(session, values)
        op.success("Config updated.", changed=len(values), context={"app": session.app})


@config_app.command("unset", short_help="unset environment variables for an app")
def unset_config(
    keys: list[str] = typer.Argument(..., metavar="<key>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unsets an environment variable for an application."""
    with command_scope("config unset", args={"app": app, "keys": keys}) as op:
        session = runtime.load_session(config, app)
        echo("Removing config... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"values": unset_values(keys)})
        echo("done\n")
        render_config(session)
        op.success("Config removed.", changed=len(keys), context={"app": session.app})


@config_app.command("pull", short_help="extract environment variables to .env")
def pull_config(
    app: str | None = APP_OPTION,
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Prompts for each value to be overwritten."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", "-o", help="Allows the pull to overwrite keys in .env."
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Extract all environment variables from an application for local use.

    When standard output is piped the variables are printed instead of being
    written to .env.
    """
    args = {"app": app, "interactive": interactive, "overwrite": overwrite}
    with command_scope("config pull", args=args) as op:
        session = runtime.load_session(config, app)
        remote = session.api.get_config(session.app).values
        if not runtime.stdout_is_tty():
            echo(format_config(remote), nl=False)
            op.success("Printed config.", changed=0, context={"app": session.app})
            return

        target = Path(ENV_FILE)
        if target.exists() and not (overwrite or interactive):
            raise ArgumentError(f"{ENV_FILE} already exists, pass -o to overwrite")
        if interactive:
            local: dict[str, str] = {}
            if target.exists():
                local = parse_config(parse_env_file(target.read_text(encoding="utf-8")))
            merged = _merge_interactively(local, remote)
        else:
            merged = dict(remote)
        target.write_text(format_config(merged), encoding="utf-8")
        op.success(
            "Wrote config file.",
            changed=len(merged),
            context={"app": session.app, "path": str(target)},
        )


@config_app.command("push", short_help="set environment variables from .env")
def push_config(
    app: str | None = APP_OPTION,
    path: Path = typer.Option(
        Path(ENV_FILE), "--path", "-p", help="A path leading to an environment file."
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets environment variables for an application from an env file.

    The file may also be piped via stdin: 'deis config:push < .env'.
    """
    with command_scope("config push", args={"app": app, "path": path}) as op:
        if runtime.stdin_is_tty():
            contents = path.read_text(encoding="utf-8")
        else:
            contents = sys.stdin.read()
        entries = parse_env_file(contents)
        session = runtime.load_session(config, app)
        values: dict[str, object] = dict(parse_config(entries))
        apply_config(session, values)
        op.success("Config pushed.", changed=len(values), context={"app": session.app})


__all__ = ["apply_config", "config_app", "render_config"]
