"""``deis registry`` commands: private registry credentials for an app."""
from __future__ import annotations

import typer

from .. import runtime
from ..formatting import LABEL_SPACING, pretty_tabs
from ..keyvalue import parse_registry, unset_values
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

registry_app = domain_app("registry")


def render_registry(session: Session) -> None:
    """Print the registry settings of the session's application."""
    registry = session.api.get_config(session.app).registry
    echo(f"=== {session.app} Registry")
    echo(pretty_tabs(registry, LABEL_SPACING), nl=False)


@registry_app.command("list", short_help="list private registry info for an app")
def list_registry(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists private registry information for an application."""
    with command_scope("registry list", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        render_registry(session)
        op.success("Listed registry information.", changed=0, context={"app": session.app})


@registry_app.command("set", short_help="set private registry info for an app")
def set_registry(
    entries: list[str] = typer.Argument(..., metavar="<key>=<value>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets private registry information for an application.

    Valid keys are "username" and "password".
    """
    with command_scope("registry set", args={"app": app, "keys": len(entries)}) as op:
        info = parse_registry(entries)
        session = runtime.load_session(config, app)
        echo("Applying registry information... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"registry": info})
        echo("done\n")
        render_registry(session)
        op.success("Registry information applied.", changed=len(info), context={"app": session.app})


@registry_app.command("unset", short_help="unset private registry info for an app")
def unset_registry(
    keys: list[str] = typer.Argument(..., metavar="<key>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unsets private registry information for an application."""
    with command_scope("registry unset", args={"app": app, "keys": keys}) as op:
        session = runtime.load_session(config, app)
        echo("Applying registry information... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"registry": unset_values(keys)})
        echo("done\n")
        render_registry(session)
        op.success("Registry information removed.", changed=len(keys), context={"app": session.app})


__all__ = ["registry_app", "render_registry"]
