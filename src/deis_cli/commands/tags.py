"""``deis tags`` commands: scheduler tags restricting where an app runs."""
from __future__ import annotations

import typer

from .. import runtime
from ..formatting import LABEL_SPACING, pretty_tabs
from ..keyvalue import parse_tags, unset_values
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

tags_app = domain_app("tags")


def render_tags(session: Session) -> None:
    tags = session.api.get_config(session.app).tags
    echo(f"=== {session.app} Tags")
    echo(pretty_tabs(tags, LABEL_SPACING), nl=False)


@tags_app.command("list", short_help="list tags for an app")
def list_tags(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists tags for an application."""
    with command_scope("tags list", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        render_tags(session)
        op.success("Listed tags.", changed=0, context={"app": session.app})


@tags_app.command("set", short_help="set tags for an app")
def set_tags(
    entries: list[str] = typer.Argument(..., metavar="<key>=<value>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets tags for an application.

    A tag is a key/value pair used to tag an application's containers and is
    passed to the scheduler, e.g. rack=1 environ=production.
    """
    with command_scope("tags set", args={"app": app, "entries": entries}) as op:
        tags = parse_tags(entries)
        session = runtime.load_session(config, app)
        echo("Applying tags... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"tags": tags})
        echo("done\n")
        render_tags(session)
        op.success("Tags applied.", changed=len(tags), context={"app": session.app})


@tags_app.command("unset", short_help="unset tags for an app")
def unset_tags(
    keys: list[str] = typer.Argument(..., metavar="<key>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unsets tags for an application."""
    with command_scope("tags unset", args={"app": app, "keys": keys}) as op:
        session = runtime.load_session(config, app)
        echo("Applying tags... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"tags": unset_values(keys)})
        echo("done\n")
        render_tags(session)
        op.success("Tags removed.", changed=len(keys), context={"app": session.app})


__all__ = ["render_tags", "tags_app"]
