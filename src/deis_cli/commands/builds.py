"""``deis builds`` commands."""
from __future__ import annotations

from pathlib import Path

import typer

from .. import runtime
from ..formatting import format_listing
from ..keyvalue import parse_procfile
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, command_scope, echo

PROCFILE = "Procfile"

builds_app = domain_app("builds")


@builds_app.command("list", short_help="list build history for an application")
def list_builds(
    app: str | None = APP_OPTION,
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists build history for an application."""
    with command_scope("builds list", args={"app": app, "limit": limit}) as op:
        session = runtime.load_session(config, app)
        result = session.api.list_builds(session.app, runtime.resolve_limit(session, limit))
        lines = [f"{build.uuid} {build.created}" for build in result]
        echo(format_listing(f"{session.app} Builds", lines, result.count), nl=False)
        op.success("Listed builds.", changed=0, context={"app": session.app})


@builds_app.command("create", short_help="imports an image and deploys as a new release")
def create_build(
    image: str = typer.Argument(..., metavar="<image>"),
    app: str | None = APP_OPTION,
    procfile: str = typer.Option(
        "",
        "--procfile",
        "-p",
        help="A YAML string used to supply a Procfile to the application.",
        show_default=False,
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Creates a new build of an application from a Docker image.

    When --procfile is omitted a Procfile in the current directory is used.
    """
    with command_scope("builds create", args={"app": app, "image": image}) as op:
        session = runtime.load_session(config, app)
        processes: dict[str, str] = {}
        if procfile:
            processes = parse_procfile(procfile)
        elif Path(PROCFILE).exists():
            processes = parse_procfile(Path(PROCFILE).read_text(encoding="utf-8"))

        echo("Creating build... ", nl=False)
        with runtime.progress():
            session.api.create_build(session.app, image, processes)
        echo("done")
        op.success("Build created.", changed=1, context={"app": session.app, "image": image})


__all__ = ["builds_app"]
