"""``deis releases`` commands."""
from __future__ import annotations

import typer

from .. import runtime
from ..formatting import limit_count, tabulate
from ..keyvalue import parse_version
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, command_scope, echo

releases_app = domain_app("releases")


@releases_app.command("list", short_help="list an application's release history")
def list_releases(
    app: str | None = APP_OPTION,
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists release history for an application."""
    with command_scope("releases list", args={"app": app, "limit": limit}) as op:
        session = runtime.load_session(config, app)
        result = session.api.list_releases(session.app, runtime.resolve_limit(session, limit))
        echo(f"=== {session.app} Releases{limit_count(len(result), result.count)}", nl=False)
        rows = [[f"v{release.version}", release.created, release.summary] for release in result]
        echo(tabulate(rows), nl=False)
        op.success("Listed releases.", changed=0, context={"app": session.app})


@releases_app.command("info", short_help="print information about a specific release")
def release_info(
    version: str = typer.Argument(..., metavar="<version>", help="The release version, e.g. v1."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Prints info about a particular release."""
    with command_scope("releases info", args={"app": app, "version": version}) as op:
        number = parse_version(version)
        session = runtime.load_session(config, app)
        release = session.api.get_release(session.app, number)
        echo(f"=== {session.app} Release v{number}")
        if release.build:
            echo(f"build:    {release.build}")
        echo(f"config:   {release.config}")
        echo(f"owner:    {release.owner}")
        echo(f"created:  {release.created}")
        echo(f"summary:  {release.summary}")
        echo(f"updated:  {release.updated}")
        echo(f"uuid:     {release.uuid}")
        op.success("Described release.", changed=0, context={"app": session.app, "version": number})


@releases_app.command("rollback", short_help="return to a previous release")
def rollback(
    version: str = typer.Argument("", metavar="[<version>]", show_default=False),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Rolls back to a previous application release.

    Without a version the application goes back one release.
    """
    with command_scope("releases rollback", args={"app": app, "version": version}) as op:
        number = parse_version(version) if version else -1
        session = runtime.load_session(config, app)
        if number == -1:
            echo("Rolling back one release... ", nl=False)
        else:
            echo(f"Rolling back to v{number}... ", nl=False)
        with runtime.progress():
            new_version = session.api.rollback(session.app, number)
        echo(f"done, v{new_version}")
        op.success("Rolled back.", changed=1, context={"app": session.app, "version": new_version})


__all__ = ["releases_app"]
