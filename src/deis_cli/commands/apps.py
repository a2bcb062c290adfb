"""``deis apps`` commands: create, inspect and destroy applications."""
from __future__ import annotations

import time

import typer

from .. import git, runtime
from ..errors import ArgumentError
from ..formatting import format_listing
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, Session, command_scope, echo
from .domains import render_domains
from .git import REMOTE_CREATED_MESSAGE, remove_app_remotes
from .ps import render_processes

NO_DOMAIN_MESSAGE = "No domain assigned to {app}"
DESTROY_WARNING = """ !    WARNING: Potentially Destructive Action
 !    This command will destroy the application: {app}
 !    To proceed, type "{app}" or re-run this command with --confirm={app}
"""

apps_app = domain_app("apps")


def expand_url(controller_host: str, domain: str) -> str:
    """Return *domain* as a full hostname.

    A bare subdomain replaces the first label of the controller host.
    """
    if "." in domain:
        return domain
    parts = controller_host.split(".")
    parts[0] = domain
    return ".".join(parts)


def app_url(session: Session, app: str) -> str:
    """Return the first domain bound to *app*, or ``""`` when none is."""
    result = session.api.list_domains(app, 1)
    if not result.items:
        return ""
    return expand_url(session.host, result.items[0].domain)


@apps_app.command("create", short_help="create a new application")
def create_app(
    app_id: str = typer.Argument("", metavar="[<id>]", show_default=False),
    buildpack: str = typer.Option(
        "", "--buildpack", "-b", help="A buildpack url to use for this app.", show_default=False
    ),
    remote: str = typer.Option("deis", "--remote", "-r", help="Name of remote to create."),
    no_remote: bool = typer.Option(False, "--no-remote", help="Do not create a 'deis' git remote."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Creates a new application.

    If no id is given a unique name is generated by the controller.
    """
    args = {"app_id": app_id, "buildpack": buildpack, "remote": remote, "no_remote": no_remote}
    with command_scope("apps create", args=args) as op:
        session = runtime.load_session(config, need_app=False)
        echo("Creating Application... ", nl=False)
        with runtime.progress():
            created = session.api.create_app(app_id)
        echo(f"done, created {created.id}")

        if buildpack:
            session.api.set_config(created.id, {"values": {"BUILDPACK_URL": buildpack}})

        if no_remote:
            echo(
                "If you want to add a git remote for this app later, "
                f"use `deis git:remote -a {created.id}`"
            )
        else:
            try:
                git.create_remote(session.host, remote, created.id)
            except git.GitRemoteExistsError as exc:
                raise ArgumentError(
                    f"A git remote with the name {remote} already exists. "
                    "To overwrite this remote run:\n"
                    f"deis git:remote --force --remote {remote} --app {created.id}"
                ) from exc
            echo(REMOTE_CREATED_MESSAGE.format(remote=remote, app=created.id))
        op.success("Application created.", changed=1, context={"app": created.id})


@apps_app.command("list", short_help="list accessible applications")
def list_apps(
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists applications visible to the current user."""
    with command_scope("apps list", args={"limit": limit}) as op:
        session = runtime.load_session(config, need_app=False)
        result = session.api.list_apps(runtime.resolve_limit(session, limit))
        echo(format_listing("Apps", [item.id for item in result], result.count), nl=False)
        op.success("Listed applications.", changed=0, context={"count": result.count})


@apps_app.command("info", short_help="view info about an application")
def app_info(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Prints info about the current application."""
    with command_scope("apps info", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        details = session.api.get_app(session.app)
        url = app_url(session, session.app) or NO_DOMAIN_MESSAGE.format(app=session.app)

        echo(f"=== {details.id} Application")
        echo(f"updated:  {details.updated}")
        echo(f"uuid:     {details.uuid}")
        echo(f"created:  {details.created}")
        echo(f"url:      {url}")
        echo(f"owner:    {details.owner}")
        echo(f"id:       {details.id}")
        echo()
        render_processes(session, details.id)
        echo()
        render_domains(session, details.id)
        echo()
        op.success("Described application.", changed=0, context={"app": details.id})


@apps_app.command("open", short_help="open the application in a browser")
def open_app(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Opens a URL to the application in the default browser."""
    with command_scope("apps open", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        url = app_url(session, session.app)
        if not url:
            raise ArgumentError(NO_DOMAIN_MESSAGE.format(app=session.app))
        if not url.startswith(("http://", "https://")):
            url = f"http://{url}"
        typer.launch(url)
        op.success("Opened application.", changed=0, context={"app": session.app, "url": url})


@apps_app.command("logs", short_help="view aggregated application logs")
def app_logs(
    app: str | None = APP_OPTION,
    lines: int = typer.Option(-1, "--lines", "-n", help="The number of lines to display.", show_default=False),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Retrieves the most recent log events."""
    with command_scope("apps logs", args={"app": app, "lines": lines}) as op:
        session = runtime.load_session(config, app)
        text = session.api.app_logs(session.app, lines)
        for line in text.rstrip("\n").split("\n"):
            echo(line)
        op.success("Fetched logs.", changed=0, context={"app": session.app})


@apps_app.command(
    "run",
    short_help="run a command in an ephemeral app container",
    context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True},
)
def run_command(
    command: list[str] = typer.Argument(..., metavar="<command>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Runs a command inside an ephemeral app container.

    The exit status of the remote command becomes the exit status of deis.
    """
    joined = " ".join(command)
    with command_scope("apps run", args={"app": app, "command": joined}) as op:
        session = runtime.load_session(config, app)
        echo(f"Running '{joined}'...")
        exit_code, output = session.api.run(session.app, joined)
        echo(output, nl=False, err=exit_code != 0)
        op.success("Command finished.", changed=0, context={"app": session.app}, rc=exit_code)
    if exit_code:
        raise typer.Exit(code=exit_code)


@apps_app.command("destroy", short_help="destroy an application")
def destroy_app(
    app: str | None = APP_OPTION,
    confirm: str = typer.Option(
        "", "--confirm", help="Skip the prompt for the application name.", show_default=False
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Destroys an application and every resource bound to it."""
    with command_scope("apps destroy", args={"app": app, "confirm": confirm}) as op:
        session = runtime.load_session(config, app)
        if not confirm:
            echo(DESTROY_WARNING.format(app=session.app))
            confirm = typer.prompt("", default="", show_default=False, prompt_suffix="> ")
        if confirm != session.app:
            raise ArgumentError(f"App {session.app} does not match confirm {confirm}, aborting.")

        started = time.monotonic()
        echo(f"Destroying {session.app}...")
        session.api.delete_app(session.app)
        echo(f"done in {int(time.monotonic() - started)}s")
        if session.app_from_git:
            remove_app_remotes(session, session.app)
        op.success("Application destroyed.", changed=1, context={"app": session.app})


@apps_app.command("transfer", short_help="transfer app ownership to another user")
def transfer_app(
    username: str = typer.Argument(..., metavar="<username>"),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Transfer the application to a new owner."""
    with command_scope("apps transfer", args={"app": app}, target={"username": username}) as op:
        session = runtime.load_session(config, app)
        echo(f"Transferring {session.app} to {username}... ", nl=False)
        session.api.transfer_app(session.app, username)
        echo("done")
        op.success("Application transferred.", changed=1, context={"app": session.app})


__all__ = ["app_url", "apps_app", "expand_url"]
