"""``deis perms`` commands: application collaborators and administrators."""
from __future__ import annotations

import typer

from .. import runtime
from ..formatting import format_listing
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, command_scope, echo

ADMIN_OPTION = typer.Option(
    False, "--admin", help="Act on system administrators instead of app collaborators."
)

perms_app = domain_app("perms")


@perms_app.command("list", short_help="list permissions granted on an app")
def list_perms(
    app: str | None = APP_OPTION,
    admin: bool = ADMIN_OPTION,
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists all users with permission to use an app, or lists all users
    with system administrator privileges.
    """
    with command_scope("perms list", args={"app": app, "admin": admin, "limit": limit}) as op:
        session = runtime.load_session(config, app, need_app=not admin)
        if admin:
            result = session.api.list_admins(runtime.resolve_limit(session, limit))
            echo(format_listing("Administrators", list(result), result.count), nl=False)
            op.success("Listed administrators.", changed=0, context={"count": result.count})
            return
        users = session.api.list_app_perms(session.app)
        echo(f"=== {session.app}'s Users")
        for user in users:
            echo(user)
        op.success("Listed collaborators.", changed=0, context={"app": session.app})


@perms_app.command("create", short_help="create a new permission for a user")
def create_perm(
    username: str = typer.Argument(..., metavar="<username>"),
    app: str | None = APP_OPTION,
    admin: bool = ADMIN_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Gives another user permission to use an app, or gives another user
    system administrator privileges.
    """
    with command_scope("perms create", args={"app": app, "admin": admin}, target={"username": username}) as op:
        session = runtime.load_session(config, app, need_app=not admin)
        if admin:
            echo(f"Adding {username} to system administrators... ", nl=False)
            session.api.create_admin(username)
        else:
            echo(f"Adding {username} to {session.app} collaborators... ", nl=False)
            session.api.create_app_perm(session.app, username)
        echo("done")
        op.success("Permission granted.", changed=1, context={"app": session.app, "admin": admin})


@perms_app.command("delete", short_help="delete a permission for a user")
def delete_perm(
    username: str = typer.Argument(..., metavar="<username>"),
    app: str | None = APP_OPTION,
    admin: bool = ADMIN_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Revokes another user's permission to use an app, or revokes another
    user's system administrator privileges.
    """
    with command_scope("perms delete", args={"app": app, "admin": admin}, target={"username": username}) as op:
        session = runtime.load_session(config, app, need_app=not admin)
        if admin:
            echo(f"Removing {username} from system administrators... ", nl=False)
            session.api.delete_admin(username)
        else:
            echo(f"Removing {username} from {session.app} collaborators... ", nl=False)
            session.api.delete_app_perm(session.app, username)
        echo("done")
        op.success("Permission revoked.", changed=1, context={"app": session.app, "admin": admin})


__all__ = ["perms_app"]
