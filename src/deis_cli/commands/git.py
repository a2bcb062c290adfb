"""``deis git`` commands: manage the builder remote of the local repository."""
from __future__ import annotations

import typer

from .. import git, runtime
from ..errors import GitError
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

REMOTE_CREATED_MESSAGE = "Git remote {remote} successfully created for app {app}."
REMOTES_REMOVED_MESSAGE = "Git remotes for app {app} removed."

git_app = domain_app("git")


def remove_app_remotes(session: Session, app: str) -> list[str]:
    """Delete every remote pointing at *app* and report it."""
    removed = git.delete_app_remotes(session.host, app)
    echo(REMOTES_REMOVED_MESSAGE.format(app=app))
    return removed


@git_app.command("remote", short_help="adds git remote of application to repository")
def add_remote(
    app: str | None = APP_OPTION,
    remote: str = typer.Option("deis", "--remote", "-r", help="Name of remote to create."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite the remote if it already exists."
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Adds a git remote for the application to the current repository."""
    with command_scope("git remote", args={"app": app, "remote": remote, "force": force}) as op:
        session = runtime.load_session(config, app)
        expected = git.remote_url(session.host, session.app)
        existing = {item.name: item.url for item in git.list_remotes()}
        if remote in existing:
            if force:
                git.delete_remote(remote)
            elif existing[remote] == expected:
                echo(
                    f"Remote {remote} already exists and is correctly configured "
                    f"for app {session.app}."
                )
                op.success("Remote already configured.", changed=0, context={"app": session.app})
                return
            else:
                raise GitError(
                    f"Remote {remote} already exists, please run "
                    f"'deis git:remote -f' to overwrite\n"
                    f"Existing remote URL: {existing[remote]}\n"
                    f"Expected remote URL: {expected}"
                )
        git.create_remote(session.host, remote, session.app)
        echo(REMOTE_CREATED_MESSAGE.format(remote=remote, app=session.app))
        op.success("Remote created.", changed=1, context={"app": session.app, "remote": remote})


@git_app.command("remove", short_help="removes git remotes of application from repository")
def remove_remotes(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Removes every git remote pointing at the application."""
    with command_scope("git remove", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        removed = remove_app_remotes(session, session.app)
        op.success("Remotes removed.", changed=len(removed), context={"app": session.app})


__all__ = ["REMOTE_CREATED_MESSAGE", "git_app", "remove_app_remotes"]
