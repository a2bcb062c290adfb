"""``deis ps`` commands: list, scale and restart application processes."""
from __future__ import annotations

import re
import time

import typer

from .. import runtime
from ..errors import PodNotFoundError
from ..formatting import format_processes
from ..keyvalue import parse_scale_targets
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, Session, command_scope, echo

POD_SUFFIX_PATTERN = re.compile(r"[0-9]{8,10}-[a-z0-9]{5}$")

ps_app = domain_app("ps")


def render_processes(session: Session, app: str, limit: int | None = None) -> None:
    """Print the ``=== <app> Processes`` block."""
    pods = session.api.list_pods(app, limit)
    echo(format_processes(app, pods), nl=False)


def parse_process_target(target: str, app: str) -> tuple[str, str]:
    """Split a restart target into ``(type, pod name)``.

    A bare type (``web``) restarts every pod of that type. A full pod name
    (``myapp-web-1234567890-abcde`` or ``myapp-v2-web-abcde``) restarts only
    that pod.
    """
    if "-" not in target:
        return target, ""
    stripped = target.replace(f"{app}-", "", 1)
    parts = stripped.split("-")
    if POD_SUFFIX_PATTERN.search(stripped):
        return parts[0], target
    return (parts[1] if len(parts) > 1 else parts[0]), target


@ps_app.command("list", short_help="list application processes")
def list_processes(
    app: str | None = APP_OPTION,
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists processes servicing an application."""
    with command_scope("ps list", args={"app": app, "limit": limit}) as op:
        session = runtime.load_session(config, app)
        render_processes(session, session.app, runtime.resolve_limit(session, limit))
        op.success("Listed processes.", changed=0, context={"app": session.app})


@ps_app.command("scale", short_help="scale processes (e.g. web=4 worker=2)")
def scale_processes(
    targets: list[str] = typer.Argument(..., metavar="<type>=<num>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Scales an application's processes by type.

    Example: deis ps:scale web=4 worker=2
    """
    with command_scope("ps scale", args={"app": app, "targets": targets}) as op:
        session = runtime.load_session(config, app)
        counts = parse_scale_targets(targets)
        echo(f"Scaling processes... but first, {runtime.drink_of_choice()}!")
        started = time.monotonic()
        with runtime.progress():
            session.api.scale(session.app, counts)
        echo(f"done in {int(time.monotonic() - started)}s")
        render_processes(session, session.app)
        op.success("Scaled processes.", changed=len(counts), context={"app": session.app, "targets": counts})


@ps_app.command("restart", short_help="restart an application's processes")
def restart_processes(
    target: str = typer.Argument("", metavar="[<type>]", show_default=False),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Restart an application's processes, by type or by pod name.

    With no argument every process of the application is restarted.
    """
    with command_scope("ps restart", args={"app": app, "target": target}) as op:
        session = runtime.load_session(config, app)
        proc_type, pod_name = parse_process_target(target, session.app) if target else ("", "")
        echo(f"Restarting processes... but first, {runtime.drink_of_choice()}!")
        started = time.monotonic()
        try:
            with runtime.progress():
                pods = session.api.restart(session.app, proc_type, pod_name)
        except PodNotFoundError as exc:
            raise PodNotFoundError(
                f"Could not find process type {proc_type} in app {session.app}",
                status_code=exc.status_code,
            ) from exc
        if not pods:
            echo("Could not find any processes to restart")
            op.warning("No processes restarted.", changed=0, context={"app": session.app})
            return
        echo(f"done in {int(time.monotonic() - started)}s")
        echo(format_processes(session.app, pods), nl=False)
        op.success("Restarted processes.", changed=len(pods), context={"app": session.app})


__all__ = ["parse_process_target", "ps_app", "render_processes"]
