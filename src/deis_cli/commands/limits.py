"""``deis limits`` commands: per-process memory and CPU limits."""
from __future__ import annotations

from collections.abc import Mapping

import typer

from .. import runtime
from ..formatting import LABEL_SPACING, pretty_tabs
from ..keyvalue import parse_limits, unset_values
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

limits_app = domain_app("limits")

CPU_OPTION = typer.Option(False, "--cpu", help="Limit CPU shares instead of memory.")
MEMORY_OPTION = typer.Option(False, "--memory", "-m", help="Limit memory (the default).")


def _section(limits: Mapping[str, object]) -> str:
    return pretty_tabs(limits, LABEL_SPACING) if limits else "Unlimited\n"


def render_limits(session: Session) -> None:
    """Print the memory and CPU limits of the session's application."""
    current = session.api.get_config(session.app)
    echo(f"=== {session.app} Limits\n")
    echo("--- Memory")
    echo(_section(current.memory), nl=False)
    echo("\n--- CPU")
    echo(_section(current.cpu), nl=False)


@limits_app.command("list", short_help="list resource limits for an app")
def list_limits(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists resource limits for an application."""
    with command_scope("limits list", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        render_limits(session)
        op.success("Listed limits.", changed=0, context={"app": session.app})


@limits_app.command("set", short_help="set resource limits for an app")
def set_limits(
    entries: list[str] = typer.Argument(..., metavar="<type>=<limit>..."),
    app: str | None = APP_OPTION,
    cpu: bool = CPU_OPTION,
    memory: bool = MEMORY_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets resource limits for an application.

    Memory limits use B, K, M or G units (web=1G). CPU limits are a number of
    CPUs or milli units (web=500m).
    """
    kind = "cpu" if cpu else "memory"
    with command_scope("limits set", args={"app": app, "kind": kind, "entries": entries}) as op:
        limits = parse_limits(entries, kind)
        session = runtime.load_session(config, app)
        echo("Applying limits... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {kind: limits})
        echo("done\n")
        render_limits(session)
        op.success("Limits applied.", changed=len(limits), context={"app": session.app, "kind": kind})


@limits_app.command("unset", short_help="unset resource limits for an app")
def unset_limits(
    proc_types: list[str] = typer.Argument(..., metavar="<type>..."),
    app: str | None = APP_OPTION,
    cpu: bool = CPU_OPTION,
    memory: bool = MEMORY_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unsets resource limits for an application."""
    kind = "cpu" if cpu else "memory"
    with command_scope("limits unset", args={"app": app, "kind": kind, "types": proc_types}) as op:
        session = runtime.load_session(config, app)
        echo("Applying limits... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {kind: unset_values(proc_types)})
        echo("done\n")
        render_limits(session)
        op.success("Limits removed.", changed=len(proc_types), context={"app": session.app, "kind": kind})


__all__ = ["limits_app", "render_limits"]
