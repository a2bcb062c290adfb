"""``deis healthchecks`` commands: liveness and readiness probes."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

import typer

from .. import runtime
from ..api import LIVENESS, READINESS, Healthcheck
from ..errors import ArgumentError
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, Session, command_scope, echo

PROBE_KEYS = {"liveness": LIVENESS, "readiness": READINESS}
PROBE_KINDS = ("httpGet", "exec", "tcpSocket")

healthchecks_app = domain_app("healthchecks")


def probe_key(name: str) -> str:
    """Map ``liveness``/``readiness`` to the controller's probe key."""
    if name in PROBE_KEYS.values():
        return name
    try:
        return PROBE_KEYS[name]
    except KeyError:
        raise ArgumentError(
            f"{name} is not a valid healthcheck type. Valid types are: liveness, readiness"
        ) from None


def _port(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ArgumentError(f"{value} is not a valid port number") from None


def _headers(entries: Sequence[str]) -> list[dict[str, str]]:
    headers = []
    for entry in entries:
        name, sep, value = entry.partition(":")
        if not sep or not name:
            raise ArgumentError(f"{entry} is not a valid header, expected <name>:<value>")
        headers.append({"name": name.strip(), "value": value.strip()})
    return headers


def build_probe(
    kind: str,
    args: Sequence[str],
    *,
    path: str = "/",
    headers: Sequence[str] = (),
    initial_delay: int = 50,
    timeout: int = 50,
    period: int = 10,
    success_threshold: int = 1,
    failure_threshold: int = 3,
) -> Healthcheck:
    """Build a probe of *kind* from the positional *args* of ``healthchecks:set``."""
    probe = Healthcheck(
        initial_delay_seconds=initial_delay,
        timeout_seconds=timeout,
        period_seconds=period,
        success_threshold=success_threshold,
        failure_threshold=failure_threshold,
    )
    if kind == "httpGet":
        if len(args) != 1:
            raise ArgumentError("httpGet probes take exactly one argument: <port>")
        probe.http_get = {"path": path, "port": _port(args[0]), "httpHeaders": _headers(headers)}
    elif kind == "exec":
        if not args:
            raise ArgumentError("exec probes need a command to run")
        probe.exec = {"command": list(args)}
    elif kind == "tcpSocket":
        if len(args) != 1:
            raise ArgumentError("tcpSocket probes take exactly one argument: <port>")
        probe.tcp_socket = {"port": _port(args[0])}
    else:
        raise ArgumentError(
            f"{kind} is not a valid probe. Valid probes are: {', '.join(PROBE_KINDS)}"
        )
    return probe


def _describe(probes: Mapping[str, object], key: str, label: str) -> str:
    value = probes.get(key)
    if isinstance(value, Mapping):
        return Healthcheck.from_dict(value).describe()
    return f"No {label} probe configured."


def render_healthchecks(session: Session) -> None:
    """Print both probes configured for the session's application."""
    probes = session.api.get_config(session.app).healthcheck
    echo(f"=== {session.app} Healthchecks\n")
    echo("--- Liveness")
    echo(_describe(probes, LIVENESS, "liveness"))
    echo("\n--- Readiness")
    echo(_describe(probes, READINESS, "readiness"))


@healthchecks_app.command("list", short_help="list healthchecks for an app")
def list_healthchecks(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists healthchecks for an application."""
    with command_scope("healthchecks list", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        render_healthchecks(session)
        op.success("Listed healthchecks.", changed=0, context={"app": session.app})


@healthchecks_app.command("set", short_help="set healthchecks for an app")
def set_healthcheck(
    health_type: str = typer.Argument(..., metavar="<liveness|readiness>"),
    kind: str = typer.Argument(..., metavar="<httpGet|exec|tcpSocket>"),
    args: list[str] = typer.Argument(..., metavar="<args>..."),
    app: str | None = APP_OPTION,
    path: str = typer.Option("/", "--path", help="Path for an httpGet probe."),
    header: list[str] = typer.Option(
        [], "--header", help="Header for an httpGet probe, as <name>:<value>.", show_default=False
    ),
    initial_delay: int = typer.Option(
        50, "--initial-delay-timeout", help="Seconds after start before the probe runs."
    ),
    timeout: int = typer.Option(50, "--timeout", help="Seconds after which the probe times out."),
    period: int = typer.Option(10, "--period", help="How often, in seconds, to run the probe."),
    success_threshold: int = typer.Option(
        1, "--success-threshold", help="Consecutive successes needed after a failure."
    ),
    failure_threshold: int = typer.Option(
        3, "--failure-threshold", help="Consecutive failures before the probe gives up."
    ),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Sets a healthcheck for an application.

    Examples:

      deis healthchecks:set liveness httpGet 80 --path=/healthz

      deis healthchecks:set readiness exec -- /bin/cat /tmp/ready

      deis healthchecks:set liveness tcpSocket 5000
    """
    options = {"app": app, "type": health_type, "kind": kind, "args": args}
    with command_scope("healthchecks set", args=options) as op:
        key = probe_key(health_type)
        probe = build_probe(
            kind,
            args,
            path=path,
            headers=header,
            initial_delay=initial_delay,
            timeout=timeout,
            period=period,
            success_threshold=success_threshold,
            failure_threshold=failure_threshold,
        )
        session = runtime.load_session(config, app)
        echo(f"Applying {key} healthcheck... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"healthcheck": {key: probe.to_dict()}})
        echo("done\n")
        render_healthchecks(session)
        op.success("Healthcheck applied.", changed=1, context={"app": session.app, "probe": key})


@healthchecks_app.command("unset", short_help="unset healthchecks for an app")
def unset_healthchecks(
    health_types: list[str] = typer.Argument(..., metavar="<liveness|readiness>..."),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unsets healthchecks for an application."""
    with command_scope("healthchecks unset", args={"app": app, "types": health_types}) as op:
        keys = [probe_key(name) for name in health_types]
        session = runtime.load_session(config, app)
        echo("Removing healthchecks... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"healthcheck": {key: None for key in keys}})
        echo("done\n")
        render_healthchecks(session)
        op.success("Healthchecks removed.", changed=len(keys), context={"app": session.app})


__all__ = ["build_probe", "healthchecks_app", "probe_key", "render_healthchecks"]
