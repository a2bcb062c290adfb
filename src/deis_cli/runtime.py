"""Runtime helpers shared by every deis command module.

Command modules import from here rather than from :mod:`deis_cli.cli` so the
entry point can register them without circular imports.
"""
from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import requests
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import git
from .api import ControllerAPI, ControllerClient
from .errors import DeisError
from .exit_codes import ExitCode
from .keyvalue import parse_limit
from .logging import OperationScope, StructuredLogger
from .progress import Progress
from .settings import Settings, load_settings, settings_dir

LOG_DIR_ENV_VAR = "DEIS_LOG_DIR"
LOG_LEVEL_ENV_VAR = "DEIS_LOG_LEVEL"
DRINK_ENV_VAR = "DEIS_DRINK_OF_CHOICE"
DEFAULT_DRINK = "coffee"

console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help=(
        "Path to the client profile, or a profile name under ~/.deis. "
        "Equivalent to setting $DEIS_PROFILE."
    ),
)

APP_OPTION = typer.Option(
    None,
    "--app",
    "-a",
    help="The uniquely identifiable name for the application.",
)

LIMIT_OPTION = typer.Option(
    None,
    "--limit",
    "-l",
    help="The maximum number of results to display, defaults to the profile setting.",
)


@dataclass(slots=True)
class Session:
    """Objects a command needs to talk to the controller."""

    settings: Settings
    client: ControllerClient
    api: ControllerAPI
    app: str = ""
    app_from_git: bool = False

    @property
    def host(self) -> str:
        return self.client.host


def create_http_session() -> requests.Session:
    """Return the HTTP session used for controller calls."""
    return requests.Session()


def warn_api_mismatch(client_version: str, server_version: str) -> None:
    """Warn once that client and controller speak different API versions."""
    err_console.print(
        "[yellow]!    WARNING: Client and server API versions do not match. "
        "Please consider upgrading.[/yellow]"
    )
    err_console.print(f"[yellow]!    Client version: {escape(client_version)}[/yellow]")
    err_console.print(f"[yellow]!    Server version: {escape(server_version)}[/yellow]")


def open_client(
    controller: str,
    token: str = "",
    *,
    ssl_verify: bool = True,
    limit: int | None = None,
) -> ControllerClient:
    """Return a client for *controller* wired to the shared HTTP session."""
    extra = {"limit": limit} if limit else {}
    return ControllerClient(
        controller,
        token,
        ssl_verify=ssl_verify,
        session=create_http_session(),
        on_api_mismatch=warn_api_mismatch,
        **extra,
    )


def load_session(cf: str | None, app: str | None = None, *, need_app: bool = True) -> Session:
    """Load the profile, build a client and resolve the target application."""
    settings = load_settings(cf)
    client = open_client(
        settings.controller,
        settings.token,
        ssl_verify=settings.ssl_verify,
        limit=settings.response_limit,
    )
    session = Session(settings=settings, client=client, api=ControllerAPI(client))
    if need_app:
        if app:
            session.app = app
        else:
            session.app = git.detect_app_name(client.host)
            session.app_from_git = True
    return session


def resolve_limit(session: Session, limit: str | None) -> int:
    """Return the ``--limit`` value, or the profile default when it is unset."""
    value = parse_limit(limit)
    return session.settings.response_limit if value <= 0 else value


def log_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the directory for the structured operations log."""
    resolved_env = os.environ if env is None else env
    override = resolved_env.get(LOG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return settings_dir(resolved_env) / "logs"


def get_logger() -> StructuredLogger:
    """Return the structured logger for this invocation."""
    return StructuredLogger(log_dir())


def drink_of_choice() -> str:
    """Return the beverage mentioned while waiting on the scheduler."""
    return os.environ.get(DRINK_ENV_VAR) or DEFAULT_DRINK


def progress() -> Progress:
    """Return a progress indicator bound to standard output."""
    return Progress(sys.stdout)


def stdin_is_tty() -> bool:
    return sys.stdin.isatty()


def stdout_is_tty() -> bool:
    return sys.stdout.isatty()


def print_table(table: Table, width: int) -> None:
    """Print *table* on stdout, widening the console so no cell is cut."""
    Console(width=max(width, console.width), soft_wrap=True, highlight=False).print(table)


def echo(text: str = "", *, nl: bool = True, err: bool = False) -> None:
    """Write plain *text* without any styling."""
    typer.echo(text, nl=nl, err=err)


def command_error(
    op: OperationScope,
    message: str,
    *,
    rc: int = ExitCode.FAILURE,
    errors: Sequence[str] | None = None,
) -> NoReturn:
    """Emit a structured error and terminate the command."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    op.error(message, errors=list(errors or [message]), rc=int(rc))
    raise typer.Exit(code=int(rc))


@contextmanager
def command_scope(
    name: str,
    *,
    args: Mapping[str, object] | None = None,
    target: Mapping[str, object] | None = None,
) -> Iterator[OperationScope]:
    """Run a command body inside a logged operation.

    :class:`~deis_cli.errors.DeisError` and :class:`OSError` escaping the body
    are reported as ``Error: <message>`` and exit with status 1.
    """
    logger = get_logger()
    with logger.operation(name, args=args, target=target) as op:
        try:
            yield op
        except (DeisError, OSError) as exc:
            command_error(op, str(exc).rstrip("\n") or type(exc).__name__)


__all__ = [
    "APP_OPTION",
    "CONFIG_OPTION",
    "LIMIT_OPTION",
    "Session",
    "command_error",
    "command_scope",
    "console",
    "create_http_session",
    "drink_of_choice",
    "echo",
    "err_console",
    "get_logger",
    "load_session",
    "log_dir",
    "open_client",
    "print_table",
    "progress",
    "resolve_limit",
    "stdin_is_tty",
    "stdout_is_tty",
    "warn_api_mismatch",
]
