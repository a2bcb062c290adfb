"""Typer entry point for the ``deis`` command-line client.

Raw arguments are routed by :class:`~deis_cli.router.RoutingGroup` before
click parses them, so ``deis create``, ``deis apps:create`` and
``deis apps create`` all reach the same command. Unknown domains are handed
to ``deis-<domain>`` plugins found on ``PATH``.
"""
from __future__ import annotations

import os

import typer

from . import __version__
from .commands import DOMAIN_APPS
from .logging import configure_logging
from .router import USAGE, PluginDelegation, RoutingGroup
from .runtime import LOG_LEVEL_ENV_VAR, command_scope, echo

app = typer.Typer(
    cls=RoutingGroup,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="The Deis command-line client issues API calls to a Deis controller.",
)


@app.callback()
def _root() -> None:
    """Entry point callback invoked for every CLI execution."""
    configure_logging(os.environ.get(LOG_LEVEL_ENV_VAR))


@app.command("help", short_help="display help information")
def show_help() -> None:
    """Prints the top-level usage."""
    echo(USAGE.lstrip("\n"), nl=False)


@app.command("version", short_help="display client version")
def show_version() -> None:
    """Displays the client version."""
    with command_scope("version", target={"kind": "meta"}) as op:
        echo(f"v{__version__}")
        op.success("Reported client version.", changed=0)


for _name, _domain in DOMAIN_APPS.items():
    app.add_typer(_domain, name=_name)


def main() -> None:
    """Console script entry point."""
    try:
        app()
    except PluginDelegation as delegation:
        os.execve(delegation.binary, delegation.argv, os.environ)


__all__ = ["app", "main"]
