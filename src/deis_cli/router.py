"""Command routing for the ``deis`` entry point.

Commands are addressed as ``<domain>:<verb>`` (``apps:create``), by a bare
domain that implies a default verb (``apps``) or by a shortcut (``create``).
:func:`route` turns raw ``argv`` into one of four outcomes without touching
click; :class:`RoutingGroup` and :class:`DomainGroup` plug those outcomes
into the click/Typer machinery.

Unknown domains are looked up on ``PATH`` as ``deis-<domain>`` plugins.
"""
from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import click
import typer
import typer.core

from .exit_codes import ExitCode

PLUGIN_PREFIX = "deis-"
HELP_FLAGS = ("--help", "-h")
VERSION_FLAGS = ("--version", "-v")

SHORTCUTS: Mapping[str, str] = MappingProxyType(
    {
        "create": "apps:create",
        "destroy": "apps:destroy",
        "info": "apps:info",
        "login": "auth:login",
        "logout": "auth:logout",
        "logs": "apps:logs",
        "open": "apps:open",
        "passwd": "auth:passwd",
        "pull": "builds:create",
        "register": "auth:register",
        "rollback": "releases:rollback",
        "run": "apps:run",
        "scale": "ps:scale",
        "sharing": "perms:list",
        "sharing:list": "perms:list",
        "sharing:add": "perms:create",
        "sharing:remove": "perms:delete",
        "whoami": "auth:whoami",
    }
)


@dataclass(frozen=True, slots=True)
class DomainSpec:
    """Routing metadata for one command domain."""

    name: str
    summary: str
    default_verb: str | None = None
    title: str | None = None
    help_hint: str = "Use 'deis help [command]' to learn more."

    @property
    def heading(self) -> str:
        return f"Valid commands for {self.title or self.name}:"


DOMAINS: Mapping[str, DomainSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            DomainSpec("apps", "manage applications used to provide services", "list"),
            DomainSpec("auth", "manage authentication with a controller"),
            DomainSpec("builds", "manage builds created using 'git push'", "list"),
            DomainSpec("certs", "manage SSL endpoints for an app", "list"),
            DomainSpec("config", "manage environment variables that define app config", "list"),
            DomainSpec("domains", "manage and assign domain names to your applications", "list"),
            DomainSpec("git", "manage git for applications"),
            DomainSpec("healthchecks", "manage healthchecks for applications", "list"),
            DomainSpec("keys", "manage ssh keys used for 'git push' deployments", "list", "SSH keys"),
            DomainSpec("limits", "manage resource limits for your application", "list"),
            DomainSpec(
                "perms",
                "manage permissions for applications",
                "list",
                help_hint="Use 'deis help perms:[command]' to learn more.",
            ),
            DomainSpec("ps", "manage processes inside an app container", "list", "processes"),
            DomainSpec("registry", "manage private registry information for your application", "list"),
            DomainSpec("releases", "manage releases of an application", "list"),
            DomainSpec("routing", "manage routability of an application", "info"),
            DomainSpec("shortcuts", "show valid shortcuts for commands", "list"),
            DomainSpec("tags", "manage tags for application containers", "list"),
            DomainSpec("users", "manage users", "list"),
        )
    }
)

ROOT_COMMANDS = frozenset({"help", "version"})

SHORT_USAGE = "Usage: deis <command> [<args>...]"
NO_MATCH_MESSAGE = "Found no matching command, try 'deis help'"

USAGE = """
The Deis command-line client issues API calls to a Deis controller.

Usage: deis <command> [<args>...]

Option flags::

  -h --help     display help information
  -v --version  display client version
  -c --config   (optional) path to configuration file. Equivalent to
                setting $DEIS_PROFILE. Defaults to ~/.deis/client.json.
                If not set to a filepath, will assume location ~/.deis/<value>.json

Auth commands, use 'deis help auth' to learn more::

  register      register a new user with a controller
  login         login to a controller
  logout        logout from the current controller

Subcommands, use 'deis help [subcommand]' to learn more::

  apps          manage applications used to provide services
  builds        manage builds created using 'git push'
  certs         manage SSL endpoints for an app
  config        manage environment variables that define app config
  domains       manage and assign domain names to your applications
  git           manage git for applications
  healthchecks  manage healthchecks for applications
  keys          manage ssh keys used for 'git push' deployments
  limits        manage resource limits for your application
  perms         manage permissions for applications
  ps            manage processes inside an app container
  registry      manage private registry information for your application
  releases      manage releases of an application
  routing       manage routability of an application
  tags          manage tags for application containers
  users         manage users
  version       display client version

Shortcut commands, use 'deis shortcuts' to see all::

  create        create a new application
  destroy       destroy an application
  info          view information about the current app
  logs          view aggregated log info for the app
  open          open a URL to the app in a browser
  pull          imports an image and deploys as a new release
  run           run a command in an ephemeral app container
  scale         scale processes by type (web=2, worker=1)

Use 'git push deis master' to deploy to an application.
"""


@dataclass(frozen=True, slots=True)
class Invoke:
    """Dispatch to a built-in command with click-style ``args``."""

    args: list[str]


@dataclass(frozen=True, slots=True)
class ShowUsage:
    """No arguments were given."""


@dataclass(frozen=True, slots=True)
class Delegate:
    """Replace the process with a ``deis-<domain>`` plugin."""

    binary: str
    argv: list[str]


@dataclass(frozen=True, slots=True)
class Unknown:
    """Neither a built-in domain nor a plugin matched."""

    domain: str


RouteOutcome = Invoke | ShowUsage | Delegate | Unknown


class PluginDelegation(Exception):
    """Raised to hand control to an external ``deis-<domain>`` plugin."""

    def __init__(self, binary: str, argv: Sequence[str]) -> None:
        super().__init__(f"delegating to {binary}")
        self.binary = binary
        self.argv = list(argv)


def expand_shortcut(command: str) -> str:
    """Return the full ``domain:verb`` form of *command* when it is a shortcut."""
    return SHORTCUTS.get(command, command)


def normalize_args(argv: Sequence[str]) -> tuple[str, list[str]]:
    """Rewrite help/version flags and shortcuts; return ``(domain, argv)``."""
    args = list(argv)
    if len(args) == 1:
        if args[0] in HELP_FLAGS:
            args[0] = "help"
        elif args[0] in VERSION_FLAGS:
            args[0] = "version"
    if len(args) > 1 and (args[0] == "help" or args[0] in HELP_FLAGS):
        args = [*args[1:], "--help"]
    if not args:
        return "", args
    args[0] = expand_shortcut(args[0])
    domain, _, _ = args[0].partition(":")
    return domain, args


def expand_verb(domain: str, args: Sequence[str]) -> list[str]:
    """Turn ``domain:verb rest...`` (or a bare domain) into click arguments."""
    head, *rest = args
    if ":" in head:
        verb = head.split(":", 1)[1]
        return [domain, verb, *rest]
    spec = DOMAINS[domain]
    if spec.default_verb is None:
        return [domain, "--help"]
    if rest and rest[0] in HELP_FLAGS:
        return [domain, "--help"]
    return [domain, spec.default_verb, *rest]


def plugin_argv(domain: str, args: Sequence[str]) -> list[str]:
    """Return the ``argv`` handed to the ``deis-<domain>`` plugin."""
    forwarded = list(args)
    prefix = f"{domain}:"
    if forwarded and forwarded[0].startswith(prefix):
        forwarded[0] = forwarded[0][len(prefix):]
    return [f"{PLUGIN_PREFIX}{domain}", *forwarded]


def route(
    argv: Sequence[str],
    *,
    which: Callable[[str], str | None] | None = None,
) -> RouteOutcome:
    """Classify *argv* into a routing outcome.

    Plugins are looked up with *which*, defaulting to :func:`shutil.which`.
    """
    which = which or shutil.which
    domain, args = normalize_args(argv)
    if not args:
        return ShowUsage()
    if domain in ROOT_COMMANDS:
        return Invoke([domain, *args[1:]])
    if domain in DOMAINS:
        return Invoke(expand_verb(domain, args))
    binary = which(f"{PLUGIN_PREFIX}{domain}") if domain else None
    if binary is None:
        return Unknown(domain)
    return Delegate(binary, plugin_argv(domain, args))


def print_no_match() -> None:
    """Write the short "no matching command" usage to standard error."""
    typer.echo(NO_MATCH_MESSAGE, err=True)
    typer.echo(SHORT_USAGE, err=True)


class RoutingGroup(typer.core.TyperGroup):
    """Root group that routes raw arguments before click parses them."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        outcome = route(args)
        if isinstance(outcome, ShowUsage):
            typer.echo(SHORT_USAGE, err=True)
            ctx.exit(ExitCode.FAILURE)
        if isinstance(outcome, Unknown):
            print_no_match()
            ctx.exit(ExitCode.FAILURE)
        if isinstance(outcome, Delegate):
            raise PluginDelegation(outcome.binary, outcome.argv)
        return super().parse_args(ctx, outcome.args)

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write(USAGE.lstrip("\n"))


class DomainGroup(typer.core.TyperGroup):
    """Group for one domain: renders the verb listing and softens unknown verbs."""

    def domain_spec(self, ctx: click.Context) -> DomainSpec:
        name = ctx.info_name or self.name or ""
        return DOMAINS.get(name) or DomainSpec(name, self.help or "")

    def render_help(self, ctx: click.Context) -> str:
        spec = self.domain_spec(ctx)
        entries = [
            (f"{spec.name}:{name}", command.get_short_help_str(limit=200))
            for name, command in self.commands.items()
            if not command.hidden
        ]
        width = max((len(label) for label, _ in entries), default=0) + 6
        lines = [spec.heading, ""]
        lines.extend(f"{label:<{width}}{summary}".rstrip() for label, summary in entries)
        lines.extend(["", spec.help_hint])
        return "\n".join(lines) + "\n"

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write(self.render_help(ctx))

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = click.utils.make_str(args[0]) if args else ""
        if self.get_command(ctx, name) is None:
            if len(args) > 1 and args[1] in HELP_FLAGS:
                typer.echo(self.render_help(ctx), nl=False)
            else:
                print_no_match()
            ctx.exit(ExitCode.OK)
        return super().resolve_command(ctx, args)


def domain_app(name: str, **kwargs: Any) -> typer.Typer:
    """Return a Typer sub-application for domain *name*."""
    spec = DOMAINS[name]
    return typer.Typer(cls=DomainGroup, help=spec.summary, add_completion=False, **kwargs)


__all__ = [
    "DOMAINS",
    "NO_MATCH_MESSAGE",
    "SHORTCUTS",
    "SHORT_USAGE",
    "USAGE",
    "Delegate",
    "DomainGroup",
    "DomainSpec",
    "Invoke",
    "PluginDelegation",
    "RoutingGroup",
    "ShowUsage",
    "Unknown",
    "domain_app",
    "expand_shortcut",
    "expand_verb",
    "normalize_args",
    "plugin_argv",
    "print_no_match",
    "route",
]
