"""``deis domains`` commands."""
from __future__ import annotations

import typer

from .. import runtime
from ..formatting import format_listing
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, LIMIT_OPTION, Session, command_scope, echo

domains_app = domain_app("domains")


def render_domains(session: Session, app: str, limit: int | None = None) -> None:
    """Print the ``=== <app> Domains`` listing."""
    result = session.api.list_domains(app, limit)
    names = [domain.domain for domain in result]
    echo(format_listing(f"{app} Domains", names, result.count), nl=False)


@domains_app.command("list", short_help="list domains bound to an app")
def list_domains(
    app: str | None = APP_OPTION,
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists domains bound to an application."""
    with command_scope("domains list", args={"app": app, "limit": limit}) as op:
        session = runtime.load_session(config, app)
        render_domains(session, session.app, runtime.resolve_limit(session, limit))
        op.success("Listed domains.", changed=0, context={"app": session.app})


@domains_app.command("add", short_help="bind a domain to an application")
def add_domain(
    domain: str = typer.Argument(..., metavar="<domain>"),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Binds a domain to an application."""
    with command_scope("domains add", args={"app": app}, target={"domain": domain}) as op:
        session = runtime.load_session(config, app)
        echo(f"Adding {domain} to {session.app}... ", nl=False)
        with runtime.progress():
            session.api.add_domain(session.app, domain)
        echo("done")
        op.success("Domain added.", changed=1, context={"app": session.app})


@domains_app.command("remove", short_help="unbind a domain from an application")
def remove_domain(
    domain: str = typer.Argument(..., metavar="<domain>"),
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Unbinds a domain for an application."""
    with command_scope("domains remove", args={"app": app}, target={"domain": domain}) as op:
        session = runtime.load_session(config, app)
        echo(f"Removing {domain} from {session.app}... ", nl=False)
        with runtime.progress():
            session.api.remove_domain(session.app, domain)
        echo("done")
        op.success("Domain removed.", changed=1, context={"app": session.app})


__all__ = ["domains_app", "render_domains"]
