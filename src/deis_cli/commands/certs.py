"""``deis certs`` commands: SSL endpoints served by the router."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

import typer
from rich import box
from rich.table import Table

from .. import runtime
from ..api import Cert
from ..formatting import format_expiry, short_date, short_fingerprint
from ..router import domain_app
from ..runtime import CONFIG_OPTION, LIMIT_OPTION, command_scope, echo

CERT_COLUMNS = (
    "Name",
    "Common Name",
    "SubjectAltName",
    "Expires",
    "Fingerprint",
    "Domains",
    "Updated",
    "Created",
)

certs_app = domain_app("certs")


def _date(moment: datetime | None) -> str:
    return short_date(moment) if moment is not None else ""


def cert_row(cert: Cert) -> list[str]:
    """Return the table cells describing *cert*."""
    return [
        cert.name,
        cert.common_name,
        ",".join(cert.san),
        format_expiry(cert.expires) if cert.expires else cert.expires_raw,
        short_fingerprint(cert.fingerprint),
        ",".join(cert.domains),
        _date(cert.updated),
        _date(cert.created),
    ]


@certs_app.command("list", short_help="list SSL certificates for an app")
def list_certs(
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Show certificate information for an SSL application."""
    with command_scope("certs list", args={"limit": limit}) as op:
        session = runtime.load_session(config, need_app=False)
        result = session.api.list_certs(runtime.resolve_limit(session, limit))
        if not result.items:
            echo("No certs")
            op.success("No certificates found.", changed=0)
            return

        rows = [cert_row(cert) for cert in result]
        table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE_HEAD)
        widths = []
        for index, column in enumerate(CERT_COLUMNS):
            table.add_column(column, no_wrap=True)
            widths.append(max(len(column), *(len(row[index]) for row in rows)))
        for row in rows:
            table.add_row(*row)
        # one space of padding per side, one divider between columns, two edges
        runtime.print_table(table, sum(widths) + 3 * len(widths) + 1)
        op.success("Listed certificates.", changed=0, context={"count": result.count})


@certs_app.command("add", short_help="add an SSL certificate to an app")
def add_cert(
    name: str = typer.Argument(..., metavar="<name>"),
    cert: Path = typer.Argument(..., metavar="<cert>", help="The public key of the SSL certificate."),
    key: Path = typer.Argument(..., metavar="<key>", help="The private key of the SSL certificate."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Binds a certificate/key pair to an application.

    Certificate names must be lowercase alphanumerics and dashes.
    """
    with command_scope("certs add", target={"name": name, "cert": cert, "key": key}) as op:
        session = runtime.load_session(config, need_app=False)
        echo("Adding SSL endpoint... ", nl=False)
        with runtime.progress():
            certificate = cert.read_text(encoding="utf-8")
            private_key = key.read_text(encoding="utf-8")
            session.api.add_cert(name, certificate, private_key)
        echo("done")
        op.success("Certificate added.", changed=1, context={"name": name})


@certs_app.command("remove", short_help="remove an SSL certificate from an app")
def remove_cert(
    name: str = typer.Argument(..., metavar="<name>"),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Removes a certificate/key pair from the controller."""
    with command_scope("certs remove", target={"name": name}) as op:
        session = runtime.load_session(config, need_app=False)
        echo(f"Removing {name}... ", nl=False)
        with runtime.progress():
            session.api.remove_cert(name)
        echo("done")
        op.success("Certificate removed.", changed=1, context={"name": name})


@certs_app.command("info", short_help="get detailed information about the certificate")
def cert_info(
    name: str = typer.Argument(..., metavar="<name>"),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Fetch more detailed information about a certificate."""
    with command_scope("certs info", target={"name": name}) as op:
        session = runtime.load_session(config, need_app=False)
        cert = session.api.get_cert(name)
        domains = ",".join(cert.domains) or "No connected domains"
        san = ",".join(cert.san) or "N/A"

        echo(f"=== {cert.name} Certificate")
        echo(f"Common Name(s):     {cert.common_name}")
        echo(f"Expires At:         {cert.expires_raw}")
        echo(f"Starts At:          {cert.starts_raw}")
        echo(f"Fingerprint:        {cert.fingerprint}")
        echo(f"Subject Alt Name:   {san}")
        echo(f"Issuer:             {cert.issuer}")
        echo(f"Subject:            {cert.subject}")
        echo()
        echo(f"Connected Domains:  {domains}")
        echo(f"Owner:              {cert.owner}")
        echo(f"Created:            {cert.created_raw}")
        echo(f"Updated:            {cert.updated_raw}")
        op.success("Described certificate.", changed=0, context={"name": name})


@certs_app.command("attach", short_help="attach an SSL certificate to a domain")
def attach_cert(
    name: str = typer.Argument(..., metavar="<name>"),
    domain: str = typer.Argument(..., metavar="<domain>"),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Attach a certificate to a domain."""
    with command_scope("certs attach", target={"name": name, "domain": domain}) as op:
        session = runtime.load_session(config, need_app=False)
        echo(f"Attaching certificate {name} to domain {domain}... ", nl=False)
        with runtime.progress():
            session.api.attach_cert(name, domain)
        echo("done")
        op.success("Certificate attached.", changed=1, context={"name": name, "domain": domain})


@certs_app.command("detach", short_help="detach an SSL certificate from a domain")
def detach_cert(
    name: str = typer.Argument(..., metavar="<name>"),
    domain: str = typer.Argument(..., metavar="<domain>"),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Detach a certificate from a domain."""
    with command_scope("certs detach", target={"name": name, "domain": domain}) as op:
        session = runtime.load_session(config, need_app=False)
        echo(f"Detaching certificate {name} from domain {domain}... ", nl=False)
        with runtime.progress():
            session.api.detach_cert(name, domain)
        echo("done")
        op.success("Certificate detached.", changed=1, context={"name": name, "domain": domain})


__all__ = ["cert_row", "certs_app"]
