"""``deis auth`` commands: accounts, sessions and tokens."""
from __future__ import annotations

from urllib.parse import urlsplit

import typer

from .. import runtime
from ..api import ControllerAPI, ControllerClient
from ..errors import APIError, ArgumentError, ConflictError, SettingsError
from ..router import domain_app
from ..runtime import CONFIG_OPTION, command_scope, echo
from ..settings import Settings, delete_settings, load_settings, save_settings

auth_app = domain_app("auth")

USERNAME_OPTION = typer.Option("", "--username", help="Provide a username for the account.", show_default=False)
PASSWORD_OPTION = typer.Option("", "--password", help="Provide a password for the account.", show_default=False)
SSL_VERIFY_OPTION = typer.Option(
    "true",
    "--ssl-verify",
    help="Pass --ssl-verify=false to disable SSL certificate verification for API requests.",
)


def _verify_flag(value: str) -> bool:
    return value.strip().lower() != "false"


def _prompt_secret(text: str) -> str:
    return typer.prompt(text, hide_input=True, default="", show_default=False)


def _prompt_text(text: str) -> str:
    return typer.prompt(text, default="", show_default=False)


def _connect(controller: str, ssl_verify: bool) -> ControllerClient:
    client = runtime.open_client(controller, ssl_verify=ssl_verify)
    client.check_connection()
    return client


def _login(
    cf: str | None,
    client: ControllerClient,
    username: str,
    password: str,
) -> Settings:
    token = ControllerAPI(client).login(username, password)
    settings = Settings(
        controller=client.controller,
        token=token,
        username=username,
        ssl_verify=client.ssl_verify,
    )
    path = save_settings(settings, cf)
    echo(f"Logged in as {username}")
    echo(f"Configuration file written to {path}")
    return settings


def login_interactively(
    cf: str | None,
    controller: str,
    username: str,
    password: str,
    ssl_verify: bool,
) -> Settings:
    """Prompt for missing credentials, log in and persist the new profile."""
    client = _connect(controller, ssl_verify)
    if not username:
        username = _prompt_text("username")
    if not password:
        password = _prompt_secret("password")
    return _login(cf, client, username, password)


@auth_app.command("register", short_help="register a new user with a controller")
def register(
    controller: str = typer.Argument(..., metavar="<controller>", help="Fully-qualified controller URI."),
    username: str = USERNAME_OPTION,
    password: str = PASSWORD_OPTION,
    email: str = typer.Option("", "--email", help="Provide an email address.", show_default=False),
    ssl_verify: str = SSL_VERIFY_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Registers a new user with a Deis controller, then logs in as that user."""
    args = {"controller": controller, "username": username, "password": password, "email": email}
    with command_scope("auth register", args=args) as op:
        try:
            existing = load_settings(config)
        except SettingsError:
            existing = None
        client = runtime.open_client(controller, ssl_verify=_verify_flag(ssl_verify))
        if existing is not None and urlsplit(existing.controller).netloc == client.host:
            client.token = existing.token
        client.check_connection()

        if not username:
            username = _prompt_text("username")
        if not password:
            password = _prompt_secret("password")
            confirm = _prompt_secret("password (confirm)")
            if password != confirm:
                raise ArgumentError("Password mismatch, aborting registration.")
        if not email:
            email = _prompt_text("email")

        try:
            ControllerAPI(client).register(username, password, email)
        except APIError as exc:
            raise APIError(f"Registration failed: {exc}", status_code=exc.status_code) from exc
        finally:
            client.token = ""
        echo(f"Registered {username}")
        _login(config, client, username, password)
        op.success("Registered user.", changed=1, context={"username": username})


@auth_app.command("login", short_help="login to a controller")
def login(
    controller: str = typer.Argument(..., metavar="<controller>", help="Fully-qualified controller URI."),
    username: str = USERNAME_OPTION,
    password: str = PASSWORD_OPTION,
    ssl_verify: str = SSL_VERIFY_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Logs in by authenticating against a controller."""
    args = {"controller": controller, "username": username, "password": password}
    with command_scope("auth login", args=args) as op:
        settings = login_interactively(config, controller, username, password, _verify_flag(ssl_verify))
        op.success("Logged in.", changed=1, context={"username": settings.username})


@auth_app.command("logout", short_help="logout from a controller")
def logout(config: str | None = CONFIG_OPTION) -> None:
    """Logs out from a controller and clears the user session."""
    with command_scope("auth logout") as op:
        path = delete_settings(config)
        echo("Logged out")
        op.success("Logged out.", changed=1, context={"path": path})


@auth_app.command("passwd", short_help="change the password for the current user")
def passwd(
    username: str = typer.Option(
        "", "--username", help="The username of the account (administrators only).", show_default=False
    ),
    password: str = typer.Option("", "--password", help="The current password.", show_default=False),
    new_password: str = typer.Option("", "--new-password", help="The new password.", show_default=False),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Changes the password for the current user."""
    args = {"username": username, "password": password, "new_password": new_password}
    with command_scope("auth passwd", args=args) as op:
        session = runtime.load_session(config, need_app=False)
        if not password and not username:
            password = _prompt_secret("current password")
        if not new_password:
            new_password = _prompt_secret("new password")
            confirm = _prompt_secret("new password (confirm)")
            if new_password != confirm:
                raise ArgumentError("Password mismatch, not changing.")
        try:
            session.api.passwd(username, password, new_password)
        except APIError as exc:
            raise APIError(f"Password change failed: {exc}", status_code=exc.status_code) from exc
        echo("Password change succeeded.")
        op.success("Password changed.", changed=1, context={"username": username or session.settings.username})


@auth_app.command("whoami", short_help="display the current user")
def whoami(
    all_info: bool = typer.Option(False, "--all", help="Fetch extended user information from the controller."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Displays the currently logged in user."""
    with command_scope("auth whoami", args={"all": all_info}) as op:
        session = runtime.load_session(config, need_app=False)
        if all_info:
            echo(session.api.whoami().describe(), nl=False)
        else:
            echo(f"You are {session.settings.username} at {session.client.controller}")
        op.success("Reported user.", changed=0, context={"username": session.settings.username})


@auth_app.command("cancel", short_help="remove the current user account")
def cancel(
    username: str = typer.Option(
        "", "--username", help="The account to cancel (administrators only).", show_default=False
    ),
    password: str = PASSWORD_OPTION,
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Cancels and removes the current account."""
    args = {"username": username, "password": password, "yes": yes}
    with command_scope("auth cancel", args=args) as op:
        settings = load_settings(config)
        if not username or password:
            echo("Please log in again in order to cancel this account")
            login_interactively(config, settings.controller, username, password, settings.ssl_verify)

        settings = load_settings(config)
        if not yes:
            target = username or settings.username
            answer = typer.prompt(
                f"cancel account {target} at {settings.controller}? (y/N): ",
                default="",
                show_default=False,
                prompt_suffix="",
            )
            yes = answer.strip().lower() == "y"
        if not yes:
            echo("Account not changed", err=True)
            op.warning("Account not changed.", changed=0)
            return

        client = runtime.open_client(settings.controller, settings.token, ssl_verify=settings.ssl_verify)
        try:
            ControllerAPI(client).cancel(username)
        except ConflictError as exc:
            raise ConflictError(
                f"{username} still has applications associated with it. "
                "Transfer ownership or delete them first",
                status_code=exc.status_code,
            ) from exc
        if not username or settings.username == username:
            delete_settings(config)
        echo("Account cancelled")
        op.success("Account cancelled.", changed=1, context={"username": username or settings.username})


@auth_app.command("regenerate", short_help="regenerate your API token")
def regenerate(
    username: str = typer.Option(
        "", "--username", "-u", help="Regenerate the token of this user (administrators only).", show_default=False
    ),
    all_users: bool = typer.Option(False, "--all", help="Regenerate the tokens of every user."),
    config: str | None = CONFIG_OPTION,
) -> None:
    """Regenerates auth token, defaults to regenerating token for the current user."""
    with command_scope("auth regenerate", args={"username": username, "all": all_users}) as op:
        session = runtime.load_session(config, need_app=False)
        token = session.api.regenerate(username, all_users)
        if not username and not all_users:
            save_settings(session.settings.with_values(token=token), config)
        echo("Token Regenerated")
        op.success("Token regenerated.", changed=1, context={"username": username, "all": all_users})


__all__ = ["auth_app", "login_interactively"]
