"""``deis routing`` commands: expose or hide an app behind the router."""
from __future__ import annotations

from .. import runtime
from ..router import domain_app
from ..runtime import APP_OPTION, CONFIG_OPTION, command_scope, echo

routing_app = domain_app("routing")


def _set_routable(name: str, app: str | None, config: str | None, routable: bool) -> None:
    verb = "Enabling" if routable else "Disabling"
    with command_scope(name, args={"app": app}) as op:
        session = runtime.load_session(config, app)
        echo(f"{verb} routing for {session.app}... ", nl=False)
        with runtime.progress():
            session.api.set_config(session.app, {"routable": routable})
        echo("done\n")
        op.success(f"{verb} routing.", changed=1, context={"app": session.app, "routable": routable})


@routing_app.command("info", short_help="view routability of an application")
def routing_info(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Prints info about the current application's routability."""
    with command_scope("routing info", args={"app": app}) as op:
        session = runtime.load_session(config, app)
        routable = session.api.get_config(session.app).routable
        echo("Routing is enabled." if routable else "Routing is disabled.")
        op.success("Reported routability.", changed=0, context={"app": session.app, "routable": routable})


@routing_app.command("enable", short_help="enable routing for an app")
def enable_routing(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Enables routability for an app."""
    _set_routable("routing enable", app, config, True)


@routing_app.command("disable", short_help="disable routing for an app")
def disable_routing(
    app: str | None = APP_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Disables routability for an app."""
    _set_routable("routing disable", app, config, False)


__all__ = ["routing_app"]
