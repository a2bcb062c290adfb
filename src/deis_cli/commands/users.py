"""``deis users`` commands."""
from __future__ import annotations

from .. import runtime
from ..formatting import format_listing
from ..router import domain_app
from ..runtime import CONFIG_OPTION, LIMIT_OPTION, command_scope, echo

users_app = domain_app("users")


@users_app.command("list", short_help="list all registered users")
def list_users(
    limit: str | None = LIMIT_OPTION,
    config: str | None = CONFIG_OPTION,
) -> None:
    """Lists all registered users. Requires admin privileges."""
    with command_scope("users list", args={"limit": limit}) as op:
        session = runtime.load_session(config, need_app=False)
        result = session.api.list_users(runtime.resolve_limit(session, limit))
        echo(format_listing("Users", [user.username for user in result], result.count), nl=False)
        op.success("Listed users.", changed=0, context={"count": result.count})


__all__ = ["users_app"]
