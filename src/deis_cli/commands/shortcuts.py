"""``deis shortcuts`` commands."""
from __future__ import annotations

from ..router import SHORTCUTS, domain_app
from ..runtime import CONFIG_OPTION, command_scope, echo

shortcuts_app = domain_app("shortcuts")


def format_shortcuts() -> str:
    """Render every shortcut as ``<short> -> <expanded>``, sorted by shortcut."""
    return "".join(f"{short} -> {SHORTCUTS[short]}\n" for short in sorted(SHORTCUTS))


@shortcuts_app.command("list", short_help="list all available shortcuts")
def list_shortcuts(config: str | None = CONFIG_OPTION) -> None:
    """Lists all available shortcuts."""
    with command_scope("shortcuts list") as op:
        echo(format_shortcuts())
        op.success("Listed shortcuts.", changed=0, context={"count": len(SHORTCUTS)})


__all__ = ["format_shortcuts", "shortcuts_app"]
