"""Per-domain command groups registered on the ``deis`` entry point."""
from __future__ import annotations

import typer

from .apps import apps_app
from .auth import auth_app
from .builds import builds_app
from .certs import certs_app
from .config import config_app
from .domains import domains_app
from .git import git_app
from .healthchecks import healthchecks_app
from .keys import keys_app
from .limits import limits_app
from .perms import perms_app
from .ps import ps_app
from .registry import registry_app
from .releases import releases_app
from .routing import routing_app
from .shortcuts import shortcuts_app
from .tags import tags_app
from .users import users_app

DOMAIN_APPS: dict[str, typer.Typer] = {
    "apps": apps_app,
    "auth": auth_app,
    "builds": builds_app,
    "certs": certs_app,
    "config": config_app,
    "domains": domains_app,
    "git": git_app,
    "healthchecks": healthchecks_app,
    "keys": keys_app,
    "limits": limits_app,
    "perms": perms_app,
    "ps": ps_app,
    "registry": registry_app,
    "releases": releases_app,
    "routing": routing_app,
    "shortcuts": shortcuts_app,
    "tags": tags_app,
    "users": users_app,
}

__all__ = ["DOMAIN_APPS"]
