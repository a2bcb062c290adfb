"""Controller API client used by the deis commands."""
from __future__ import annotations

from .client import API_VERSION, USER_AGENT, ControllerClient, ListResult
from .controller import ControllerAPI
from .models import (
    LIVENESS,
    READINESS,
    App,
    AppConfig,
    Build,
    Cert,
    Domain,
    Healthcheck,
    Key,
    Pod,
    Release,
    User,
)

__all__ = [
    "API_VERSION",
    "LIVENESS",
    "READINESS",
    "USER_AGENT",
    "App",
    "AppConfig",
    "Build",
    "Cert",
    "ControllerAPI",
    "ControllerClient",
    "Domain",
    "Healthcheck",
    "Key",
    "ListResult",
    "Pod",
    "Release",
    "User",
]
