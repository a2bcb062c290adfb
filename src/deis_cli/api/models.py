"""Dataclasses mirroring the controller's v2 JSON resources.

Timestamps are kept as the strings the controller sends; only certificate
dates are parsed because their expiry is rendered relative to now.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from ..formatting import format_value, parse_timestamp

LIVENESS = "livenessProbe"
READINESS = "readinessProbe"


def _str(data: Mapping[str, object], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _str_list(data: Mapping[str, object], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _mapping(data: Mapping[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        return {}
    return {str(k): v for k, v in value.items()}


def _timestamp(data: Mapping[str, object], key: str) -> datetime | None:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


@dataclass(slots=True)
class App:
    """An application registered with the controller."""

    id: str
    owner: str = ""
    url: str = ""
    uuid: str = ""
    created: str = ""
    updated: str = ""
    structure: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> App:
        return cls(
            id=_str(data, "id"),
            owner=_str(data, "owner"),
            url=_str(data, "url"),
            uuid=_str(data, "uuid"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
            structure=_mapping(data, "structure"),
        )


@dataclass(slots=True)
class Build:
    """A build imported from an image or pushed with git."""

    uuid: str
    app: str = ""
    owner: str = ""
    image: str = ""
    sha: str = ""
    procfile: dict[str, object] = field(default_factory=dict)
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Build:
        return cls(
            uuid=_str(data, "uuid"),
            app=_str(data, "app"),
            owner=_str(data, "owner"),
            image=_str(data, "image"),
            sha=_str(data, "sha"),
            procfile=_mapping(data, "procfile"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
        )


@dataclass(slots=True)
class AppConfig:
    """Merged application configuration as returned by the controller."""

    app: str = ""
    owner: str = ""
    values: dict[str, object] = field(default_factory=dict)
    memory: dict[str, object] = field(default_factory=dict)
    cpu: dict[str, object] = field(default_factory=dict)
    tags: dict[str, object] = field(default_factory=dict)
    registry: dict[str, object] = field(default_factory=dict)
    healthcheck: dict[str, object] = field(default_factory=dict)
    routable: bool = True
    uuid: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> AppConfig:
        routable = data.get("routable", True)
        return cls(
            app=_str(data, "app"),
            owner=_str(data, "owner"),
            values=_mapping(data, "values"),
            memory=_mapping(data, "memory"),
            cpu=_mapping(data, "cpu"),
            tags=_mapping(data, "tags"),
            registry=_mapping(data, "registry"),
            healthcheck=_mapping(data, "healthcheck"),
            routable=bool(routable),
            uuid=_str(data, "uuid"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
        )


@dataclass(slots=True)
class Domain:
    """A domain bound to an application."""

    domain: str
    app: str = ""
    owner: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Domain:
        return cls(
            domain=_str(data, "domain"),
            app=_str(data, "app"),
            owner=_str(data, "owner"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
        )


@dataclass(slots=True)
class Cert:
    """An SSL certificate registered with the router."""

    name: str
    common_name: str = ""
    fingerprint: str = ""
    issuer: str = ""
    subject: str = ""
    owner: str = ""
    expires: datetime | None = None
    starts: datetime | None = None
    created: datetime | None = None
    updated: datetime | None = None
    expires_raw: str = ""
    starts_raw: str = ""
    created_raw: str = ""
    updated_raw: str = ""
    san: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Cert:
        return cls(
            name=_str(data, "name"),
            common_name=_str(data, "common_name"),
            fingerprint=_str(data, "fingerprint"),
            issuer=_str(data, "issuer"),
            subject=_str(data, "subject"),
            owner=_str(data, "owner"),
            expires=_timestamp(data, "expires"),
            starts=_timestamp(data, "starts"),
            created=_timestamp(data, "created"),
            updated=_timestamp(data, "updated"),
            expires_raw=_str(data, "expires"),
            starts_raw=_str(data, "starts"),
            created_raw=_str(data, "created"),
            updated_raw=_str(data, "updated"),
            san=_str_list(data, "san"),
            domains=_str_list(data, "domains"),
        )


@dataclass(slots=True)
class Pod:
    """A running process of an application."""

    name: str
    type: str = ""
    state: str = ""
    release: str = ""
    started: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Pod:
        return cls(
            name=_str(data, "name"),
            type=_str(data, "type"),
            state=_str(data, "state"),
            release=_str(data, "release"),
            started=_str(data, "started"),
        )


@dataclass(slots=True)
class Key:
    """An SSH public key registered for ``git push``."""

    id: str
    public: str = ""
    owner: str = ""
    uuid: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Key:
        return cls(
            id=_str(data, "id"),
            public=_str(data, "public"),
            owner=_str(data, "owner"),
            uuid=_str(data, "uuid"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
        )


@dataclass(slots=True)
class User:
    """A controller account."""

    username: str
    id: int | None = None
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_superuser: bool = False
    is_staff: bool = False
    is_active: bool = False
    last_login: str = ""
    date_joined: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> User:
        raw_id = data.get("id")
        return cls(
            username=_str(data, "username"),
            id=raw_id if isinstance(raw_id, int) else None,
            email=_str(data, "email"),
            first_name=_str(data, "first_name"),
            last_name=_str(data, "last_name"),
            is_superuser=bool(data.get("is_superuser", False)),
            is_staff=bool(data.get("is_staff", False)),
            is_active=bool(data.get("is_active", False)),
            last_login=_str(data, "last_login"),
            date_joined=_str(data, "date_joined"),
        )

    def describe(self) -> str:
        """Return the multi-line account summary shown by ``whoami --all``."""
        rows = (
            ("ID", "" if self.id is None else str(self.id)),
            ("Username", self.username),
            ("Email", self.email),
            ("First Name", self.first_name),
            ("Last Name", self.last_name),
            ("Last Login", self.last_login),
            ("Is Superuser", format_value(self.is_superuser)),
            ("Is Staff", format_value(self.is_staff)),
            ("Is Active", format_value(self.is_active)),
            ("Date Joined", self.date_joined),
        )
        return "".join(f"{label}: {value}\n" for label, value in rows)


@dataclass(slots=True)
class Release:
    """A numbered, immutable combination of build and config."""

    version: int
    app: str = ""
    build: str = ""
    config: str = ""
    owner: str = ""
    summary: str = ""
    uuid: str = ""
    created: str = ""
    updated: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Release:
        raw_version = data.get("version", 0)
        return cls(
            version=int(raw_version) if isinstance(raw_version, (int, str)) else 0,
            app=_str(data, "app"),
            build=_str(data, "build"),
            config=_str(data, "config"),
            owner=_str(data, "owner"),
            summary=_str(data, "summary"),
            uuid=_str(data, "uuid"),
            created=_str(data, "created"),
            updated=_str(data, "updated"),
        )


@dataclass(slots=True)
class Healthcheck:
    """A Kubernetes style liveness or readiness probe."""

    initial_delay_seconds: int = 50
    timeout_seconds: int = 50
    period_seconds: int = 10
    success_threshold: int = 1
    failure_threshold: int = 3
    http_get: dict[str, object] | None = None
    exec: dict[str, object] | None = None
    tcp_socket: dict[str, object] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Healthcheck:
        def _int(key: str, default: int) -> int:
            value = data.get(key)
            return value if isinstance(value, int) and not isinstance(value, bool) else default

        def _probe(key: str) -> dict[str, object] | None:
            value = data.get(key)
            return dict(value) if isinstance(value, Mapping) else None

        return cls(
            initial_delay_seconds=_int("initialDelaySeconds", 50),
            timeout_seconds=_int("timeoutSeconds", 50),
            period_seconds=_int("periodSeconds", 10),
            success_threshold=_int("successThreshold", 1),
            failure_threshold=_int("failureThreshold", 3),
            http_get=_probe("httpGet"),
            exec=_probe("exec"),
            tcp_socket=_probe("tcpSocket"),
        )

    def to_dict(self) -> dict[str, object]:
        """Return the JSON body understood by the controller."""
        payload: dict[str, object] = {
            "initialDelaySeconds": self.initial_delay_seconds,
            "timeoutSeconds": self.timeout_seconds,
            "periodSeconds": self.period_seconds,
            "successThreshold": self.success_threshold,
            "failureThreshold": self.failure_threshold,
        }
        if self.http_get is not None:
            payload["httpGet"] = self.http_get
        if self.exec is not None:
            payload["exec"] = self.exec
        if self.tcp_socket is not None:
            payload["tcpSocket"] = self.tcp_socket
        return payload

    def describe(self) -> str:
        """Return the human readable probe summary."""
        lines = [
            f"Initial Delay (seconds): {self.initial_delay_seconds}",
            f"Timeout (seconds): {self.timeout_seconds}",
            f"Period (seconds): {self.period_seconds}",
            f"Success Threshold: {self.success_threshold}",
            f"Failure Threshold: {self.failure_threshold}",
            f"Exec Probe: {_describe_exec(self.exec)}",
            f"HTTP GET Probe: {_describe_http(self.http_get)}",
            f"TCP Socket Probe: {_describe_tcp(self.tcp_socket)}",
        ]
        return "\n".join(lines)


def _describe_exec(probe: Mapping[str, object] | None) -> str:
    if probe is None:
        return "N/A"
    command = probe.get("command")
    parts = [str(item) for item in command] if isinstance(command, list) else []
    return f"Command=[{' '.join(parts)}]"


def _describe_http(probe: Mapping[str, object] | None) -> str:
    if probe is None:
        return "N/A"
    headers = probe.get("httpHeaders")
    rendered = []
    if isinstance(headers, list):
        for header in headers:
            if isinstance(header, Mapping):
                rendered.append(f"{header.get('name')}={header.get('value')}")
    return (
        f"Path=\"{probe.get('path', '/')}\" Port={probe.get('port', 0)} "
        f"HTTPHeaders=[{' '.join(rendered)}]"
    )


def _describe_tcp(probe: Mapping[str, object] | None) -> str:
    if probe is None:
        return "N/A"
    return f"Port={probe.get('port', 0)}"


__all__ = [
    "LIVENESS",
    "READINESS",
    "App",
    "AppConfig",
    "Build",
    "Cert",
    "Domain",
    "Healthcheck",
    "Key",
    "Pod",
    "Release",
    "User",
]
