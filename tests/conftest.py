"""Pytest fixtures shared by the deis test suite."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

import pytest

from deis_cli.api.client import API_VERSION, API_VERSION_HEADER

CONTROLLER = "http://deis.example.com"


@dataclass
class FakeResponse:
    """Just enough of :class:`requests.Response` for the controller client."""

    status_code: int = 200
    payload: object = None
    headers: dict[str, str] = field(default_factory=lambda: {API_VERSION_HEADER: API_VERSION})
    reason: str = "OK"
    url: str = ""

    @property
    def content(self) -> bytes:
        if self.payload is None:
            return b""
        return json.dumps(self.payload).encode("utf-8")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def json(self) -> object:
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return json.loads(self.text)


@dataclass
class Call:
    """A request recorded by :class:`FakeController`."""

    method: str
    path: str
    body: object
    params: dict[str, object] | None
    headers: dict[str, str]


class FakeController:
    """Stand-in for ``requests.Session`` serving canned controller replies."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], FakeResponse] = {}
        self.calls: list[Call] = []

    def add(
        self,
        method: str,
        path: str,
        payload: object = None,
        *,
        status: int = 200,
        reason: str = "OK",
        headers: dict[str, str] | None = None,
    ) -> None:
        response = FakeResponse(status_code=status, payload=payload, reason=reason)
        if headers is not None:
            response.headers = headers
        self.routes[(method, path)] = response

    def request(
        self,
        method: str,
        url: str,
        *,
        data: str | None = None,
        params: dict[str, object] | None = None,
        headers: dict[str, str] | None = None,
        verify: bool = True,
        timeout: float | None = None,
    ) -> FakeResponse:
        path = urlsplit(url).path
        body = json.loads(data) if data else None
        self.calls.append(Call(method, path, body, params, dict(headers or {})))
        response = self.routes.get((method, path))
        if response is None:
            return FakeResponse(404, {"detail": "Not found."}, reason="Not Found", url=url)
        response.url = url
        return response

    def bodies(self, method: str, path: str) -> list[object]:
        """Return the bodies sent to *path* with *method*."""
        return [call.body for call in self.calls if call.method == method and call.path == path]


@pytest.fixture(autouse=True)
def deis_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``$HOME`` and the operations log at temporary directories."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("DEIS_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("DEIS_PROFILE", raising=False)
    monkeypatch.delenv("DEIS_DRINK_OF_CHOICE", raising=False)
    return home


@pytest.fixture
def profile(deis_home: Path) -> Path:
    """Write a logged-in default profile and return its path."""
    path = deis_home / ".deis" / "client.json"
    path.parent.mkdir(parents=True)
    path.write_text(
        json.dumps(
            {
                "username": "jkirk",
                "ssl_verify": True,
                "controller": CONTROLLER,
                "token": "a1b2c3",
                "response_limit": 100,
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def controller(profile: Path, monkeypatch: pytest.MonkeyPatch) -> FakeController:
    """Serve controller calls from a :class:`FakeController`."""
    fake = FakeController()
    monkeypatch.setattr("deis_cli.runtime.create_http_session", lambda: fake)
    return fake


@pytest.fixture
def http() -> FakeController:
    """A bare fake HTTP session for driving the API client directly."""
    return FakeController()
