"""HTTP transport for the Deis controller API.

:class:`ControllerClient` wraps a :class:`requests.Session` and applies the
conventions shared by every endpoint: JSON bodies, token authentication, the
client ``User-Agent``, ``limit`` paging and the mapping of HTTP failures onto
the :mod:`deis_cli.errors` hierarchy.

After every response the ``DEIS_API_VERSION`` header is compared with
:data:`API_VERSION`. A differing major version triggers the
``on_api_mismatch`` callback once per client, before any error for that
response is raised.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import requests

from .. import __version__
from ..errors import (
    APIError,
    ConflictError,
    NotFoundError,
    PodNotFoundError,
    UnauthorizedError,
)
from ..settings import DEFAULT_LIMIT, normalize_controller

API_VERSION = "2.3"
API_VERSION_HEADER = "DEIS_API_VERSION"
USER_AGENT = f"Deis Client v{__version__}"
DEFAULT_TIMEOUT = 30.0

LOGGER = logging.getLogger("deis_cli.api")

MismatchCallback = Callable[[str, str], None]


@dataclass(slots=True)
class ListResult:
    """One page of a paginated listing plus the server-side total."""

    items: list[Any] = field(default_factory=list)
    count: int = 0

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def major_version(version: str) -> str:
    """Return the major component of a dotted version string."""
    return version.strip().split(".", 1)[0]


class ControllerClient:
    """Thin JSON client bound to a single controller."""

    def __init__(
        self,
        controller: str,
        token: str = "",
        *,
        ssl_verify: bool = True,
        session: requests.Session | None = None,
        limit: int = DEFAULT_LIMIT,
        on_api_mismatch: MismatchCallback | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.controller = normalize_controller(controller).rstrip("/")
        if not urlsplit(self.controller).netloc:
            raise APIError(f"Invalid controller URL: {controller!r}")
        self.token = token
        self.ssl_verify = ssl_verify
        self.limit = limit if limit > 0 else DEFAULT_LIMIT
        self.timeout = timeout
        self.on_api_mismatch = on_api_mismatch
        self.server_api_version: str | None = None
        self._mismatch_reported = False
        self._session = session or requests.Session()

    @property
    def host(self) -> str:
        """Return the controller host (with port when one is set)."""
        return urlsplit(self.controller).netloc

    def url_for(self, path: str) -> str:
        """Return the absolute URL for an API *path*."""
        return f"{self.controller}/{path.lstrip('/')}"

    def _headers(self, *, with_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
        params: Mapping[str, object] | None = None,
    ) -> requests.Response:
        """Send a request and return the response, raising on HTTP errors."""
        url = self.url_for(path)
        data = json.dumps(body) if body is not None else None
        LOGGER.debug("%s %s params=%s", method, url, dict(params or {}))
        try:
            response = self._session.request(
                method,
                url,
                data=data,
                params=dict(params) if params else None,
                headers=self._headers(with_body=data is not None),
                verify=self.ssl_verify,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise APIError(f"Failed to reach controller at {self.controller}: {exc}") from exc
        LOGGER.debug("%s %s -> %s", method, url, response.status_code)
        self._check_api_version(response)
        _raise_for_status(response)
        return response

    def _check_api_version(self, response: requests.Response) -> None:
        server_version = response.headers.get(API_VERSION_HEADER)
        if not server_version:
            return
        self.server_api_version = server_version
        if major_version(server_version) == major_version(API_VERSION):
            return
        if self._mismatch_reported or self.on_api_mismatch is None:
            return
        self._mismatch_reported = True
        self.on_api_mismatch(API_VERSION, server_version)

    def get_json(self, path: str, *, params: Mapping[str, object] | None = None) -> Any:
        """GET *path* and decode the JSON body."""
        return _decode(self.request("GET", path, params=params))

    def post_json(self, path: str, body: Mapping[str, object] | None = None) -> Any:
        """POST *body* to *path* and decode the JSON reply (``None`` when empty)."""
        return _decode(self.request("POST", path, body=body if body is not None else {}))

    def delete(self, path: str) -> None:
        """DELETE *path*."""
        self.request("DELETE", path)

    def list(self, path: str, limit: int | None = None) -> ListResult:
        """GET a paginated collection, returning the raw result dictionaries."""
        resolved = self.limit if limit is None or limit <= 0 else limit
        payload = self.get_json(path, params={"limit": resolved})
        if not isinstance(payload, Mapping):
            raise APIError(f"Unexpected response from {path}: expected a paginated object.")
        results = payload.get("results")
        items = list(results) if isinstance(results, list) else []
        count = payload.get("count")
        return ListResult(items=items, count=count if isinstance(count, int) else len(items))

    def check_connection(self) -> None:
        """Verify the controller answers on ``/v2/``; a 401 still counts as reachable."""
        try:
            self.request("GET", "/v2/")
        except UnauthorizedError:
            return


def _decode(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise APIError(
            f"Controller returned invalid JSON for {response.url}",
            status_code=response.status_code,
        ) from exc


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(payload, Mapping):
        lines = []
        for key, value in payload.items():
            if isinstance(value, list):
                value = " ".join(str(item) for item in value)
            lines.append(f"{key}: {value}")
        return "\n".join(lines)
    if isinstance(payload, list):
        return "\n".join(str(item) for item in payload)
    return str(payload)


def _raise_for_status(response: requests.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    detail = _error_detail(response)
    reason = response.reason or ""
    message = f"{status} {reason}".strip()
    if detail:
        message = f"{message}\n{detail}"
    if status in (401, 403):
        raise UnauthorizedError(message, status_code=status)
    if status == 404:
        lowered = detail.lower()
        if "pod" in lowered or "container" in lowered:
            raise PodNotFoundError(message, status_code=status)
        raise NotFoundError(message, status_code=status)
    if status == 409:
        raise ConflictError(message, status_code=status)
    raise APIError(message, status_code=status)


__all__ = [
    "API_VERSION",
    "API_VERSION_HEADER",
    "USER_AGENT",
    "ControllerClient",
    "ListResult",
    "major_version",
]
