"""Typed endpoint wrappers for the v2 controller API."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from ..errors import APIError
from .client import ControllerClient, ListResult
from .models import App, AppConfig, Build, Cert, Domain, Key, Pod, Release, User


def _segment(value: str) -> str:
    return quote(value, safe="")


def _wrap(result: ListResult, factory: Any) -> ListResult:
    return ListResult(items=[factory(item) for item in result.items], count=result.count)


def _expect_mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise APIError(f"Unexpected response while fetching {what}.")
    return payload


class ControllerAPI:
    """Endpoint groups exposed by the controller, one method per operation."""

    def __init__(self, client: ControllerClient) -> None:
        self.client = client

    # Apps ---------------------------------------------------------------
    def create_app(self, app_id: str = "") -> App:
        body = {"id": app_id} if app_id else {}
        return App.from_dict(_expect_mapping(self.client.post_json("/v2/apps/", body), "app"))

    def list_apps(self, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list("/v2/apps/", limit), App.from_dict)

    def get_app(self, app_id: str) -> App:
        payload = self.client.get_json(f"/v2/apps/{_segment(app_id)}/")
        return App.from_dict(_expect_mapping(payload, "app"))

    def delete_app(self, app_id: str) -> None:
        self.client.delete(f"/v2/apps/{_segment(app_id)}/")

    def transfer_app(self, app_id: str, username: str) -> None:
        self.client.post_json(f"/v2/apps/{_segment(app_id)}/", {"owner": username})

    def app_logs(self, app_id: str, lines: int = -1) -> str:
        params = {"log_lines": lines} if lines > 0 else None
        response = self.client.request("GET", f"/v2/apps/{_segment(app_id)}/logs", params=params)
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        text = payload if isinstance(payload, str) else response.text
        return text.strip('"').replace("\\n", "\n")

    def run(self, app_id: str, command: str) -> tuple[int, str]:
        payload = self.client.post_json(
            f"/v2/apps/{_segment(app_id)}/run", {"command": command}
        )
        data = _expect_mapping(payload, "run output")
        exit_code = data.get("exit_code", 0)
        return (exit_code if isinstance(exit_code, int) else 0, str(data.get("output", "")))

    # Builds -------------------------------------------------------------
    def list_builds(self, app_id: str, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list(f"/v2/apps/{_segment(app_id)}/builds/", limit), Build.from_dict)

    def create_build(
        self, app_id: str, image: str, procfile: Mapping[str, str] | None = None
    ) -> Build:
        body: dict[str, object] = {"image": image}
        if procfile:
            body["procfile"] = dict(procfile)
        payload = self.client.post_json(f"/v2/apps/{_segment(app_id)}/builds/", body)
        return Build.from_dict(_expect_mapping(payload, "build"))

    # Config -------------------------------------------------------------
    def get_config(self, app_id: str) -> AppConfig:
        payload = self.client.get_json(f"/v2/apps/{_segment(app_id)}/config/")
        return AppConfig.from_dict(_expect_mapping(payload, "config"))

    def set_config(self, app_id: str, changes: Mapping[str, object]) -> AppConfig:
        """Merge *changes* (``values``, ``tags``, ``memory`` ...) into the app config."""
        payload = self.client.post_json(f"/v2/apps/{_segment(app_id)}/config/", dict(changes))
        return AppConfig.from_dict(_expect_mapping(payload, "config"))

    # Domains ------------------------------------------------------------
    def list_domains(self, app_id: str, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list(f"/v2/apps/{_segment(app_id)}/domains/", limit), Domain.from_dict)

    def add_domain(self, app_id: str, domain: str) -> Domain:
        payload = self.client.post_json(f"/v2/apps/{_segment(app_id)}/domains/", {"domain": domain})
        return Domain.from_dict(_expect_mapping(payload, "domain"))

    def remove_domain(self, app_id: str, domain: str) -> None:
        self.client.delete(f"/v2/apps/{_segment(app_id)}/domains/{_segment(domain)}")

    # Certs --------------------------------------------------------------
    def list_certs(self, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list("/v2/certs/", limit), Cert.from_dict)

    def add_cert(self, name: str, certificate: str, key: str) -> Cert:
        payload = self.client.post_json(
            "/v2/certs/", {"certificate": certificate, "key": key, "name": name}
        )
        return Cert.from_dict(_expect_mapping(payload, "certificate"))

    def get_cert(self, name: str) -> Cert:
        payload = self.client.get_json(f"/v2/certs/{_segment(name)}")
        return Cert.from_dict(_expect_mapping(payload, "certificate"))

    def remove_cert(self, name: str) -> None:
        self.client.delete(f"/v2/certs/{_segment(name)}")

    def attach_cert(self, name: str, domain: str) -> None:
        self.client.post_json(f"/v2/certs/{_segment(name)}/domain/", {"domain": domain})

    def detach_cert(self, name: str, domain: str) -> None:
        self.client.delete(f"/v2/certs/{_segment(name)}/domain/{_segment(domain)}")

    # Pods ---------------------------------------------------------------
    def list_pods(self, app_id: str, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list(f"/v2/apps/{_segment(app_id)}/pods/", limit), Pod.from_dict)

    def scale(self, app_id: str, targets: Mapping[str, int]) -> None:
        self.client.post_json(f"/v2/apps/{_segment(app_id)}/scale/", dict(targets))

    def restart(self, app_id: str, proc_type: str = "", name: str = "") -> list[Pod]:
        path = f"/v2/apps/{_segment(app_id)}/pods/"
        if proc_type:
            path += f"{_segment(proc_type)}/"
            if name:
                path += f"{_segment(name)}/"
        payload = self.client.post_json(path + "restart/")
        if not isinstance(payload, list):
            return []
        return [Pod.from_dict(item) for item in payload if isinstance(item, Mapping)]

    # Keys ---------------------------------------------------------------
    def list_keys(self, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list("/v2/keys/", limit), Key.from_dict)

    def add_key(self, key_id: str, public: str) -> Key:
        payload = self.client.post_json("/v2/keys/", {"id": key_id, "public": public})
        return Key.from_dict(_expect_mapping(payload, "key"))

    def remove_key(self, key_id: str) -> None:
        self.client.delete(f"/v2/keys/{_segment(key_id)}")

    # Perms --------------------------------------------------------------
    def list_app_perms(self, app_id: str) -> list[str]:
        payload = _expect_mapping(
            self.client.get_json(f"/v2/apps/{_segment(app_id)}/perms/"), "permissions"
        )
        users = payload.get("users")
        return [str(user) for user in users] if isinstance(users, list) else []

    def create_app_perm(self, app_id: str, username: str) -> None:
        self.client.post_json(f"/v2/apps/{_segment(app_id)}/perms/", {"username": username})

    def delete_app_perm(self, app_id: str, username: str) -> None:
        self.client.delete(f"/v2/apps/{_segment(app_id)}/perms/{_segment(username)}")

    def list_admins(self, limit: int | None = None) -> ListResult:
        result = self.client.list("/v2/admin/perms/", limit)
        names = [
            str(item.get("username", "")) if isinstance(item, Mapping) else str(item)
            for item in result.items
        ]
        return ListResult(items=names, count=result.count)

    def create_admin(self, username: str) -> None:
        self.client.post_json("/v2/admin/perms/", {"username": username})

    def delete_admin(self, username: str) -> None:
        self.client.delete(f"/v2/admin/perms/{_segment(username)}")

    # Releases -----------------------------------------------------------
    def list_releases(self, app_id: str, limit: int | None = None) -> ListResult:
        return _wrap(
            self.client.list(f"/v2/apps/{_segment(app_id)}/releases/", limit), Release.from_dict
        )

    def get_release(self, app_id: str, version: int) -> Release:
        payload = self.client.get_json(f"/v2/apps/{_segment(app_id)}/releases/v{version}/")
        return Release.from_dict(_expect_mapping(payload, "release"))

    def rollback(self, app_id: str, version: int = -1) -> int:
        body = {"version": version} if version > 0 else {}
        payload = _expect_mapping(
            self.client.post_json(f"/v2/apps/{_segment(app_id)}/releases/rollback/", body),
            "rollback",
        )
        new_version = payload.get("version", -1)
        return new_version if isinstance(new_version, int) else -1

    # Users --------------------------------------------------------------
    def list_users(self, limit: int | None = None) -> ListResult:
        return _wrap(self.client.list("/v2/users/", limit), User.from_dict)

    # Auth ---------------------------------------------------------------
    def register(self, username: str, password: str, email: str) -> None:
        self.client.post_json(
            "/v2/auth/register/",
            {"username": username, "password": password, "email": email},
        )

    def login(self, username: str, password: str) -> str:
        payload = _expect_mapping(
            self.client.post_json(
                "/v2/auth/login/", {"username": username, "password": password}
            ),
            "token",
        )
        return str(payload.get("token", ""))

    def passwd(self, username: str, password: str, new_password: str) -> None:
        body = {"password": password, "new_password": new_password}
        if username:
            body["username"] = username
        self.client.post_json("/v2/auth/passwd/", body)

    def cancel(self, username: str = "") -> None:
        if username:
            self.client.request("DELETE", "/v2/auth/cancel/", body={"username": username})
        else:
            self.client.delete("/v2/auth/cancel/")

    def whoami(self) -> User:
        return User.from_dict(_expect_mapping(self.client.get_json("/v2/auth/whoami/"), "user"))

    def regenerate(self, username: str = "", all_users: bool = False) -> str:
        body: dict[str, object] = {}
        if all_users:
            body["all"] = True
        elif username:
            body["username"] = username
        payload = self.client.post_json("/v2/auth/tokens/", body)
        if isinstance(payload, Mapping):
            return str(payload.get("token", ""))
        return ""

    # Health -------------------------------------------------------------
    def check_connection(self) -> None:
        self.client.check_connection()


__all__ = ["ControllerAPI"]
