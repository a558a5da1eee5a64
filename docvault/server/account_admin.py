from abc import ABC, abstractmethod
from typing import Any

import httpx

from docvault.server.exceptions import AccountAdminError, AccountNotFoundError


class BaseAccountAdmin(ABC):
    """Contract for the external auth service's account operations."""

    @abstractmethod
    def resolve_user(self, access_token: str) -> str | None:
        """Return the user ID owning an access token, or None if it is not valid."""

    @abstractmethod
    def get_user_email(self, user_id: str) -> str:
        """Return the account's lower-cased email.

        Raises:
            AccountNotFoundError: if the account or its email does not exist.
        """

    @abstractmethod
    def ban_user(self, user_id: str, duration: str) -> None:
        """Ban the account for a duration such as '876000h'.

        Raises:
            AccountAdminError: if the ban cannot be applied.
        """


class GoTrueAccountAdmin(BaseAccountAdmin):
    """Account operations against a GoTrue-compatible auth REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._timeout = timeout_seconds
        self._transport = transport

    def resolve_user(self, access_token: str) -> str | None:
        response = self._request("GET", "/auth/v1/user", token=access_token)
        if response.status_code in (401, 403):
            return None
        data = self._json(response, "resolve user")
        user_id = data.get("id")
        return str(user_id) if user_id else None

    def get_user_email(self, user_id: str) -> str:
        response = self._request("GET", f"/auth/v1/admin/users/{user_id}")
        if response.status_code == 404:
            raise AccountNotFoundError(f"User {user_id} not found")
        data = self._json(response, f"look up user {user_id}")
        email = data.get("email")
        if not email or not isinstance(email, str):
            raise AccountNotFoundError(f"User {user_id} has no email")
        return email.lower()

    def ban_user(self, user_id: str, duration: str) -> None:
        response = self._request(
            "PUT",
            f"/auth/v1/admin/users/{user_id}",
            json={"ban_duration": duration},
        )
        if response.status_code == 404:
            raise AccountNotFoundError(f"User {user_id} not found")
        self._json(response, f"ban user {user_id}")

    def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, object] | None = None,
    ) -> httpx.Response:
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {token if token is not None else self._service_key}",
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.request(method, f"{self._base_url}{path}", headers=headers, json=json)
        except httpx.HTTPError as exc:
            raise AccountAdminError(f"Auth service request {method} {path} failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response, action: str) -> dict[str, Any]:
        if response.is_error:
            raise AccountAdminError(f"Failed to {action}: status {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise AccountAdminError(f"Failed to {action}: response is not JSON") from exc
        if not isinstance(data, dict):
            raise AccountAdminError(f"Failed to {action}: response must be an object")
        return data
