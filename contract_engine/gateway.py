"""
Backend Client

Thin HTTP client for the hosted backend (REST tables under /rest/v1, auth
under /auth/v1). Row-level access policy is enforced server-side by the key
or user token sent with each request. Errors are never retried: any non-2xx
response raises ExternalFailure with the backend's own message.
"""

import json
import logging

import requests

from .exceptions import ExternalFailure
from .output import jsonable

logger = logging.getLogger(__name__)

# Logical collection -> backend table
COLLECTIONS = {
    "contracts": "contratos",
    "amendments": "aditivos",
    "monthly_processes": "processos_execucao_mensal",
    "financial_entries": "execucoes_financeiras",
    "profiles": "profiles",
    "management_units": "gerencias",
    "sectors": "setores",
}


def _table(collection: str) -> str:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection!r}")


def _error_message(response) -> str:
    """Pick the human-readable message out of a backend error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text or f"HTTP {response.status_code}"


class BackendClient:
    """Request/response access to tables and auth of the hosted backend."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def select(self, collection: str, filters: dict | None = None, order: str | None = None) -> list:
        params = {"select": "*"}
        params.update(self._filters(filters))
        if order:
            params["order"] = order
        return self._request("GET", f"/rest/v1/{_table(collection)}", params=params)

    def insert(self, collection: str, row: dict) -> list:
        return self._request(
            "POST",
            f"/rest/v1/{_table(collection)}",
            body=row,
            headers={"Prefer": "return=representation"},
        )

    def update(self, collection: str, values: dict, filters: dict) -> list:
        if not filters:
            raise ValueError("update requires at least one filter")
        return self._request(
            "PATCH",
            f"/rest/v1/{_table(collection)}",
            params=self._filters(filters),
            body=values,
            headers={"Prefer": "return=representation"},
        )

    def delete(self, collection: str, filters: dict) -> None:
        if not filters:
            raise ValueError("delete requires at least one filter")
        self._request("DELETE", f"/rest/v1/{_table(collection)}", params=self._filters(filters))

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> dict:
        return self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            body={"email": email, "password": password},
        )

    def sign_up(self, email: str, password: str) -> dict:
        return self._request("POST", "/auth/v1/signup", body={"email": email, "password": password})

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/auth/v1/logout", headers={"Authorization": f"Bearer {access_token}"})

    def get_user(self, access_token: str) -> dict:
        return self._request("GET", "/auth/v1/user", headers={"Authorization": f"Bearer {access_token}"})

    def create_auth_user(self, email: str, password: str, metadata: dict) -> dict:
        """Create a confirmed identity. Requires the service-role key."""
        return self._request(
            "POST",
            "/auth/v1/admin/users",
            body={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata,
            },
        )

    def delete_auth_user(self, user_id: str) -> None:
        self._request("DELETE", f"/auth/v1/admin/users/{user_id}")

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    @staticmethod
    def _filters(filters: dict | None) -> dict:
        params = {}
        for column, value in (filters or {}).items():
            if isinstance(value, bool):
                value = str(value).lower()
            params[column] = f"eq.{jsonable(value)}"
        return params

    def _request(self, method: str, path: str, params=None, body=None, headers=None):
        data = json.dumps(jsonable(body)) if body is not None else None
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                data=data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Backend request failed: {method} {path}: {str(e)}")
            raise ExternalFailure(str(e))

        if not response.ok:
            message = _error_message(response)
            logger.error(f"Backend error {response.status_code} on {method} {path}: {message}")
            raise ExternalFailure(message, response.status_code)

        if not response.content:
            return None
        return response.json()
