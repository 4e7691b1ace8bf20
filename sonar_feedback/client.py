"""SonarCloud API client.

Usage:
    client = SonarClient(url="https://sonarcloud.io", token="squ_xxx")
    data   = client.get("/api/qualitygates/project_status", params, label="Quality Gate")
    issues = client.get("/api/issues/search", params, label="Issues", auth="basic")

Every call is a single GET; there is no retry and no pagination loop.
"""

import base64
from typing import Any

import requests

PAGE_SIZE = 500


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ApiError(Exception):
    """Base exception for all upstream API failures.

    Carries the HTTP status code (None for network failures) and the
    best-effort parsed response body.
    """

    def __init__(self, message: str, status_code: int | None = None,
                 details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class AuthenticationError(ApiError):
    """Raised on HTTP 401 — invalid or expired token."""


class NotFoundError(ApiError):
    """Raised on HTTP 404 — project, PR or branch not found."""


class NetworkError(ApiError):
    """Raised on connection timeout or unreachable server."""


def raise_for_response(response: requests.Response, label: str) -> None:
    """Raise the matching ApiError subclass for a non-2xx *response*."""
    if response.ok:
        return

    try:
        details = response.json()
    except ValueError:
        details = response.text or None

    message = f"{label} API returned {response.status_code}"
    if response.status_code == 401:
        raise AuthenticationError(message, response.status_code, details)
    if response.status_code == 404:
        raise NotFoundError(message, response.status_code, details)
    raise ApiError(message, response.status_code, details)


def parse_json(response: requests.Response, label: str) -> Any:
    """Decode a 2xx JSON body; a body that is not JSON raises ApiError."""
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            f"{label} API returned invalid JSON", response.status_code, response.text or None
        ) from exc


def basic_token(token: str) -> str:
    """SonarCloud basic auth: token as username, empty password."""
    return base64.b64encode(f"{token}:".encode()).decode("ascii")


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class SonarClient:
    """Thin wrapper around the SonarCloud REST API."""

    def __init__(self, url: str, token: str, timeout: int = 30) -> None:
        self.base_url = url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._session = requests.Session()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        label: str = "SonarCloud",
        auth: str = "bearer",
    ) -> dict:
        """Perform a single GET request and return the parsed JSON response.

        Args:
            endpoint: API path, e.g. ``/api/measures/component``
            params:   Query parameters
            label:    Human name of the endpoint, used in error messages
                      (``"<label> API returned <status>"``)
            auth:     ``"bearer"`` or ``"basic"``

        Raises:
            AuthenticationError: HTTP 401
            NotFoundError:       HTTP 404
            ApiError:            Any other non-2xx response
            NetworkError:        Timeout or connection failure
        """
        return self._request(endpoint, params or {}, label, auth)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _headers(self, auth: str) -> dict[str, str]:
        if auth == "basic":
            return {"Authorization": f"Basic {basic_token(self._token)}"}
        if auth == "bearer":
            return {"Authorization": f"Bearer {self._token}"}
        raise ValueError(f"Unsupported auth scheme: {auth!r}")

    def _request(self, endpoint: str, params: dict[str, Any], label: str, auth: str) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.get(
                url, params=params, headers=self._headers(auth), timeout=self._timeout
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"{label} request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach SonarCloud server at '{self.base_url}'"
            ) from exc

        raise_for_response(response, label)
        return parse_json(response, label)
