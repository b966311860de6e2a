"""Synchronous client for the timelapse HTTP API."""

from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx

from timelapse.cli.config_store import ConfigStore, Credentials, ProviderCredentials
from timelapse.cli.errors import ApiError, HTTPResponseError, RemoteError
from timelapse.infrastructure.telemetry import get_logger
from timelapse.presentation.http.schemas import (
    ProjectRequest,
    ProjectResponse,
    TimeEntryRequest,
    TimeEntryResponse,
    UserResponse,
)

logger = get_logger(__name__)

TokenRefresher = Callable[[ProviderCredentials], ProviderCredentials]


def _segment(value: str) -> str:
    return quote(value, safe="")


class ApiClient:
    """Calls the API with the stored bearer token.

    A 401 triggers one token refresh through ``token_refresher`` followed by
    a single retry; the refreshed tokens are written back to the store.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        base_url: str,
        store: ConfigStore,
        token_refresher: TokenRefresher | None = None,
    ):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.token_refresher = token_refresher
        self._credentials: Credentials | None = None

    # Users

    def get_self(self) -> UserResponse:
        return UserResponse.model_validate(self._request("GET", "/self"))

    # Projects

    def add_project(self, project: ProjectRequest) -> ProjectResponse:
        body = self._request("POST", "/projects", json=project.model_dump(mode="json"))
        return ProjectResponse.model_validate(body)

    def get_project(self, name: str) -> ProjectResponse:
        return ProjectResponse.model_validate(self._request("GET", f"/projects/{_segment(name)}"))

    def update_project(self, name: str, project: ProjectRequest) -> ProjectResponse:
        body = self._request(
            "PUT",
            f"/projects/{_segment(name)}",
            json=project.model_dump(mode="json"),
        )
        return ProjectResponse.model_validate(body)

    def list_projects(self) -> list[ProjectResponse]:
        return [ProjectResponse.model_validate(item) for item in self._request("GET", "/projects")]

    # Time entries

    def add_entry(self, project_name: str, entry: TimeEntryRequest) -> TimeEntryResponse:
        body = self._request(
            "POST",
            f"/projects/{_segment(project_name)}/entries",
            json=entry.model_dump(mode="json"),
        )
        return TimeEntryResponse.model_validate(body)

    def get_entry(self, project_name: str, entry_id: str) -> TimeEntryResponse:
        body = self._request(
            "GET", f"/projects/{_segment(project_name)}/entries/{_segment(entry_id)}"
        )
        return TimeEntryResponse.model_validate(body)

    def update_entry(
        self, project_name: str, entry_id: str, entry: TimeEntryRequest
    ) -> TimeEntryResponse:
        body = self._request(
            "PUT",
            f"/projects/{_segment(project_name)}/entries/{_segment(entry_id)}",
            json=entry.model_dump(mode="json"),
        )
        return TimeEntryResponse.model_validate(body)

    def list_entries(self, project_name: str | None = None) -> list[TimeEntryResponse]:
        """Entries of one project, or of every project when no name is given."""
        path = f"/projects/{_segment(project_name)}/entries" if project_name else "/entries"
        return [TimeEntryResponse.model_validate(item) for item in self._request("GET", path)]

    # Transport

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        response = self._send(method, path, json)
        if response.status_code == httpx.codes.UNAUTHORIZED and self._refresh():
            response = self._send(method, path, json)

        if response.is_error:
            raise self._error(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise HTTPResponseError(response.status_code, response.text) from exc

    def _send(self, method: str, path: str, json: Any) -> httpx.Response:
        headers = {"Accept": "application/json"}
        token = self._token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("API request", extra={"method": method, "path": path})
        try:
            response = self.http_client.request(
                method, f"{self.base_url}{path}", json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise ApiError(f"Request to {self.base_url} failed: {exc}") from exc
        logger.debug(
            "API response",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        return response

    def _load_credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = self.store.load_credentials()
        return self._credentials

    def _token(self) -> str:
        current = self._load_credentials().current()
        return current.id_token if current else ""

    def _refresh(self) -> bool:
        """Refresh the default provider's tokens; False when there is nothing to refresh with."""
        credentials = self._load_credentials()
        current = credentials.current()
        if self.token_refresher is None or current is None or not current.refresh_token:
            return False

        logger.debug("Refreshing tokens", extra={"provider": credentials.default_provider})
        credentials.credentials[credentials.default_provider] = self.token_refresher(current)
        self.store.save_credentials(credentials)
        return True

    @staticmethod
    def _error(response: httpx.Response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return RemoteError(response.status_code, body["message"])
        return HTTPResponseError(response.status_code, response.text)
