"""HTTP client for the device-facing display endpoints."""

import logging

import requests

logger = logging.getLogger(__name__)


class DisplayApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class DisplayApiClient:
    """Thin wrapper over a requests-style session.

    Any object with requests' `get`/`post` signature works as `session`,
    which is how the tests drive the in-process app.
    """

    API_PREFIX = "/api/v1"

    def __init__(self, server_url: str, timeout: float = 5.0, session=None):
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.server_url}{self.API_PREFIX}{path}"
        response = getattr(self.session, method)(url, timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise DisplayApiError(response.status_code, str(detail))
        return response.json()

    def register(
        self,
        display_name: str,
        location: str,
        display_id: str | None = None,
        password: str | None = None,
        resolution: dict | None = None,
        device_info: dict | None = None,
    ) -> dict:
        payload = {"display_name": display_name, "location": location}
        if display_id:
            payload["display_id"] = display_id
        if password:
            payload["password"] = password
        if resolution:
            payload["resolution"] = resolution
        if device_info:
            payload["device_info"] = device_info
        return self._request("post", "/displays/register-self", json=payload)

    def login(self, display_id: str, password: str) -> dict:
        return self._request(
            "post", "/displays/login", json={"display_id": display_id, "password": password}
        )

    def poll_status(self, connection_token: str) -> dict:
        return self._request("get", f"/displays/by-token/{connection_token}")

    def fetch_playlist(self, connection_token: str) -> dict:
        return self._request("get", f"/displays/loop/{connection_token}")

    def check_refresh(self, connection_token: str) -> bool:
        return bool(self._request("get", f"/displays/check-refresh/{connection_token}").get("should_refresh"))

    def report_status(self, connection_token: str, status: str = "online", current_ad: str | None = None) -> None:
        self._request(
            "post",
            "/displays/report-status",
            json={
                "connection_token": connection_token,
                "status": status,
                "current_ad_playing": current_ad,
            },
        )
