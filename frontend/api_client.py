"""
HTTP client for the University Search API, used by the Streamlit frontend.

Failures are raised as ApiError carrying the server's message and, for chat,
its error kind, so the UI can switch off the advisor when it is not
configured instead of retrying.
"""

from typing import Any
from urllib.parse import quote

import requests

DEFAULT_TIMEOUT = 30
# The server bounds the upstream call itself; leave headroom on top of it.
CHAT_TIMEOUT = 90


class ApiError(Exception):
    def __init__(self, message: str, status: int | None = None, kind: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.kind = kind

    @property
    def is_configuration_error(self) -> bool:
        return self.kind == "configuration"


class UniversityAPI:
    def __init__(self, base_url: str, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, timeout: float = DEFAULT_TIMEOUT, **kwargs) -> Any:
        try:
            resp = self.session.request(method, f"{self.base_url}{path}", timeout=timeout, **kwargs)
        except requests.exceptions.ConnectionError as exc:
            raise ApiError(f"Cannot reach the API at {self.base_url}") from exc
        except requests.exceptions.Timeout as exc:
            raise ApiError("The API did not respond in time.") from exc

        if resp.ok:
            try:
                return resp.json()
            except ValueError as exc:
                raise ApiError("The API returned an invalid response.", status=resp.status_code) from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise ApiError(
            body.get("message") or f"API error: {resp.status_code}",
            status=resp.status_code,
            kind=body.get("kind"),
        )

    def list_universities(self) -> list[dict]:
        return self._request("GET", "/api/universities")

    def search(self, query: str) -> list[dict]:
        return self._request("GET", "/api/universities/search", params={"q": query})

    def get_university(self, slug: str) -> dict | None:
        try:
            return self._request("GET", f"/api/universities/{quote(slug, safe='')}")
        except ApiError as exc:
            if exc.status == 404:
                return None
            raise

    def chat(self, message: str, history: list[dict]) -> str:
        data = self._request(
            "POST", "/api/chat",
            timeout=CHAT_TIMEOUT,
            json={"message": message, "history": history},
        )
        return data["message"]
