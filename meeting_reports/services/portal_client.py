# meeting_reports/services/portal_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from meeting_reports.core.config import get_settings

logger = logging.getLogger(__name__)


class PortalClientError(RuntimeError):
    """
    Raised when a portal API call fails at the transport level or returns a
    non-2xx response.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PortalClient:
    """
    Minimal async client for the meeting portal REST API.

    Responsibilities
    ----------------
    - Attach the bearer token to every request.
    - Join relative paths onto the configured base URL.
    - Translate transport errors and non-2xx responses into PortalClientError,
      carrying the backend's `message` when it sends one.

    Notes
    -----
    - A fresh httpx.AsyncClient is opened per request; the portal is called a
      bounded number of times per report.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")

        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_url(self, path: str) -> str:
        # Absolute URLs pass through untouched.
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Low-level helper for issuing an authenticated HTTP request.

        Parameters
        ----------
        method:
            HTTP method (GET, POST, etc.).
        path:
            Either an absolute URL or a path relative to the configured base_url.
        params:
            Optional query string parameters.
        """
        url = self._build_url(path)
        logger.debug("Portal %s %s params=%s", method.upper(), url, params)

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                resp = await client.request(
                    method=method.upper(),
                    url=url,
                    headers=self._headers(),
                    params=params,
                )
        except httpx.HTTPError as exc:
            raise PortalClientError(f"Portal request to {url} failed: {exc}") from exc

        return resp

    async def get_json(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a GET request and return the decoded JSON payload.

        Raises PortalClientError on non-2xx responses or undecodable bodies.
        """
        resp = await self._request("GET", path, params=params)
        if resp.status_code // 100 != 2:
            raise PortalClientError(
                f"Portal GET {path} failed (status={resp.status_code}): "
                f"{_error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise PortalClientError(f"Portal GET {path} returned invalid JSON") from exc


def _error_message(resp: Any) -> str:
    # The portal wraps errors as {"message": "..."}; fall back to raw text.
    try:
        payload = resp.json()
    except ValueError:
        return resp.text
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return resp.text


_portal_client_instance: Optional[PortalClient] = None


def get_portal_client() -> PortalClient:
    """
    Lazily construct a PortalClient instance using application settings.
    """
    global _portal_client_instance
    if _portal_client_instance is None:
        settings = get_settings()
        _portal_client_instance = PortalClient(
            base_url=str(settings.PORTAL_API_BASE_URL),
            token=settings.PORTAL_API_TOKEN,
            timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
        )
    return _portal_client_instance
