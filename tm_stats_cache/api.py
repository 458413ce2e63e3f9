"""Async HTTP client for the statistics API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx

logger = logging.getLogger(__name__)

FUNCTIONS_KEY_HEADER = "x-functions-key"


class ApiError(RuntimeError):
    """A request to the statistics API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def api_url(path: str, base_url: str) -> str:
    """Resolve ``path`` against ``base_url``; absolute URLs pass through.

    Example:
        >>> api_url("/api/cards/stats", "https://stats.example.com/")
        'https://stats.example.com/api/cards/stats'
    """
    if urlsplit(path).scheme:
        return path
    base = base_url if base_url.endswith("/") else base_url + "/"
    return urljoin(base, path.lstrip("/"))


class ApiClient:
    """Thin GET-only client that returns decoded JSON bodies.

    A new ``httpx.AsyncClient`` is opened per request, matching how the rest
    of the package talks HTTP; ``transport`` lets tests substitute
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        functions_key: str | None = None,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.functions_key = functions_key
        self.timeout_s = timeout_s
        self._transport = transport

    def url(self, path: str) -> str:
        return api_url(path, self.base_url)

    def headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if extra:
            headers.update(extra)
        if self.functions_key and not any(
            k.lower() == FUNCTIONS_KEY_HEADER for k in headers
        ):
            headers[FUNCTIONS_KEY_HEADER] = self.functions_key
        return headers

    async def get_json(
        self, path: str, headers: dict[str, str] | None = None
    ) -> Any:
        url = self.url(path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                resp = await client.get(url, headers=self.headers(headers))
        except httpx.HTTPError as exc:
            raise ApiError(f"GET {url} failed: {exc}") from exc

        if not resp.is_success:
            snippet = resp.text[:500].replace("\n", " ")
            raise ApiError(
                f"API HTTP {resp.status_code} for {path}: {snippet}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {path}: {exc}") from exc
