"""HTTP access to the Maven Central search API.

- One shared ``httpx.AsyncClient`` with a concurrency bound
- Bounded retries with exponential backoff for timeouts, network errors,
  429 and 5xx; other statuses raise immediately
- HTTPS-only URLs
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .config import Settings

_logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

_RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


def _quote(value: str) -> str:
    # Solr quoted literal
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_params_for_versions(group_id: str, artifact_id: str, rows: int) -> dict[str, str]:
    """Query parameters listing all versions of ``group_id:artifact_id``."""
    g = group_id.strip()
    a = artifact_id.strip()
    if not g or not a:
        raise ValueError("group_id and artifact_id must be non-empty")
    if rows <= 0:
        raise ValueError("rows must be a positive integer")
    return {
        "core": "gav",
        "q": f"g:{_quote(g)} AND a:{_quote(a)}",
        "rows": str(rows),
        "wt": "json",
    }


def extract_versions(payload: Any) -> list[str]:
    """Version strings from a search response, in response order."""
    docs = payload.get("response", {}).get("docs", []) if isinstance(payload, dict) else []
    versions: list[str] = []
    for doc in docs:
        v = doc.get("v") if isinstance(doc, dict) else None
        if isinstance(v, str) and v.strip():
            versions.append(v.strip())
    return versions


class MavenCentralHttpClient:
    """Resilient async JSON client; defaults come from :class:`Settings`."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        max_retries: Optional[int] = None,
        concurrency: Optional[int] = None,
        client: httpx.AsyncClient | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        s = settings or Settings()
        self.base_url = s.MAVEN_CENTRAL_BASE_URL
        self._max_retries = s.HTTP_MAX_RETRIES if max_retries is None else max_retries
        self._sem = asyncio.Semaphore(concurrency or s.HTTP_CONCURRENCY)
        self._client = client or httpx.AsyncClient(timeout=s.HTTP_TIMEOUT_SECONDS)
        self._sleep: SleepFn = sleep_fn or asyncio.sleep

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _is_retryable_status(status: int) -> bool:
        return status == 429 or 500 <= status <= 599

    async def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        if not url.lower().startswith("https://"):
            raise ValueError("URL must be HTTPS")

        attempt = 0
        while True:
            try:
                async with self._sem:
                    resp = await self._client.get(url, params=params)
                if not self._is_retryable_status(resp.status_code):
                    resp.raise_for_status()
                    return resp.json()
                if attempt >= self._max_retries:
                    resp.raise_for_status()
            except _RETRYABLE_EXCEPTIONS:
                if attempt >= self._max_retries:
                    raise
            attempt += 1
            _logger.debug("retrying request", extra={"op": "get_json", "attempt": attempt})
            await self._sleep(0.05 * (2 ** (attempt - 1)))


_singleton: MavenCentralHttpClient | None = None


def get_client() -> MavenCentralHttpClient:
    global _singleton
    if _singleton is None:
        _singleton = MavenCentralHttpClient()
    return _singleton


async def close_client() -> None:
    global _singleton
    if _singleton is not None:
        await _singleton.aclose()
        _singleton = None


__all__ = [
    "MavenCentralHttpClient",
    "build_params_for_versions",
    "close_client",
    "extract_versions",
    "get_client",
]
