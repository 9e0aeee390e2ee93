"""Treestatus API client wrapper (tree log retrieval with a TTL cache)."""

from __future__ import annotations

import time
from typing import Any

import requests

from .config import FETCH_TIMEOUT_SECONDS, TREESTATUS_DEFAULT_SERVER


class TreestatusAPI:
    def __init__(
        self,
        server: str = TREESTATUS_DEFAULT_SERVER,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        cache_ttl: float = 300.0,
    ):
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        # Simple in-memory cache: {tree: (timestamp, data)}
        self._cache: dict[str, tuple[float, list]] = {}
        self._cache_ttl = cache_ttl  # seconds

    def clear_cache(self) -> None:
        """Reset the in-memory log cache."""
        cache = getattr(self, "_cache", None)
        if isinstance(cache, dict):
            cache.clear()

    def fetch_logs(self, tree: str) -> list[dict[str, Any]]:
        """Return every status change of ``tree``, newest first.

        Raises
        ------
        RuntimeError
            When the request fails or the payload is not a log listing.
        """
        now = time.time()
        cached = self._cache.get(tree)
        if cached and (now - cached[0]) < self._cache_ttl:
            return cached[1]
        url = f"{self.server}/trees/{tree}/logs_all"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RuntimeError(f"Failed to fetch logs for tree {tree}: {exc}") from exc
        if resp.status_code >= 400:
            raise RuntimeError(f"Log fetch for {tree} failed {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise RuntimeError(f"Invalid JSON in log response for {tree}: {exc}") from exc
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, list):
            raise RuntimeError(f"Unexpected log payload for {tree}: {type(result)!r}")
        self._cache[tree] = (now, result)
        return result
