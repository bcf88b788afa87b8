"""
http_store.py
=============

Does: BlobStore over a JSON object endpoint:
        GET  {base}/{key}          → 200 document | 404 missing
        PUT  {base}/{key}          ← JSON document
        GET  {base}?prefix=<p>     → {"keys": [...]}
      Transient failures (connection errors, 429, 5xx) are retried with
      backoff + jitter; other statuses raise requests.HTTPError.
Used by: Deployments where the catalog bucket sits behind an HTTP gateway.
"""

from __future__ import annotations

# ── Imports & Typing ─────────────────────────────────────────────────────────
import logging
import random
import time
from typing import Any
from urllib.parse import quote

import requests  # type: ignore[import-untyped]

from shade_catalog import settings

# ── Logger ───────────────────────────────────────────────────────────────────
logger = logging.getLogger(__name__)

# Backoff config
BACKOFF_BASE = 0.5  # base seconds added each attempt
BACKOFF_MIN = 1.2  # min multiplier
BACKOFF_SPREAD = 0.6  # random spread added to multiplier

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})

# Single session for connection reuse
_session = requests.Session()

__all__ = ["HttpBlobStore", "get_http_store"]


def _backoff_sleep(attempt: int) -> None:
    """Does: Sleep with backoff + jitter based on attempt index (0-based)."""
    sleep_s = (BACKOFF_BASE + attempt) * (BACKOFF_MIN + random.random() * BACKOFF_SPREAD)
    time.sleep(sleep_s)


class HttpBlobStore:
    """Does: get/put/list JSON documents against a base URL with bearer auth."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout: float = settings.BLOB_STORE_TIMEOUT,
        retries: int = settings.BLOB_STORE_RETRIES,
        session: requests.Session | None = None,
    ):
        if not base_url:
            raise ValueError("HttpBlobStore needs a base_url")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.retries = retries
        self.session = session or _session

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, key: str) -> str:
        return f"{self.base_url}/{quote(key, safe='/')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Does: Send with retries on transient failures; returns the last response."""
        last_exc: requests.RequestException | None = None
        for attempt in range(self.retries + 1):
            try:
                resp = self.session.request(
                    method, url, headers=self._headers(), timeout=self.timeout, **kwargs
                )
            except requests.RequestException as e:
                logger.warning("[blob %s] attempt %d failed: %s", method, attempt + 1, e)
                last_exc = e
            else:
                if resp.status_code not in RETRY_STATUSES or attempt == self.retries:
                    return resp
                logger.warning(
                    "[blob %s] status=%s on %s, retrying", method, resp.status_code, url
                )
            if attempt < self.retries:
                _backoff_sleep(attempt)
        assert last_exc is not None
        raise last_exc

    def get(self, key: str) -> Any | None:
        resp = self._request("GET", self._url(key))
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    def put(self, key: str, document: Any) -> None:
        resp = self._request("PUT", self._url(key), json=document)
        resp.raise_for_status()

    def list(self, prefix: str) -> list[str]:
        resp = self._request("GET", self.base_url, params={"prefix": prefix})
        resp.raise_for_status()
        keys = (resp.json() or {}).get("keys") or []
        return sorted(str(k) for k in keys if str(k).startswith(prefix))


def get_http_store() -> HttpBlobStore | None:
    """Does: Factory from SHADE_CATALOG_BLOB_STORE_URL/_TOKEN; None when no URL is set."""
    if not settings.BLOB_STORE_URL:
        return None
    return HttpBlobStore(settings.BLOB_STORE_URL, token=settings.BLOB_STORE_TOKEN)
