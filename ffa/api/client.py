"""HTTP client and rate limiter for the draft league API.

This module centralizes HTTP concerns:
- Simple monotonically-timed rate limiting (min interval between calls)
- Resilient requests.Session with retries and backoff for transient errors
- A bounded per-request timeout so a slow upstream never blocks a read path
"""

from __future__ import annotations

import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffa.report.constants import DEFAULT_MIN_INTERVAL_SEC, DEFAULT_TIMEOUT_SEC

DEFAULT_BASE_URL = "https://draft.premierleague.com/api"


class RateLimiter:
    """Wall-clock based rate limiter using a minimum interval between calls.

    Stateful and meant for a single process. It ensures at least
    ``min_interval_sec`` seconds elapse between consecutive ``wait()`` calls.
    """

    def __init__(self, min_interval_sec: float | None = None) -> None:
        self.min_interval = (
            float(min_interval_sec) if min_interval_sec else DEFAULT_MIN_INTERVAL_SEC
        )
        self._last = 0.0

    def wait(self) -> None:
        now = time.monotonic()
        if self._last:
            elapsed = now - self._last
            if elapsed < self.min_interval:
                time.sleep(self.min_interval - elapsed)
        self._last = time.monotonic()


class DraftClient:
    """Thin wrapper around requests.Session for the draft league API.

    - base_url: defaults to https://draft.premierleague.com/api
    - rpm_limit: translated to a minimum interval of 60 / rpm seconds
    - min_interval_ms: explicit minimum interval in milliseconds (wins if larger)
    - timeout: seconds allowed per request, retries included per attempt

    Only GET + JSON is implemented because the engine only reads from it.
    """

    def __init__(
        self,
        base_url: str | None = None,
        rpm_limit: float | None = None,
        min_interval_ms: float | None = None,
        timeout: float | None = None,
        retries: int = 3,
    ) -> None:
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(timeout) if timeout else DEFAULT_TIMEOUT_SEC
        min_interval = None
        if rpm_limit and rpm_limit > 0:
            min_interval = max(min_interval or 0.0, 60.0 / rpm_limit)
        if min_interval_ms and min_interval_ms > 0:
            ms = float(min_interval_ms) / 1000.0
            min_interval = max(min_interval or 0.0, ms)
        self.rate = RateLimiter(min_interval)

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "ffa-league-report/2.0"})
        retry = Retry(
            total=retries,
            connect=retries,
            read=retries,
            backoff_factor=0.5,
            status_forcelist=(408, 429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def get_json(self, path: str) -> Any:
        """GET ``base_url + path`` and return decoded JSON.

        Raises requests.HTTPError on non-2xx responses (after retries).
        """
        if not path.startswith("/"):
            path = "/" + path
        self.rate.wait()
        r = self.session.get(self.base_url + path, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def bootstrap(self) -> Any:
        return self.get_json("/bootstrap-static")

    def league_details(self, league_id: int | str) -> Any:
        return self.get_json(f"/league/{league_id}/details")
