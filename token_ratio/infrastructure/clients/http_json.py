from __future__ import annotations

import logging
from threading import Lock
import time

import httpx

from token_ratio.domain.exceptions import PriceSourceError


logger = logging.getLogger(__name__)


class JsonHttpClient:
    """GET-only JSON client with a minimum request interval and exponential backoff."""

    def __init__(
        self,
        *,
        source_name: str,
        timeout_seconds: float,
        max_retries: int,
        min_interval_ms: int,
        transport: httpx.BaseTransport | None = None,
    ):
        self._source_name = source_name
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._min_interval_ms = min_interval_ms
        self._transport = transport
        self._lock = Lock()
        self._last_request_at = 0.0

    def get_json(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> dict:
        attempts = max(1, self._max_retries)
        delay = 0.25
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            self._respect_rate_limit()
            try:
                with httpx.Client(timeout=self._timeout_seconds, transport=self._transport) as client:
                    response = client.get(url, params=params, headers=headers)
                    response.raise_for_status()
                    payload = response.json()
                if not isinstance(payload, dict):
                    raise ValueError("Unexpected JSON payload.")
                return payload
            except (httpx.HTTPError, ValueError) as exc:
                last_exc = exc
                if attempt == attempts:
                    break
                logger.warning(
                    "%s: request_retry attempt=%s/%s url=%s error=%s",
                    self._source_name,
                    attempt,
                    attempts,
                    url,
                    exc,
                )
                time.sleep(delay)
                delay *= 2

        raise PriceSourceError(
            f"{self._source_name} request failed after retries: {last_exc}"
        ) from last_exc

    def _respect_rate_limit(self) -> None:
        min_interval = max(0, self._min_interval_ms) / 1000.0
        if min_interval <= 0:
            return

        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_at
            if elapsed < min_interval:
                time.sleep(min_interval - elapsed)
            self._last_request_at = time.monotonic()
