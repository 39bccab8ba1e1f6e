from __future__ import annotations

from dataclasses import dataclass
import logging
import math

import httpx

from token_ratio.domain.exceptions import NoDataError, PriceSourceError
from token_ratio.infrastructure.clients.http_json import JsonHttpClient
from token_ratio.shared.config import DEXTOOLS_KEY_PLACEHOLDER


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DexToolsClientSettings:
    host: str
    subscription: str
    version: str
    chain: str
    api_key: str
    timeout_seconds: float
    max_retries: int
    min_interval_ms: int


class DexToolsPriceClient:
    def __init__(
        self,
        settings: DexToolsClientSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._settings = settings
        self._http = JsonHttpClient(
            source_name="dextools_client",
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            min_interval_ms=settings.min_interval_ms,
            transport=transport,
        )

    def fetch_current_price(self, *, token_address: str) -> float:
        api_key = self._settings.api_key
        if not api_key or api_key == DEXTOOLS_KEY_PLACEHOLDER:
            raise PriceSourceError("DexTools API key missing - cannot fetch current price fallback.")

        url = "/".join(
            [
                self._settings.host.rstrip("/"),
                self._settings.subscription,
                self._settings.version,
                "token",
                self._settings.chain,
                token_address,
                "price",
            ]
        )
        payload = self._http.get_json(url, headers={"x-api-key": api_key})
        data = payload.get("data")
        price = data.get("price") if isinstance(data, dict) else None
        if not price:
            raise NoDataError(f"DexTools price field missing for token {token_address}.")

        try:
            value = float(price)
        except (TypeError, ValueError) as exc:
            raise NoDataError(f"DexTools price is not numeric for token {token_address}: {price!r}") from exc
        if not math.isfinite(value) or value <= 0:
            raise NoDataError(f"DexTools price is not usable for token {token_address}: {price!r}")

        logger.info("dextools_client: current_price token=%s price_usd=%s", token_address, value)
        return value
