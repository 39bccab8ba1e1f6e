from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from token_ratio.domain.entities.pool import PoolCandidate
from token_ratio.domain.entities.price_series import Cadence, PriceSample
from token_ratio.domain.entities.token import TokenInfo, UNKNOWN_TOKEN_NAME, UNKNOWN_TOKEN_SYMBOL
from token_ratio.domain.exceptions import InvalidInputError, NoDataError, PriceSourceError
from token_ratio.infrastructure.clients.http_json import JsonHttpClient


logger = logging.getLogger(__name__)


CADENCES = {"hour", "day"}


@dataclass(frozen=True)
class GeckoTerminalClientSettings:
    api_base: str
    network: str
    timeout_seconds: float
    max_retries: int
    min_interval_ms: int


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _resource_attributes(resource) -> dict | None:
    """Return the ``attributes`` object of a JSON:API resource, or None when malformed."""
    if not isinstance(resource, dict):
        return None
    attributes = resource.get("attributes")
    if not isinstance(attributes, dict):
        return None
    return attributes


class GeckoTerminalClient:
    def __init__(
        self,
        settings: GeckoTerminalClientSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._settings = settings
        self._http = JsonHttpClient(
            source_name="geckoterminal_client",
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            min_interval_ms=settings.min_interval_ms,
            transport=transport,
        )

    def fetch_pool_candidates(self, *, token_address: str) -> list[PoolCandidate]:
        payload = self._get_json(
            f"/networks/{self._settings.network}/tokens/{token_address}/pools",
            params={"page": 1},
        )
        rows = payload.get("data") or []
        if not isinstance(rows, list):
            raise NoDataError(f"Unexpected pools payload for token {token_address}.")

        candidates: list[PoolCandidate] = []
        for row in rows:
            attributes = _resource_attributes(row)
            address = attributes.get("address") if attributes else None
            if not address or not isinstance(address, str):
                continue
            candidates.append(
                PoolCandidate(
                    address=address,
                    name=attributes.get("name") or address,
                    liquidity_usd=_to_float(attributes.get("reserve_in_usd")),
                )
            )
        candidates.sort(key=lambda candidate: candidate.liquidity_usd, reverse=True)

        logger.info(
            "geckoterminal_client: fetched_pools token=%s network=%s pools=%s",
            token_address,
            self._settings.network,
            len(candidates),
        )
        return candidates

    def fetch_price_history(
        self,
        *,
        pool_address: str,
        cadence: Cadence,
        limit: int,
    ) -> list[PriceSample]:
        if cadence not in CADENCES:
            raise InvalidInputError(f"Unsupported cadence: {cadence}")

        payload = self._get_json(
            f"/networks/{self._settings.network}/pools/{pool_address}/ohlcv/{cadence}",
            params={"limit": limit},
        )
        attributes = _resource_attributes(payload.get("data"))
        rows = attributes.get("ohlcv_list") if attributes else None
        if not isinstance(rows, list):
            raise NoDataError(f"Unexpected OHLCV payload for pool {pool_address}.")

        samples: list[PriceSample] = []
        for row in rows:
            if not isinstance(row, list) or len(row) < 5 or row[0] is None or row[4] is None:
                continue
            try:
                timestamp_ms = int(row[0]) * 1000
            except (TypeError, ValueError):
                continue
            samples.append(PriceSample(timestamp_ms=timestamp_ms, close=_to_float(row[4])))
        if not samples:
            raise NoDataError(f"Empty OHLCV data for pool {pool_address}.")

        # The API lists newest candles first.
        samples.sort(key=lambda sample: sample.timestamp_ms)
        logger.info(
            "geckoterminal_client: fetched_ohlcv pool=%s cadence=%s samples=%s",
            pool_address,
            cadence,
            len(samples),
        )
        return samples

    def get_token_info(self, *, token_address: str) -> TokenInfo:
        try:
            payload = self._get_json(
                f"/networks/{self._settings.network}/tokens/{token_address}",
            )
        except PriceSourceError as exc:
            logger.warning(
                "geckoterminal_client: token_info_unavailable token=%s error=%s",
                token_address,
                exc,
            )
            return TokenInfo()

        attributes = _resource_attributes(payload.get("data"))
        if attributes is None:
            logger.warning("geckoterminal_client: token_info_malformed token=%s", token_address)
            return TokenInfo()
        return TokenInfo(
            name=str(attributes.get("name") or UNKNOWN_TOKEN_NAME),
            symbol=str(attributes.get("symbol") or UNKNOWN_TOKEN_SYMBOL),
        )

    def _get_json(self, path: str, *, params: dict | None = None) -> dict:
        return self._http.get_json(f"{self._settings.api_base.rstrip('/')}{path}", params=params)
