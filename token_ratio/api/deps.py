from __future__ import annotations

from functools import lru_cache

from token_ratio.application.use_cases.get_price_ratio import GetPriceRatioUseCase
from token_ratio.application.use_cases.select_pool import SelectPoolUseCase
from token_ratio.infrastructure.clients.dextools_client import (
    DexToolsClientSettings,
    DexToolsPriceClient,
)
from token_ratio.infrastructure.clients.geckoterminal_client import (
    GeckoTerminalClient,
    GeckoTerminalClientSettings,
)
from token_ratio.shared.config import Settings, get_settings


def build_geckoterminal_client(settings: Settings) -> GeckoTerminalClient:
    return GeckoTerminalClient(
        GeckoTerminalClientSettings(
            api_base=settings.geckoterminal_api_base,
            network=settings.network,
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            min_interval_ms=settings.http_min_interval_ms,
        )
    )


def build_dextools_client(settings: Settings) -> DexToolsPriceClient:
    return DexToolsPriceClient(
        DexToolsClientSettings(
            host=settings.dextools_host,
            subscription=settings.dextools_subscription,
            version=settings.dextools_version,
            chain=settings.chain,
            api_key=settings.dextools_api_key,
            timeout_seconds=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
            min_interval_ms=settings.http_min_interval_ms,
        )
    )


def build_price_ratio_use_case(settings: Settings) -> GetPriceRatioUseCase:
    gecko = build_geckoterminal_client(settings)
    return GetPriceRatioUseCase(
        select_pool_use_case=SelectPoolUseCase(
            pool_discovery_port=gecko,
            price_history_port=gecko,
        ),
        price_history_port=gecko,
        token_info_port=gecko,
        current_price_port=build_dextools_client(settings) if settings.has_dextools_key else None,
    )


@lru_cache(maxsize=1)
def get_price_ratio_use_case() -> GetPriceRatioUseCase:
    return build_price_ratio_use_case(get_app_settings())


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()
