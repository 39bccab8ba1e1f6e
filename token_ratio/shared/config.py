from __future__ import annotations

from dataclasses import dataclass, replace
import json
import os
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


DEXTOOLS_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    network: str
    chain: str
    geckoterminal_api_base: str
    dextools_api_key: str
    dextools_subscription: str
    dextools_host: str
    dextools_version: str
    csv_filename: str
    interval: str
    max_candles: int
    weekly_resample_days: int
    pool_limit: int
    chart_height: int
    http_timeout_seconds: float
    http_max_retries: int
    http_min_interval_ms: int

    @property
    def has_dextools_key(self) -> bool:
        return bool(self.dextools_api_key) and self.dextools_api_key != DEXTOOLS_KEY_PLACEHOLDER

    def with_overrides(self, **overrides) -> "Settings":
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def get_settings() -> Settings:
    return Settings(
        network=_env("TOKEN_RATIO_NETWORK", "pulsechain"),
        chain=_env("TOKEN_RATIO_CHAIN", "pulse"),
        geckoterminal_api_base=_env(
            "GECKOTERMINAL_API_BASE", "https://api.geckoterminal.com/api/v2"
        ),
        dextools_api_key=_env("DEXTOOLS_API_KEY", DEXTOOLS_KEY_PLACEHOLDER),
        dextools_subscription=_env("DEXTOOLS_SUBSCRIPTION", "standard"),
        dextools_host=_env("DEXTOOLS_HOST", "https://public-api.dextools.io"),
        dextools_version=_env("DEXTOOLS_VERSION", "v2"),
        csv_filename=_env("TOKEN_RATIO_CSV_FILENAME", "token_ratio.csv"),
        interval=_env("TOKEN_RATIO_INTERVAL", "weekly"),
        max_candles=int(_env("TOKEN_RATIO_MAX_CANDLES", "1000")),
        weekly_resample_days=int(_env("TOKEN_RATIO_WEEKLY_RESAMPLE_DAYS", "7")),
        pool_limit=int(_env("TOKEN_RATIO_POOL_LIMIT", "5")),
        chart_height=int(_env("TOKEN_RATIO_CHART_HEIGHT", "30")),
        http_timeout_seconds=float(_env("HTTP_TIMEOUT_SECONDS", "15")),
        http_max_retries=int(_env("HTTP_MAX_RETRIES", "3")),
        http_min_interval_ms=int(_env("HTTP_MIN_INTERVAL_MS", "250")),
    )


def load_settings_file(path: str | Path, base: Settings | None = None) -> Settings:
    """Overlay a JSON config file (``network``, ``chain``, ``dextools.apiKey`` ...) on ``base``."""
    settings = base or get_settings()
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Config file {path} must contain a JSON object.")

    dextools = payload.get("dextools") or {}
    if not isinstance(dextools, dict):
        raise ValueError("'dextools' must be a JSON object.")

    return settings.with_overrides(
        network=payload.get("network"),
        chain=payload.get("chain"),
        dextools_api_key=dextools.get("apiKey"),
        dextools_subscription=dextools.get("subscription"),
        dextools_host=dextools.get("host"),
        dextools_version=dextools.get("version"),
        csv_filename=payload.get("csvFilename"),
        interval=payload.get("interval"),
        max_candles=_optional_int(payload.get("maxCandles")),
        weekly_resample_days=_optional_int(payload.get("weeklyResampleDays")),
    )


def _optional_int(value) -> int | None:
    if value is None:
        return None
    return int(value)
