from __future__ import annotations

import json

import pytest

from token_ratio.shared.config import DEXTOOLS_KEY_PLACEHOLDER, get_settings, load_settings_file


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TOKEN_RATIO_NETWORK", "eth")
    monkeypatch.setenv("TOKEN_RATIO_CHAIN", "ether")
    monkeypatch.setenv("TOKEN_RATIO_MAX_CANDLES", "250")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("DEXTOOLS_API_KEY", "real-key")

    settings = get_settings()

    assert settings.network == "eth"
    assert settings.chain == "ether"
    assert settings.max_candles == 250
    assert settings.http_timeout_seconds == 2.5
    assert settings.has_dextools_key is True


def test_placeholder_key_is_not_usable(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DEXTOOLS_API_KEY", DEXTOOLS_KEY_PLACEHOLDER)

    assert get_settings().has_dextools_key is False
    assert get_settings().with_overrides(dextools_api_key="").has_dextools_key is False


def test_with_overrides_ignores_missing_values(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TOKEN_RATIO_INTERVAL", "daily")
    settings = get_settings()

    updated = settings.with_overrides(interval=None, network="bsc")

    assert updated.interval == "daily"
    assert updated.network == "bsc"


def test_load_settings_file_overlays_json(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TOKEN_RATIO_NETWORK", "pulsechain")
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "network": "eth",
                "dextools": {"apiKey": "from-file", "subscription": "pro", "version": "v3"},
                "csvFilename": "out.csv",
                "maxCandles": "500",
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings_file(config_path)

    assert settings.network == "eth"
    assert settings.dextools_api_key == "from-file"
    assert settings.dextools_subscription == "pro"
    assert settings.dextools_version == "v3"
    assert settings.csv_filename == "out.csv"
    assert settings.max_candles == 500
    assert settings.weekly_resample_days == get_settings().weekly_resample_days


def test_load_settings_file_rejects_non_object(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings_file(config_path)
