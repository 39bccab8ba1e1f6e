from __future__ import annotations

import httpx
import pytest

from token_ratio.application.dto.select_pool import SelectPoolInput
from token_ratio.application.use_cases.select_pool import SelectPoolUseCase
from token_ratio.domain.entities.token import TokenInfo
from token_ratio.domain.exceptions import InvalidInputError, NoDataError, PriceSourceError
from token_ratio.infrastructure.clients.geckoterminal_client import (
    GeckoTerminalClient,
    GeckoTerminalClientSettings,
)


TOKEN = "0x" + "a" * 40


def _make_client(*, max_retries: int = 1, transport: httpx.BaseTransport | None = None) -> GeckoTerminalClient:
    return GeckoTerminalClient(
        GeckoTerminalClientSettings(
            api_base="https://api.geckoterminal.com/api/v2",
            network="pulsechain",
            timeout_seconds=5,
            max_retries=max_retries,
            min_interval_ms=0,
        ),
        transport=transport,
    )


def test_fetch_pool_candidates_ranks_by_liquidity(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    requested: list[tuple[str, dict | None]] = []

    def fake_get_json(path: str, *, params: dict | None = None) -> dict:
        requested.append((path, params))
        return {
            "data": [
                {"attributes": {"address": "0xsmall", "name": "A / WPLS", "reserve_in_usd": "120.5"}},
                {"attributes": {"address": "0xbig", "name": "A / DAI", "reserve_in_usd": "98000"}},
                {"attributes": {"name": "no address"}},
                {"attributes": {"address": "0xnull", "name": None, "reserve_in_usd": None}},
            ]
        }

    monkeypatch.setattr(client, "_get_json", fake_get_json)

    candidates = client.fetch_pool_candidates(token_address=TOKEN)

    assert requested == [(f"/networks/pulsechain/tokens/{TOKEN}/pools", {"page": 1})]
    assert [candidate.address for candidate in candidates] == ["0xbig", "0xsmall", "0xnull"]
    assert candidates[0].liquidity_usd == 98000.0
    assert candidates[2].name == "0xnull"
    assert candidates[2].liquidity_usd == 0.0


def test_fetch_price_history_sorts_ascending_in_milliseconds(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    requested: list[tuple[str, dict | None]] = []

    def fake_get_json(path: str, *, params: dict | None = None) -> dict:
        requested.append((path, params))
        return {
            "data": {
                "attributes": {
                    "ohlcv_list": [
                        [1700172800, 1.0, 1.2, 0.9, 1.1, 500.0],
                        [1700086400, 0.9, 1.0, 0.8, 0.95, 400.0],
                        [1700000000, 0.8, 0.9, 0.7, 0.85, 300.0],
                        [None, 1.0, 1.0, 1.0, 1.0, 0.0],
                    ]
                }
            }
        }

    monkeypatch.setattr(client, "_get_json", fake_get_json)

    samples = client.fetch_price_history(pool_address="0xpool", cadence="day", limit=30)

    assert requested == [("/networks/pulsechain/pools/0xpool/ohlcv/day", {"limit": 30})]
    assert [sample.timestamp_ms for sample in samples] == [
        1700000000000,
        1700086400000,
        1700172800000,
    ]
    assert [sample.close for sample in samples] == [0.85, 0.95, 1.1]


def test_fetch_price_history_without_rows_raises_no_data(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    monkeypatch.setattr(
        client,
        "_get_json",
        lambda _path, *, params=None: {"data": {"attributes": {"ohlcv_list": []}}},
    )

    with pytest.raises(NoDataError):
        client.fetch_price_history(pool_address="0xpool", cadence="hour", limit=10)


def test_fetch_price_history_rejects_unknown_cadence():
    with pytest.raises(InvalidInputError):
        _make_client().fetch_price_history(pool_address="0xpool", cadence="minute", limit=10)


def test_get_token_info_reads_attributes(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()
    monkeypatch.setattr(
        client,
        "_get_json",
        lambda _path, *, params=None: {"data": {"attributes": {"name": "HEX", "symbol": "HEX"}}},
    )

    assert client.get_token_info(token_address=TOKEN) == TokenInfo(name="HEX", symbol="HEX")


def test_get_token_info_falls_back_to_unknown(monkeypatch: pytest.MonkeyPatch):
    client = _make_client()

    def failing_get_json(_path: str, *, params: dict | None = None) -> dict:
        raise PriceSourceError("geckoterminal_client request failed after retries: 404")

    monkeypatch.setattr(client, "_get_json", failing_get_json)

    info = client.get_token_info(token_address=TOKEN)

    assert info == TokenInfo()
    assert info.display_name == "???"


def test_http_errors_are_retried_then_succeed(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        "token_ratio.infrastructure.clients.http_json.time.sleep",
        lambda _seconds: None,
    )
    responses = [
        httpx.Response(500, json={"errors": ["busy"]}),
        httpx.Response(200, json={"data": {"attributes": {"name": "PulseX", "symbol": "PLSX"}}}),
    ]
    seen_urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_urls.append(str(request.url))
        return responses.pop(0)

    client = _make_client(max_retries=3, transport=httpx.MockTransport(handler))

    info = client.get_token_info(token_address=TOKEN)

    assert info == TokenInfo(name="PulseX", symbol="PLSX")
    assert len(seen_urls) == 2
    assert seen_urls[0] == f"https://api.geckoterminal.com/api/v2/networks/pulsechain/tokens/{TOKEN}"


def test_http_errors_raise_source_error_after_retries(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        "token_ratio.infrastructure.clients.http_json.time.sleep",
        lambda _seconds: None,
    )
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503, json={"errors": ["down"]})

    client = _make_client(max_retries=2, transport=httpx.MockTransport(handler))

    with pytest.raises(PriceSourceError):
        client.fetch_price_history(pool_address="0xpool", cadence="day", limit=10)
    assert len(calls) == 2


def _json_transport(routes: dict[str, dict]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        for suffix, payload in routes.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(200, json=payload)
        return httpx.Response(404, json={"errors": ["not found"]})

    return httpx.MockTransport(handler)


@pytest.mark.parametrize(
    "payload",
    [
        {"data": ["unexpected"]},
        {"data": "unexpected"},
        {"data": {"attributes": "unexpected"}},
        {"data": {"attributes": {"ohlcv_list": {"0": [1, 2, 3, 4, 5]}}}},
    ],
)
def test_fetch_price_history_with_malformed_payload_raises_no_data(payload: dict):
    client = _make_client(transport=_json_transport({"/pools/0xpool/ohlcv/day": payload}))

    with pytest.raises(NoDataError):
        client.fetch_price_history(pool_address="0xpool", cadence="day", limit=10)


def test_fetch_pool_candidates_with_malformed_payload():
    client = _make_client(
        transport=_json_transport(
            {
                f"/tokens/{TOKEN}/pools": {
                    "data": [
                        "not-a-resource",
                        {"attributes": ["not", "a", "dict"]},
                        {"attributes": {"address": "0xok", "reserve_in_usd": "10"}},
                    ]
                },
                "/tokens/0xother/pools": {"data": {"address": "0xpool"}},
            }
        )
    )

    assert [candidate.address for candidate in client.fetch_pool_candidates(token_address=TOKEN)] == ["0xok"]
    with pytest.raises(NoDataError):
        client.fetch_pool_candidates(token_address="0xother")


def test_get_token_info_with_malformed_payload_falls_back():
    client = _make_client(transport=_json_transport({f"/tokens/{TOKEN}": {"data": ["HEX"]}}))

    assert client.get_token_info(token_address=TOKEN) == TokenInfo()


def test_malformed_history_only_skips_that_pool_during_selection():
    client = _make_client(
        transport=_json_transport(
            {
                f"/tokens/{TOKEN}/pools": {
                    "data": [
                        {"attributes": {"address": "0xbad", "name": "BAD", "reserve_in_usd": "100"}},
                        {"attributes": {"address": "0xgood", "name": "GOOD", "reserve_in_usd": "50"}},
                    ]
                },
                "/pools/0xbad/ohlcv/day": {"data": ["unexpected"]},
                "/pools/0xgood/ohlcv/day": {
                    "data": {"attributes": {"ohlcv_list": [[1700000000, 1, 1, 1, 1.5, 10]]}}
                },
            }
        )
    )
    use_case = SelectPoolUseCase(pool_discovery_port=client, price_history_port=client)

    result = use_case.execute(SelectPoolInput(token_address=TOKEN))

    assert result.pool.address == "0xgood"
    assert [skipped.candidate.address for skipped in result.skipped] == ["0xbad"]
