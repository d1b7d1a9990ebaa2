import json

import httpx
import pytest

from swipetrade.infrastructure.data.dexscreener import FALLBACK_TOKENS, DexScreenerService


BASE_URL = "https://dex.test"


def make_pair(address, symbol, volume, dex_id="raydium", chain_id="solana", price="1.5", **extra):
    pair = {
        "chainId": chain_id,
        "dexId": dex_id,
        "pairAddress": f"pair-{address}",
        "url": f"https://dexscreener.com/solana/{address}",
        "baseToken": {"address": address, "name": f"{symbol} Token", "symbol": symbol},
        "priceUsd": price,
        "priceChange": {"h24": 3.5},
        "volume": {"h24": volume},
        "liquidity": {"usd": 1000.0},
        "marketCap": 250_000,
        "pairCreatedAt": 1_700_000_000_000,
    }
    pair.update(extra)
    return pair


def service_with(handler, limit=20) -> DexScreenerService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DexScreenerService(base_url=BASE_URL, limit=limit, client=client)


# ==================== TRENDING ====================


@pytest.mark.asyncio
async def test_trending_filters_to_raydium_and_sorts_by_volume():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["q"] = request.url.params.get("q")
        return httpx.Response(200, json={"pairs": [
            make_pair("AAA", "AAA", 100),
            make_pair("BBB", "BBB", 5_000),
            make_pair("CCC", "CCC", 9_999, dex_id="orca"),
            make_pair("DDD", "DDD", 9_999, chain_id="ethereum"),
            make_pair("EEE", "EEE", 50, price=None),
        ]})

    tokens = await service_with(handler).get_trending_tokens()

    assert seen == {"path": "/latest/dex/search", "q": "raydium"}
    assert [t.symbol for t in tokens] == ["BBB", "AAA"]
    assert tokens[0].price == 1.5
    assert tokens[0].change_24h == 3.5
    assert tokens[0].created_at.year == 2023


@pytest.mark.asyncio
async def test_trending_is_capped_at_limit():
    def handler(request):
        return httpx.Response(200, json={"pairs": [
            make_pair(f"T{i}", f"T{i}", i) for i in range(10)
        ]})

    tokens = await service_with(handler, limit=3).get_trending_tokens()

    assert len(tokens) == 3


@pytest.mark.asyncio
async def test_trending_logo_prefers_pair_image():
    def handler(request):
        return httpx.Response(200, json={"pairs": [
            make_pair("AAA", "AAA", 1, info={"imageUrl": "https://img.test/a.png"}),
            make_pair("BBB", "BBB", 2),
        ]})

    tokens = {t.symbol: t for t in await service_with(handler).get_trending_tokens()}

    assert tokens["AAA"].logo_uri == "https://img.test/a.png"
    assert "BBB" in tokens["BBB"].logo_uri


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"pairs": []}),
        httpx.Response(200, json={"pairs": None}),
    ],
)
async def test_trending_falls_back_on_failure(response):
    tokens = await service_with(lambda request: response).get_trending_tokens()

    assert tokens == FALLBACK_TOKENS
    assert tokens is not FALLBACK_TOKENS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"pairs": [None]},
        {"pairs": {"AAA": make_pair("AAA", "AAA", 1)}},
        {"pairs": ["not-a-pair", 42]},
        {"pairs": [make_pair("AAA", "AAA", 1, baseToken="AAA")]},
        {"pairs": [make_pair("AAA", "AAA", 1, priceChange=[1, 2])]},
        ["unexpected", "array"],
    ],
)
async def test_trending_falls_back_on_malformed_pairs(payload):
    tokens = await service_with(
        lambda request: httpx.Response(200, json=payload)).get_trending_tokens()

    assert tokens == FALLBACK_TOKENS


@pytest.mark.asyncio
async def test_trending_skips_malformed_pairs_and_keeps_the_rest():
    def handler(request):
        return httpx.Response(200, json={"pairs": [
            None,
            make_pair("AAA", "AAA", 1, baseToken=["AAA"]),
            make_pair("BBB", "BBB", 2),
        ]})

    tokens = await service_with(handler).get_trending_tokens()

    assert [t.symbol for t in tokens] == ["BBB"]


@pytest.mark.asyncio
async def test_trending_falls_back_on_transport_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    tokens = await service_with(handler).get_trending_tokens()

    assert [t.symbol for t in tokens] == ["SOL", "RAY"]


# ==================== TOKEN POR ADDRESS ====================


@pytest.mark.asyncio
async def test_get_token_by_address_returns_matching_pair():
    def handler(request):
        assert request.url.path == "/latest/dex/tokens/BBB"
        return httpx.Response(200, content=json.dumps({"pairs": [
            make_pair("AAA", "AAA", 1),
            make_pair("BBB", "BBB", 2),
        ]}))

    token = await service_with(handler).get_token_by_address("BBB")

    assert token is not None
    assert token.symbol == "BBB"


@pytest.mark.asyncio
async def test_get_token_by_address_unknown_returns_none():
    def handler(request):
        return httpx.Response(200, json={"pairs": None})

    assert await service_with(handler).get_token_by_address("ZZZ") is None


@pytest.mark.asyncio
async def test_get_token_by_address_error_returns_none():
    def handler(request):
        return httpx.Response(503)

    assert await service_with(handler).get_token_by_address("AAA") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"pairs": [None, make_pair("AAA", "AAA", 1, baseToken="AAA")]},
        {"pairs": {"AAA": make_pair("AAA", "AAA", 1)}},
    ],
)
async def test_get_token_by_address_malformed_returns_none(payload):
    def handler(request):
        return httpx.Response(200, json=payload)

    assert await service_with(handler).get_token_by_address("AAA") is None
