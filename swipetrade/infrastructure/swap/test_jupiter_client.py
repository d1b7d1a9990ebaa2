import asyncio
import base64
import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from swipetrade.commons.errors import BuildFailed, QuoteUnavailable, SubmitFailed
from swipetrade.domain.trading.dtos.swap_dto import QuoteDTO, UnsignedTransactionDTO
from swipetrade.infrastructure.swap.jupiter import JupiterClient
from swipetrade.infrastructure.swap.swap_base import NATIVE_SOL_MINT


BASE_URL = "https://jup.test/swap/v1"
RPC_URL = "https://rpc.test"
TOKEN_MINT = "TokenMint1111111111111111111111111111111111"

QUOTE_PAYLOAD = {
    "inputMint": NATIVE_SOL_MINT,
    "outputMint": TOKEN_MINT,
    "inAmount": "10000000",
    "outAmount": "89420",
    "slippageBps": 100,
    "priceImpactPct": "0.0012",
    "routePlan": [],
}


def client_with(handler, submit_timeout=30.0) -> JupiterClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JupiterClient(
        base_url=BASE_URL, rpc_url=RPC_URL, submit_timeout=submit_timeout, client=http)


def make_quote() -> QuoteDTO:
    return QuoteDTO(
        input_mint=NATIVE_SOL_MINT,
        output_mint=TOKEN_MINT,
        in_amount=10_000_000,
        out_amount=89_420,
        slippage_bps=100,
        raw=QUOTE_PAYLOAD,
    )


def make_signer(result="sig-abc"):
    signer = MagicMock()
    signer.public_key = "wallet"
    if isinstance(result, Exception):
        signer.sign_and_send = AsyncMock(side_effect=result)
    else:
        signer.sign_and_send = AsyncMock(return_value=result)
    return signer


# ==================== QUOTE ====================


@pytest.mark.asyncio
async def test_get_quote_sends_params_and_maps_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=QUOTE_PAYLOAD)

    quote = await client_with(handler).get_quote(NATIVE_SOL_MINT, TOKEN_MINT, 10_000_000, 100)

    assert seen["path"] == "/swap/v1/quote"
    assert seen["params"] == {
        "inputMint": NATIVE_SOL_MINT,
        "outputMint": TOKEN_MINT,
        "amount": "10000000",
        "slippageBps": "100",
    }
    assert quote.in_amount == 10_000_000
    assert quote.out_amount == 89_420
    assert quote.price_impact_pct == pytest.approx(0.0012)
    assert quote.raw == QUOTE_PAYLOAD


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400, json={"error": "Could not find any route"}),
        httpx.Response(200, json={"error": "No routes found"}),
        httpx.Response(200, json={"inputMint": NATIVE_SOL_MINT}),
        httpx.Response(200, content=b"not json"),
    ],
)
async def test_get_quote_failures_are_quote_unavailable(response):
    with pytest.raises(QuoteUnavailable):
        await client_with(lambda request: response).get_quote(
            NATIVE_SOL_MINT, TOKEN_MINT, 1_000, 100)


@pytest.mark.asyncio
async def test_get_quote_timeout_is_quote_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(QuoteUnavailable, match="timed out"):
        await client_with(handler).get_quote(NATIVE_SOL_MINT, TOKEN_MINT, 1_000, 100)


@pytest.mark.asyncio
async def test_get_quote_rejects_non_positive_amount():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(QuoteUnavailable):
        await client_with(handler).get_quote(NATIVE_SOL_MINT, TOKEN_MINT, 0, 100)


# ==================== BUILD ====================


@pytest.mark.asyncio
async def test_build_posts_quote_and_user_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "swapTransaction": "AQID",
            "lastValidBlockHeight": 123,
        })

    unsigned = await client_with(handler).build_swap_transaction(make_quote(), "wallet")

    assert seen["path"] == "/swap/v1/swap"
    assert seen["body"] == {
        "quoteResponse": QUOTE_PAYLOAD,
        "userPublicKey": "wallet",
        "wrapAndUnwrapSol": True,
    }
    assert unsigned.transaction == "AQID"
    assert unsigned.last_valid_block_height == 123


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="internal error"),
        httpx.Response(200, json={"lastValidBlockHeight": 1}),
    ],
)
async def test_build_failures_are_build_failed(response):
    with pytest.raises(BuildFailed):
        await client_with(lambda request: response).build_swap_transaction(
            make_quote(), "wallet")


# ==================== SUBMIT ====================


@pytest.mark.asyncio
async def test_sign_and_submit_hands_raw_bytes_to_signer():
    signer = make_signer("sig-abc")
    payload = base64.b64encode(b"\x01\x02\x03").decode()

    signature = await client_with(lambda r: httpx.Response(500)).sign_and_submit(
        UnsignedTransactionDTO(transaction=payload), signer)

    assert signature == "sig-abc"
    signer.sign_and_send.assert_awaited_once_with(b"\x01\x02\x03")


@pytest.mark.asyncio
async def test_sign_and_submit_invalid_base64():
    signer = make_signer()

    with pytest.raises(SubmitFailed):
        await client_with(lambda r: httpx.Response(500)).sign_and_submit(
            UnsignedTransactionDTO(transaction="***not base64***"), signer)

    signer.sign_and_send.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("result", [RuntimeError("user rejected"), ""])
async def test_sign_and_submit_signer_failures(result):
    with pytest.raises(SubmitFailed):
        await client_with(lambda r: httpx.Response(500)).sign_and_submit(
            UnsignedTransactionDTO(transaction="AQID"), make_signer(result))


@pytest.mark.asyncio
async def test_sign_and_submit_timeout():
    async def never_answers(raw):
        await asyncio.sleep(10)

    signer = make_signer()
    signer.sign_and_send = AsyncMock(side_effect=never_answers)

    with pytest.raises(SubmitFailed, match="timed out"):
        await client_with(lambda r: httpx.Response(500), submit_timeout=0.01).sign_and_submit(
            UnsignedTransactionDTO(transaction="AQID"), signer)


# ==================== DECIMALS ====================


@pytest.mark.asyncio
async def test_token_decimals_are_looked_up_once():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": 1,
            "result": {"context": {"slot": 1}, "value": {"amount": "1", "decimals": 6}},
        })

    client = client_with(handler)

    assert await client.get_token_decimals(TOKEN_MINT) == 6
    assert await client.get_token_decimals(TOKEN_MINT) == 6
    assert len(calls) == 1
    assert calls[0]["method"] == "getTokenSupply"
    assert calls[0]["params"] == [TOKEN_MINT]


@pytest.mark.asyncio
async def test_native_sol_decimals_need_no_lookup():
    def handler(request):
        raise AssertionError("no request expected")

    assert await client_with(handler).get_token_decimals(NATIVE_SOL_MINT) == 9


@pytest.mark.asyncio
async def test_token_decimals_rpc_error_is_quote_unavailable():
    def handler(request):
        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32602, "message": "Invalid param: not a Token mint"},
        })

    with pytest.raises(QuoteUnavailable):
        await client_with(handler).get_token_decimals("NotAMint")
