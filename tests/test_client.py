import json

import httpx
import pytest

from jupswap.client import (
    ClientError,
    DeserializationError,
    JupiterSwapApiClient,
    RequestFailedError,
)
from jupswap.fields import Pubkey
from jupswap.quote import QuoteRequest, QuoteResponse
from jupswap.swap import SwapRequest, b64encode

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
NATIVE = "So11111111111111111111111111111111111111112"
USER = Pubkey(bytes(range(32)))
BASE = "https://api.example.com/v6"


def quote_payload():
    return {
        "inputMint": USDC,
        "inAmount": "1000000",
        "outputMint": NATIVE,
        "outAmount": "5000",
        "otherAmountThreshold": "4975",
        "swapMode": "ExactIn",
        "slippageBps": 50,
        "platformFee": None,
        "priceImpactPct": "0",
        "routePlan": [
            {
                "swapInfo": {
                    "ammKey": str(USER),
                    "label": "Whirlpool",
                    "inputMint": USDC,
                    "outputMint": NATIVE,
                    "inAmount": "1000000",
                    "outAmount": "5000",
                    "feeAmount": "10",
                    "feeMint": USDC,
                },
                "percent": 100,
            }
        ],
        "contextSlot": 7,
        "timeTaken": 0.5,
    }


def instruction_payload(data):
    return {
        "programId": NATIVE,
        "accounts": [{"pubkey": USDC, "isSigner": False, "isWritable": True}],
        "data": b64encode(data),
    }


def make_client(handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JupiterSwapApiClient(BASE, http)


def swap_request():
    return SwapRequest(
        user_public_key=USER, quote_response=QuoteResponse.from_dict(quote_payload())
    )


@pytest.mark.asyncio
async def test_quote_sends_query_and_parses_response():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=quote_payload())

    api = make_client(handler)
    request = QuoteRequest(
        input_mint=Pubkey.from_string(USDC),
        output_mint=Pubkey.from_string(NATIVE),
        amount=1_000_000,
        slippage_bps=50,
        dexes="Whirlpool,Meteora DLMM,Raydium CLMM",
        quote_args={"extraKey": "extraValue"},
    )
    result = await api.quote(request)

    (sent,) = seen
    assert sent.method == "GET"
    assert sent.url.path == "/v6/quote"
    query = dict(sent.url.params)
    assert query["inputMint"] == USDC
    assert query["outputMint"] == NATIVE
    assert query["amount"] == "1000000"
    assert query["slippageBps"] == "50"
    assert query["dexes"] == "Whirlpool,Meteora DLMM,Raydium CLMM"
    assert query["extraKey"] == "extraValue"
    assert "swapMode" not in query
    assert result == QuoteResponse.from_dict(quote_payload())
    assert result.route_plan[0].swap_info.label == "Whirlpool"


@pytest.mark.asyncio
async def test_quote_failure_status_raises_request_failed():
    api = make_client(lambda request: httpx.Response(400, text="bad mint"))
    with pytest.raises(RequestFailedError) as info:
        await api.quote(QuoteRequest())
    assert info.value.status == 400
    assert info.value.body == "bad mint"
    assert "bad mint" in str(info.value)


@pytest.mark.asyncio
async def test_quote_invalid_json_raises_deserialization_error():
    api = make_client(lambda request: httpx.Response(200, text="not json"))
    with pytest.raises(DeserializationError):
        await api.quote(QuoteRequest())


@pytest.mark.asyncio
async def test_quote_missing_field_raises_deserialization_error():
    payload = quote_payload()
    del payload["inAmount"]
    api = make_client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(DeserializationError) as info:
        await api.quote(QuoteRequest())
    assert "inAmount" in str(info.value)


@pytest.mark.asyncio
async def test_transport_error_is_client_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    api = make_client(handler)
    with pytest.raises(ClientError):
        await api.quote(QuoteRequest())


@pytest.mark.asyncio
async def test_swap_posts_body_and_extra_args():
    seen = []
    tx = b"\x01\x02\x03transaction"

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "swapTransaction": b64encode(tx),
                "lastValidBlockHeight": 100,
                "prioritizationFeeLamports": 5,
                "computeUnitLimit": 1400000,
                "prioritizationType": {"jito": {"lamports": 5}},
            },
        )

    api = make_client(handler)
    request = swap_request()
    result = await api.swap(request, {"mode": "fast"})

    (sent,) = seen
    assert sent.method == "POST"
    assert sent.url.path == "/v6/swap"
    assert dict(sent.url.params) == {"mode": "fast"}
    assert json.loads(sent.content) == request.to_dict()
    assert result.swap_transaction == tx
    assert result.last_valid_block_height == 100
    assert result.compute_unit_limit == 1400000


@pytest.mark.asyncio
async def test_swap_without_extra_args_has_empty_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "swapTransaction": b64encode(b"tx"),
                "lastValidBlockHeight": 1,
                "prioritizationFeeLamports": 0,
                "computeUnitLimit": 1,
            },
        )

    api = make_client(handler)
    result = await api.swap(swap_request())
    assert dict(seen[0].url.params) == {}
    assert result.swap_transaction == b"tx"
    assert result.prioritization_type is None


@pytest.mark.asyncio
async def test_swap_bad_base64_raises_deserialization_error():
    payload = {
        "swapTransaction": "!!!",
        "lastValidBlockHeight": 1,
        "prioritizationFeeLamports": 0,
        "computeUnitLimit": 1,
    }
    api = make_client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(DeserializationError):
        await api.swap(swap_request())


@pytest.mark.asyncio
async def test_swap_instructions_parses_instructions():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "tokenLedgerInstruction": None,
                "computeBudgetInstructions": [instruction_payload(b"budget")],
                "setupInstructions": [],
                "swapInstruction": instruction_payload(b"swap-data"),
                "cleanupInstruction": instruction_payload(b"cleanup"),
                "otherInstructions": [],
                "addressLookupTableAddresses": [USDC],
                "prioritizationFeeLamports": 3,
                "computeUnitLimit": 200000,
            },
        )

    api = make_client(handler)
    request = swap_request()
    result = await api.swap_instructions(request)

    assert seen[0].url.path == "/v6/swap-instructions"
    assert json.loads(seen[0].content) == request.to_dict()
    assert result.token_ledger_instruction is None
    assert result.swap_instruction.data == b"swap-data"
    assert result.swap_instruction.program_id == Pubkey.from_string(NATIVE)
    assert result.cleanup_instruction.data == b"cleanup"
    assert [i.data for i in result.compute_budget_instructions] == [b"budget"]
    assert result.address_lookup_table_addresses == [Pubkey.from_string(USDC)]
    assert result.swap_instruction.accounts[0].is_writable is True


@pytest.mark.asyncio
async def test_swap_instructions_failure_status():
    api = make_client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(RequestFailedError) as info:
        await api.swap_instructions(swap_request())
    assert info.value.status == 500


@pytest.mark.asyncio
async def test_context_manager_leaves_supplied_client_open():
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    async with JupiterSwapApiClient(BASE, http) as api:
        assert api.client is http
    assert http.is_closed is False
    await http.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_closed():
    api = JupiterSwapApiClient(BASE)
    async with api:
        assert api.client.is_closed is False
    assert api.client.is_closed is True