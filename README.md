# jupswap

An asyncio client for the Jupiter swap aggregator HTTP API. It asks for
quotes (`GET /quote`), builds serialized swap transactions (`POST /swap`)
and fetches the individual swap instructions (`POST /swap-instructions`),
with typed request and response objects built on `httpx`.

## Installation

```
pip install jupswap
```

## Usage

```python
import asyncio

from jupswap.client import JupiterSwapApiClient
from jupswap.fields import Pubkey
from jupswap.quote import QuoteRequest
from jupswap.swap import SwapRequest
from jupswap.transaction_config import TransactionConfig

BASE_URL = "https://swap-api.example.com/v6"  # the API's base URL, without a trailing slash
USDC_MINT = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")
NATIVE_MINT = Pubkey.from_string("So11111111111111111111111111111111111111112")
WALLET = Pubkey(bytes(32))  # substitute the public key of your wallet


async def main() -> None:
    async with JupiterSwapApiClient(BASE_URL) as client:
        quote = await client.quote(
            QuoteRequest(
                input_mint=USDC_MINT,
                output_mint=NATIVE_MINT,
                amount=1_000_000,
                slippage_bps=50,
                dexes="Whirlpool,Meteora DLMM,Raydium CLMM",
            )
        )
        print(quote.out_amount, quote.price_impact_pct)

        request = SwapRequest(
            user_public_key=WALLET,
            quote_response=quote,
            config=TransactionConfig(),
        )

        swap = await client.swap(request)
        print("raw transaction:", len(swap.swap_transaction), "bytes")

        instructions = await client.swap_instructions(request)
        print(instructions.swap_instruction.program_id)


asyncio.run(main())
```

`JupiterSwapApiClient(base_path, client=None)` appends `/quote`, `/swap`
and `/swap-instructions` to `base_path`. Pass your own
`httpx.AsyncClient` as `client` to control timeouts, proxies and the like;
a client you pass in is left open by `aclose()` and by leaving the
`async with` block, while one the instance created itself is closed.

## Modules

- `jupswap.client`: `JupiterSwapApiClient` with `quote`, `swap`,
  `swap_instructions` and `aclose`, and the error classes.
- `jupswap.quote`: `QuoteRequest`, `QuoteResponse`, `PlatformFee`,
  `ComputeUnitScore` and the `SwapMode` enum (`EXACT_IN`, `EXACT_OUT`,
  parsed from `"ExactIn"` / `"ExactOut"` by `SwapMode.from_str`).
- `jupswap.route_plan`: `RoutePlanStep` and `SwapInfo`, the steps of a
  quote's `route_plan`.
- `jupswap.swap`: `SwapRequest`, `SwapResponse`,
  `SwapInstructionsResponse`, `Instruction`, `AccountMeta`,
  `DynamicSlippageReport`, `UiSimulationError`, and the prioritization
  types `JitoPrioritization` and `ComputeBudgetPrioritization`.
- `jupswap.transaction_config`: `TransactionConfig` and the fee settings.
- `jupswap.fields`: `Pubkey` (32 bytes, written as base58 text),
  `b58encode` / `b58decode`, `parse_u64` and the string field helpers.

Every request and response object has `to_dict` and/or `from_dict`
methods that convert to and from the camelCase JSON the API uses. Public
keys and 64-bit amounts travel as strings; `price_impact_pct` and
`amplification_ratio` are `decimal.Decimal`; transactions and instruction
data are `bytes`, base64-encoded on the wire.

## Requests

- `QuoteRequest` holds the mints, amount, slippage and routing options,
  and checks that integer fields fit their ranges (for example
  `slippage_bps` in 16 bits, `platform_fee_bps` in 8). Options left as
  `None` are not sent. Keys in `quote_args` are sent as extra query
  parameters. `compute_unit_score`, `routing_constraints` and
  `token_category_based_intermediate_tokens` are kept on the request but
  are not sent with the quote.
- `SwapRequest` carries the user's public key, the `QuoteResponse` and a
  `TransactionConfig`, whose fields are merged into the request body.
- `TransactionConfig` holds the swap building options. It defaults to
  wrapping and unwrapping SOL, with every other flag off. The compute unit
  price is set with `ComputeUnitPriceMicroLamports(n)` or
  `ComputeUnitPriceMicroLamports.auto()`. The prioritization fee is one of
  `AutoMultiplier`, `JitoTipLamports`, `PriorityLevelWithMaxLamports`
  (with a `PriorityLevel` of `MEDIUM`, `HIGH` or `VERY_HIGH`), `AutoFee`,
  `Lamports` and `DisabledFee`; `prioritization_fee_to_json` and
  `prioritization_fee_from_json` convert them. `keyed_ui_accounts` takes
  `KeyedUiAccount` entries whose account fields are passed through as
  given.
- `swap(request, extra_args=None)` sends the mapping `extra_args` as
  extra query parameters.

## Errors

- `RequestFailedError`: the API answered with a status outside 2xx; it
  carries `status` and the response `body`.
- `DeserializationError`: the request could not be sent (an `httpx`
  transport error), the body was not JSON, or the JSON did not have the
  shape of the expected response; the underlying exception is in `cause`.

Both derive from `ClientError`. When calling `from_dict` directly,
malformed public keys, numbers and missing fields raise
`FieldParseError`, a subclass of `ValueError`; the client wraps these in
`DeserializationError`.

## What it does not do

The package talks to the swap API only. It does not decode, sign or send
the returned transaction: `SwapResponse.swap_transaction` is the raw
serialized transaction as `bytes`, and `SwapInstructionsResponse` holds
the instructions as plain data. Signing and submitting to a cluster are
left to a wallet or RPC library of your choice. There is no command-line
tool.

## Development

```
pip install -e ".[test]"
pytest
```