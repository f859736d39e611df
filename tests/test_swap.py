from decimal import Decimal

import pytest

from jupswap.fields import FieldParseError, Pubkey
from jupswap.quote import QuoteResponse, SwapMode
from jupswap.swap import (
    AccountMeta,
    ComputeBudgetPrioritization,
    DynamicSlippageReport,
    Instruction,
    JitoPrioritization,
    SwapInstructionsResponse,
    SwapRequest,
    SwapResponse,
    UiSimulationError,
    b64decode,
    b64encode,
    prioritization_type_from_json,
    prioritization_type_to_json,
)
from jupswap.transaction_config import JitoTipLamports, TransactionConfig

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
NATIVE = "So11111111111111111111111111111111111111112"
WALLET = "2AQdpHJ2JpcEgPiATUXjQxA8QmafFegfQwSLWSprPicm"


def _quote():
    return QuoteResponse(
        input_mint=Pubkey.from_string(USDC),
        in_amount=1_000_000,
        output_mint=Pubkey.from_string(NATIVE),
        out_amount=5_000,
        other_amount_threshold=4_975,
        swap_mode=SwapMode.EXACT_IN,
        slippage_bps=50,
        price_impact_pct=Decimal("0.001"),
    )


def _instruction_json(data=b"\x01\x02"):
    return {
        "programId": NATIVE,
        "accounts": [{"pubkey": WALLET, "isSigner": True, "isWritable": False}],
        "data": b64encode(data),
    }


def test_b64_known_value():
    assert b64encode(b"hello") == "aGVsbG8="


def test_b64_round_trip():
    payload = bytes(range(256))
    assert b64decode(b64encode(payload)) == payload


@pytest.mark.parametrize("text", ["a!b=", "YQ"])
def test_b64_rejects_malformed(text):
    with pytest.raises(ValueError):
        b64decode(text)


def test_swap_request_flattens_config():
    request = SwapRequest(Pubkey.from_string(WALLET), _quote(), TransactionConfig())
    data = request.to_dict()
    assert data["userPublicKey"] == WALLET
    assert data["wrapAndUnwrapSol"] is True
    assert "config" not in data


def test_swap_request_round_trip():
    config = TransactionConfig(
        use_token_ledger=True, prioritization_fee_lamports=JitoTipLamports(100)
    )
    request = SwapRequest(Pubkey.from_string(WALLET), _quote(), config)
    assert SwapRequest.from_dict(request.to_dict()) == request


def test_swap_request_missing_quote():
    with pytest.raises(FieldParseError):
        SwapRequest.from_dict({"userPublicKey": WALLET})


def test_prioritization_type_jito():
    assert prioritization_type_from_json({"jito": {"lamports": 5}}) == JitoPrioritization(5)


def test_prioritization_type_estimate_optional():
    parsed = prioritization_type_from_json({"computeBudget": {"microLamports": 7}})
    assert parsed == ComputeBudgetPrioritization(7, None)


@pytest.mark.parametrize(
    "value", [JitoPrioritization(3), ComputeBudgetPrioritization(4, 9)]
)
def test_prioritization_type_round_trip(value):
    assert prioritization_type_from_json(prioritization_type_to_json(value)) == value


def test_prioritization_type_unknown():
    with pytest.raises(FieldParseError):
        prioritization_type_from_json({"other": {}})


def test_dynamic_slippage_report_round_trip():
    report = DynamicSlippageReport(30, 900, -4, Decimal("1.25"))
    assert DynamicSlippageReport.from_dict(report.to_dict()) == report


def test_dynamic_slippage_report_numeric_ratio():
    report = DynamicSlippageReport.from_dict({"slippageBps": 10, "amplificationRatio": 2})
    assert report.amplification_ratio == Decimal(2)
    assert report.other_amount is None


def test_dynamic_slippage_report_signed_range():
    with pytest.raises(FieldParseError):
        DynamicSlippageReport.from_dict(
            {"slippageBps": 1, "simulatedIncurredSlippageBps": 40_000}
        )


def test_simulation_error_round_trip():
    error = UiSimulationError("E1", "failed")
    assert error.to_dict() == {"errorCode": "E1", "error": "failed"}
    assert UiSimulationError.from_dict(error.to_dict()) == error


def test_swap_response_round_trip():
    response = SwapResponse(
        swap_transaction=b"\x00\x01tx",
        last_valid_block_height=123,
        prioritization_fee_lamports=456,
        compute_unit_limit=200_000,
        prioritization_type=ComputeBudgetPrioritization(10, 12),
        dynamic_slippage_report=DynamicSlippageReport(50),
        simulation_error=UiSimulationError("E", "boom"),
    )
    assert SwapResponse.from_dict(response.to_dict()) == response


def test_swap_response_decodes_transaction():
    data = {
        "swapTransaction": b64encode(b"raw-tx"),
        "lastValidBlockHeight": 1,
        "prioritizationFeeLamports": 2,
        "computeUnitLimit": 3,
    }
    response = SwapResponse.from_dict(data)
    assert response.swap_transaction == b"raw-tx"
    assert response.prioritization_type is None


def test_swap_response_bad_base64():
    with pytest.raises(FieldParseError):
        SwapResponse.from_dict(
            {
                "swapTransaction": "***",
                "lastValidBlockHeight": 1,
                "prioritizationFeeLamports": 2,
                "computeUnitLimit": 3,
            }
        )


def test_instruction_from_dict():
    instruction = Instruction.from_dict(_instruction_json(b"\x05\x06"))
    assert instruction.program_id == Pubkey.from_string(NATIVE)
    assert instruction.data == b"\x05\x06"
    assert instruction.accounts == [AccountMeta(Pubkey.from_string(WALLET), True, False)]


def _instructions_json():
    return {
        "tokenLedgerInstruction": None,
        "computeBudgetInstructions": [_instruction_json()],
        "setupInstructions": [],
        "swapInstruction": _instruction_json(b"swap"),
        "cleanupInstruction": _instruction_json(b"close"),
        "otherInstructions": [],
        "addressLookupTableAddresses": [USDC, NATIVE],
        "prioritizationFeeLamports": 10,
        "computeUnitLimit": 20,
        "prioritizationType": {"jito": {"lamports": 1}},
    }


def test_swap_instructions_response_from_dict():
    response = SwapInstructionsResponse.from_dict(_instructions_json())
    assert response.token_ledger_instruction is None
    assert len(response.compute_budget_instructions) == 1
    assert response.swap_instruction.data == b"swap"
    assert response.cleanup_instruction.data == b"close"
    assert response.address_lookup_table_addresses == [
        Pubkey.from_string(USDC),
        Pubkey.from_string(NATIVE),
    ]
    assert response.prioritization_type == JitoPrioritization(1)
    assert response.simulation_error is None


def test_swap_instructions_requires_lists():
    data = _instructions_json()
    del data["setupInstructions"]
    with pytest.raises(FieldParseError):
        SwapInstructionsResponse.from_dict(data)


def test_swap_instructions_bad_lookup_address():
    data = _instructions_json()
    data["addressLookupTableAddresses"] = ["0OIl"]
    with pytest.raises(FieldParseError):
        SwapInstructionsResponse.from_dict(data)