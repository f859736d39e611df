"""Swap requests, swap transactions and swap instructions."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, TypeVar, Union

from jupswap.fields import (
    FieldParseError,
    Pubkey,
    _ensure_mapping,
    _parse_bool,
    _parse_str,
    _parse_uint,
    _require,
    parse_field,
)
from jupswap.quote import QuoteResponse, _parse_decimal
from jupswap.transaction_config import TransactionConfig

T = TypeVar("T")


def b64encode(data: bytes) -> str:
    """Encode bytes as padded standard base64."""
    return base64.b64encode(bytes(data)).decode("ascii")


def b64decode(text: str) -> bytes:
    """Decode padded standard base64; raise ValueError on malformed input."""
    return base64.b64decode(text, validate=True)


def _parse_base64(value: Any, key: str) -> bytes:
    if not isinstance(value, str):
        raise FieldParseError(f"invalid value for `{key}`: expected a string, got {value!r}")
    try:
        return b64decode(value)
    except ValueError as exc:
        raise FieldParseError(f"base64 decoding error: {exc}") from exc


def _optional(data: Mapping[str, Any], key: str, parse: Callable[[Any], T]) -> T | None:
    value = data.get(key)
    return None if value is None else parse(value)


def _parse_list(data: Mapping[str, Any], key: str, parse: Callable[[Any], T]) -> list[T]:
    value = _require(data, key)
    if not isinstance(value, list):
        raise FieldParseError(f"invalid value for `{key}`: expected a list, got {value!r}")
    return [parse(item) for item in value]


def _parse_i16(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not -(1 << 15) <= value < 1 << 15:
        raise FieldParseError(f"invalid value for `{key}`: expected i16, got {value!r}")
    return value


@dataclass
class SwapRequest:
    """Body of a POST /swap or /swap-instructions call."""

    user_public_key: Pubkey
    quote_response: QuoteResponse
    config: TransactionConfig = field(default_factory=TransactionConfig)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "userPublicKey": str(self.user_public_key),
            "quoteResponse": self.quote_response.to_dict(),
        }
        data.update(self.config.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SwapRequest:
        data = _ensure_mapping(data, "SwapRequest")
        return cls(
            user_public_key=parse_field(_require(data, "userPublicKey"), Pubkey.from_string),
            quote_response=QuoteResponse.from_dict(_require(data, "quoteResponse")),
            config=TransactionConfig.from_dict(data),
        )


@dataclass(frozen=True)
class JitoPrioritization:
    """Prioritization paid as a Jito tip."""

    lamports: int


@dataclass(frozen=True)
class ComputeBudgetPrioritization:
    """Prioritization paid through the compute unit price."""

    micro_lamports: int
    estimated_micro_lamports: int | None = None


PrioritizationType = Union[JitoPrioritization, ComputeBudgetPrioritization]


def prioritization_type_from_json(value: Any) -> PrioritizationType:
    """Parse the prioritization applied to a built transaction."""
    if isinstance(value, Mapping) and len(value) == 1:
        ((key, inner),) = value.items()
        if key == "jito":
            inner = _ensure_mapping(inner, key)
            return JitoPrioritization(_parse_uint(_require(inner, "lamports"), 64, "lamports"))
        if key == "computeBudget":
            inner = _ensure_mapping(inner, key)
            return ComputeBudgetPrioritization(
                micro_lamports=_parse_uint(
                    _require(inner, "microLamports"), 64, "microLamports"
                ),
                estimated_micro_lamports=_optional(
                    inner,
                    "estimatedMicroLamports",
                    lambda v: _parse_uint(v, 64, "estimatedMicroLamports"),
                ),
            )
    raise FieldParseError(f"unknown variant of PrioritizationType: {value!r}")


def prioritization_type_to_json(value: PrioritizationType) -> dict[str, Any]:
    """Render a prioritization type in its wire form."""
    if isinstance(value, JitoPrioritization):
        return {"jito": {"lamports": value.lamports}}
    if isinstance(value, ComputeBudgetPrioritization):
        return {
            "computeBudget": {
                "microLamports": value.micro_lamports,
                "estimatedMicroLamports": value.estimated_micro_lamports,
            }
        }
    raise TypeError(f"not a prioritization type: {value!r}")


@dataclass
class DynamicSlippageReport:
    """Outcome of dynamic slippage estimation."""

    slippage_bps: int
    other_amount: int | None = None
    simulated_incurred_slippage_bps: int | None = None
    amplification_ratio: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "slippageBps": self.slippage_bps,
            "otherAmount": self.other_amount,
            "simulatedIncurredSlippageBps": self.simulated_incurred_slippage_bps,
            "amplificationRatio": (
                None
                if self.amplification_ratio is None
                else format(self.amplification_ratio, "f")
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DynamicSlippageReport:
        data = _ensure_mapping(data, "DynamicSlippageReport")
        return cls(
            slippage_bps=_parse_uint(_require(data, "slippageBps"), 16, "slippageBps"),
            other_amount=_optional(
                data, "otherAmount", lambda v: _parse_uint(v, 64, "otherAmount")
            ),
            simulated_incurred_slippage_bps=_optional(
                data,
                "simulatedIncurredSlippageBps",
                lambda v: _parse_i16(v, "simulatedIncurredSlippageBps"),
            ),
            amplification_ratio=_optional(
                data, "amplificationRatio", lambda v: _parse_decimal(v, "amplificationRatio")
            ),
        )


@dataclass
class UiSimulationError:
    """Error reported by the transaction simulation."""

    error_code: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"errorCode": self.error_code, "error": self.error}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UiSimulationError:
        data = _ensure_mapping(data, "UiSimulationError")
        return cls(
            error_code=_parse_str(_require(data, "errorCode"), "errorCode"),
            error=_parse_str(_require(data, "error"), "error"),
        )


@dataclass
class SwapResponse:
    """Serialized swap transaction returned by POST /swap."""

    swap_transaction: bytes
    last_valid_block_height: int
    prioritization_fee_lamports: int
    compute_unit_limit: int
    prioritization_type: PrioritizationType | None = None
    dynamic_slippage_report: DynamicSlippageReport | None = None
    simulation_error: UiSimulationError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "swapTransaction": b64encode(self.swap_transaction),
            "lastValidBlockHeight": self.last_valid_block_height,
            "prioritizationFeeLamports": self.prioritization_fee_lamports,
            "computeUnitLimit": self.compute_unit_limit,
            "prioritizationType": (
                None
                if self.prioritization_type is None
                else prioritization_type_to_json(self.prioritization_type)
            ),
            "dynamicSlippageReport": (
                None
                if self.dynamic_slippage_report is None
                else self.dynamic_slippage_report.to_dict()
            ),
            "simulationError": (
                None if self.simulation_error is None else self.simulation_error.to_dict()
            ),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SwapResponse:
        data = _ensure_mapping(data, "SwapResponse")
        return cls(
            swap_transaction=_parse_base64(_require(data, "swapTransaction"), "swapTransaction"),
            last_valid_block_height=_parse_uint(
                _require(data, "lastValidBlockHeight"), 64, "lastValidBlockHeight"
            ),
            prioritization_fee_lamports=_parse_uint(
                _require(data, "prioritizationFeeLamports"), 64, "prioritizationFeeLamports"
            ),
            compute_unit_limit=_parse_uint(
                _require(data, "computeUnitLimit"), 32, "computeUnitLimit"
            ),
            prioritization_type=_optional(
                data, "prioritizationType", prioritization_type_from_json
            ),
            dynamic_slippage_report=_optional(
                data, "dynamicSlippageReport", DynamicSlippageReport.from_dict
            ),
            simulation_error=_optional(data, "simulationError", UiSimulationError.from_dict),
        )


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AccountMeta:
        data = _ensure_mapping(data, "AccountMeta")
        return cls(
            pubkey=parse_field(_require(data, "pubkey"), Pubkey.from_string),
            is_signer=_parse_bool(_require(data, "isSigner"), "isSigner"),
            is_writable=_parse_bool(_require(data, "isWritable"), "isWritable"),
        )


@dataclass
class Instruction:
    """A program instruction with its accounts and raw data."""

    program_id: Pubkey
    accounts: list[AccountMeta]
    data: bytes

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Instruction:
        data = _ensure_mapping(data, "Instruction")
        return cls(
            program_id=parse_field(_require(data, "programId"), Pubkey.from_string),
            accounts=_parse_list(data, "accounts", AccountMeta.from_dict),
            data=_parse_base64(_require(data, "data"), "data"),
        )


@dataclass
class SwapInstructionsResponse:
    """Instructions returned by POST /swap-instructions."""

    token_ledger_instruction: Instruction | None
    compute_budget_instructions: list[Instruction]
    setup_instructions: list[Instruction]
    swap_instruction: Instruction
    cleanup_instruction: Instruction | None
    other_instructions: list[Instruction]
    address_lookup_table_addresses: list[Pubkey]
    prioritization_fee_lamports: int
    compute_unit_limit: int
    prioritization_type: PrioritizationType | None = None
    dynamic_slippage_report: DynamicSlippageReport | None = None
    simulation_error: UiSimulationError | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SwapInstructionsResponse:
        data = _ensure_mapping(data, "SwapInstructionsResponse")
        return cls(
            token_ledger_instruction=_optional(
                data, "tokenLedgerInstruction", Instruction.from_dict
            ),
            compute_budget_instructions=_parse_list(
                data, "computeBudgetInstructions", Instruction.from_dict
            ),
            setup_instructions=_parse_list(data, "setupInstructions", Instruction.from_dict),
            swap_instruction=Instruction.from_dict(_require(data, "swapInstruction")),
            cleanup_instruction=_optional(data, "cleanupInstruction", Instruction.from_dict),
            other_instructions=_parse_list(data, "otherInstructions", Instruction.from_dict),
            address_lookup_table_addresses=_parse_list(
                data,
                "addressLookupTableAddresses",
                lambda v: parse_field(v, Pubkey.from_string),
            ),
            prioritization_fee_lamports=_parse_uint(
                _require(data, "prioritizationFeeLamports"), 64, "prioritizationFeeLamports"
            ),
            compute_unit_limit=_parse_uint(
                _require(data, "computeUnitLimit"), 32, "computeUnitLimit"
            ),
            prioritization_type=_optional(
                data, "prioritizationType", prioritization_type_from_json
            ),
            dynamic_slippage_report=_optional(
                data, "dynamicSlippageReport", DynamicSlippageReport.from_dict
            ),
            simulation_error=_optional(data, "simulationError", UiSimulationError.from_dict),
        )