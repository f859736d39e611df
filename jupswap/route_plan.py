"""Route plan steps returned with a quote."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jupswap.fields import (
    Pubkey,
    _ensure_mapping,
    _parse_str,
    _parse_uint,
    _require,
    parse_field,
    parse_u64,
)

_ZERO_PUBKEY = Pubkey(bytes(32))


@dataclass
class SwapInfo:
    """One swap performed on an AMM along the route."""

    amm_key: Pubkey = _ZERO_PUBKEY
    label: str = ""
    input_mint: Pubkey = _ZERO_PUBKEY
    output_mint: Pubkey = _ZERO_PUBKEY
    in_amount: int = 0
    out_amount: int = 0
    fee_amount: int = 0
    fee_mint: Pubkey = _ZERO_PUBKEY

    def to_dict(self) -> dict[str, Any]:
        return {
            "ammKey": str(self.amm_key),
            "label": self.label,
            "inputMint": str(self.input_mint),
            "outputMint": str(self.output_mint),
            "inAmount": str(self.in_amount),
            "outAmount": str(self.out_amount),
            "feeAmount": str(self.fee_amount),
            "feeMint": str(self.fee_mint),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SwapInfo:
        data = _ensure_mapping(data, "SwapInfo")
        return cls(
            amm_key=parse_field(_require(data, "ammKey"), Pubkey.from_string),
            label=_parse_str(_require(data, "label"), "label"),
            input_mint=parse_field(_require(data, "inputMint"), Pubkey.from_string),
            output_mint=parse_field(_require(data, "outputMint"), Pubkey.from_string),
            in_amount=parse_field(_require(data, "inAmount"), parse_u64),
            out_amount=parse_field(_require(data, "outAmount"), parse_u64),
            fee_amount=parse_field(_require(data, "feeAmount"), parse_u64),
            fee_mint=parse_field(_require(data, "feeMint"), Pubkey.from_string),
        )


@dataclass
class RoutePlanStep:
    """A swap along the route and the percentage of the input it carries."""

    swap_info: SwapInfo
    percent: int

    def to_dict(self) -> dict[str, Any]:
        return {"swapInfo": self.swap_info.to_dict(), "percent": self.percent}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RoutePlanStep:
        data = _ensure_mapping(data, "RoutePlanStep")
        return cls(
            swap_info=SwapInfo.from_dict(_require(data, "swapInfo")),
            percent=_parse_uint(_require(data, "percent"), 8, "percent"),
        )