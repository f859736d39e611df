"""Quote requests and responses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from jupswap.fields import (
    FieldParseError,
    Pubkey,
    _ensure_mapping,
    _parse_bool,
    _parse_uint,
    _require,
    parse_field,
    parse_u64,
)
from jupswap.route_plan import RoutePlanStep

_ZERO_PUBKEY = Pubkey(bytes(32))


class SwapMode(str, Enum):
    """Whether the input or the output amount is exact."""

    EXACT_IN = "ExactIn"
    EXACT_OUT = "ExactOut"

    @classmethod
    def from_str(cls, value: str) -> SwapMode:
        for mode in cls:
            if mode.value == value:
                return mode
        raise ValueError(f"{value} is not a valid SwapMode")


@dataclass
class ComputeUnitScore:
    """Compute unit score settings used to pick a route."""

    max_penalty_bps: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"max_penalty_bps": self.max_penalty_bps}


def _check_uint(name: str, value: int | None, bits: int | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    if bits is not None and value >= 1 << bits:
        raise ValueError(f"{name} must fit in {bits} bits, got {value!r}")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass
class QuoteRequest:
    """Parameters of a GET /quote call."""

    input_mint: Pubkey = _ZERO_PUBKEY
    output_mint: Pubkey = _ZERO_PUBKEY
    amount: int = 0
    swap_mode: SwapMode | None = None
    slippage_bps: int = 0
    auto_slippage: bool | None = None
    max_auto_slippage_bps: int | None = None
    compute_auto_slippage: bool = False
    auto_slippage_collision_usd_value: int | None = None
    minimize_slippage: bool | None = None
    platform_fee_bps: int | None = None
    dexes: str | None = None
    excluded_dexes: str | None = None
    only_direct_routes: bool | None = None
    as_legacy_transaction: bool | None = None
    restrict_intermediate_tokens: bool | None = None
    max_accounts: int | None = None
    quote_type: str | None = None
    quote_args: dict[str, str] | None = None
    prefer_liquid_dexes: bool | None = None
    compute_unit_score: ComputeUnitScore | None = None
    routing_constraints: str | None = None
    token_category_based_intermediate_tokens: bool | None = None

    def __post_init__(self) -> None:
        _check_uint("amount", self.amount, 64)
        _check_uint("slippage_bps", self.slippage_bps, 16)
        _check_uint("max_auto_slippage_bps", self.max_auto_slippage_bps, 16)
        _check_uint(
            "auto_slippage_collision_usd_value", self.auto_slippage_collision_usd_value, 32
        )
        _check_uint("platform_fee_bps", self.platform_fee_bps, 8)
        _check_uint("max_accounts", self.max_accounts, None)

    def to_query_params(self) -> dict[str, str]:
        """Query parameters sent with the quote; unset options are left out."""
        params: dict[str, Any] = {
            "inputMint": str(self.input_mint),
            "outputMint": str(self.output_mint),
            "amount": str(self.amount),
            "swapMode": self.swap_mode,
            "slippageBps": self.slippage_bps,
            "autoSlippage": self.auto_slippage,
            "maxAutoSlippageBps": self.max_auto_slippage_bps,
            "computeAutoSlippage": self.compute_auto_slippage,
            "autoSlippageCollisionUsdValue": self.auto_slippage_collision_usd_value,
            "minimizeSlippage": self.minimize_slippage,
            "platformFeeBps": self.platform_fee_bps,
            "dexes": self.dexes,
            "excludedDexes": self.excluded_dexes,
            "onlyDirectRoutes": self.only_direct_routes,
            "asLegacyTransaction": self.as_legacy_transaction,
            "restrictIntermediateTokens": self.restrict_intermediate_tokens,
            "maxAccounts": self.max_accounts,
            "quoteType": self.quote_type,
            "preferLiquidDexes": self.prefer_liquid_dexes,
        }
        return {key: _query_value(value) for key, value in params.items() if value is not None}

    def extra_query_params(self) -> dict[str, str]:
        """Quote-type specific arguments sent alongside the regular parameters."""
        return dict(self.quote_args or {})


@dataclass
class PlatformFee:
    """Platform fee charged on a quote."""

    amount: int
    fee_bps: int

    def to_dict(self) -> dict[str, Any]:
        return {"amount": str(self.amount), "feeBps": self.fee_bps}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlatformFee:
        data = _ensure_mapping(data, "PlatformFee")
        return cls(
            amount=parse_field(_require(data, "amount"), parse_u64),
            fee_bps=_parse_uint(_require(data, "feeBps"), 8, "feeBps"),
        )


def _parse_decimal(value: Any, key: str) -> Decimal:
    if isinstance(value, bool):
        raise FieldParseError(f"invalid value for `{key}`: expected a decimal, got {value!r}")
    try:
        if isinstance(value, str):
            number = Decimal(value)
        elif isinstance(value, int):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(repr(value))
        else:
            raise FieldParseError(
                f"invalid value for `{key}`: expected a decimal, got {value!r}"
            )
    except InvalidOperation:
        raise FieldParseError(f"invalid value for `{key}`: {value!r}") from None
    if not number.is_finite():
        raise FieldParseError(f"invalid value for `{key}`: {value!r}")
    return number


def _parse_swap_mode(value: Any) -> SwapMode:
    if not isinstance(value, str):
        raise FieldParseError(f"invalid value for `swapMode`: {value!r}")
    try:
        return SwapMode.from_str(value)
    except ValueError as exc:
        raise FieldParseError(str(exc)) from exc


def _parse_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldParseError(f"invalid value for `{key}`: expected a number, got {value!r}")
    return float(value)


@dataclass
class QuoteResponse:
    """Quote returned by GET /quote and passed back on swap requests."""

    input_mint: Pubkey
    in_amount: int
    output_mint: Pubkey
    out_amount: int
    other_amount_threshold: int
    swap_mode: SwapMode
    slippage_bps: int
    price_impact_pct: Decimal
    route_plan: list[RoutePlanStep] = field(default_factory=list)
    computed_auto_slippage: int | None = None
    uses_quote_minimizing_slippage: bool | None = None
    platform_fee: PlatformFee | None = None
    context_slot: int = 0
    time_taken: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "inputMint": str(self.input_mint),
            "inAmount": str(self.in_amount),
            "outputMint": str(self.output_mint),
            "outAmount": str(self.out_amount),
            "otherAmountThreshold": str(self.other_amount_threshold),
            "swapMode": self.swap_mode.value,
            "slippageBps": self.slippage_bps,
        }
        if self.computed_auto_slippage is not None:
            data["computedAutoSlippage"] = self.computed_auto_slippage
        if self.uses_quote_minimizing_slippage is not None:
            data["usesQuoteMinimizingSlippage"] = self.uses_quote_minimizing_slippage
        data["platformFee"] = None if self.platform_fee is None else self.platform_fee.to_dict()
        data["priceImpactPct"] = format(self.price_impact_pct, "f")
        data["routePlan"] = [step.to_dict() for step in self.route_plan]
        data["contextSlot"] = self.context_slot
        data["timeTaken"] = self.time_taken
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QuoteResponse:
        data = _ensure_mapping(data, "QuoteResponse")
        route_plan = _require(data, "routePlan")
        if not isinstance(route_plan, list):
            raise FieldParseError(f"invalid value for `routePlan`: {route_plan!r}")
        computed = data.get("computedAutoSlippage")
        minimizing = data.get("usesQuoteMinimizingSlippage")
        platform_fee = data.get("platformFee")
        return cls(
            input_mint=parse_field(_require(data, "inputMint"), Pubkey.from_string),
            in_amount=parse_field(_require(data, "inAmount"), parse_u64),
            output_mint=parse_field(_require(data, "outputMint"), Pubkey.from_string),
            out_amount=parse_field(_require(data, "outAmount"), parse_u64),
            other_amount_threshold=parse_field(
                _require(data, "otherAmountThreshold"), parse_u64
            ),
            swap_mode=_parse_swap_mode(_require(data, "swapMode")),
            slippage_bps=_parse_uint(_require(data, "slippageBps"), 16, "slippageBps"),
            computed_auto_slippage=(
                None if computed is None else _parse_uint(computed, 16, "computedAutoSlippage")
            ),
            uses_quote_minimizing_slippage=(
                None
                if minimizing is None
                else _parse_bool(minimizing, "usesQuoteMinimizingSlippage")
            ),
            platform_fee=None if platform_fee is None else PlatformFee.from_dict(platform_fee),
            price_impact_pct=_parse_decimal(_require(data, "priceImpactPct"), "priceImpactPct"),
            route_plan=[RoutePlanStep.from_dict(step) for step in route_plan],
            context_slot=_parse_uint(data.get("contextSlot", 0), 64, "contextSlot"),
            time_taken=_parse_float(data.get("timeTaken", 0.0), "timeTaken"),
        )