"""Settings that shape the swap transaction built by the API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar, Union

from jupswap.fields import (
    FieldParseError,
    Pubkey,
    _ensure_mapping,
    _parse_bool,
    _parse_str,
    _parse_uint,
    _require,
    option_field_as_string,
    parse_optional_field,
)

T = TypeVar("T")

_AUTO = "auto"
_DISABLED = "disabled"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class ComputeUnitPriceMicroLamports:
    """A fixed compute unit price in micro-lamports, or ``None`` for automatic pricing."""

    micro_lamports: int | None = None

    def __post_init__(self) -> None:
        if self.micro_lamports is not None:
            _parse_uint(self.micro_lamports, 64, "computeUnitPriceMicroLamports")

    @classmethod
    def auto(cls) -> ComputeUnitPriceMicroLamports:
        return cls(None)

    @property
    def is_auto(self) -> bool:
        return self.micro_lamports is None

    def to_json(self) -> int | str:
        return _AUTO if self.micro_lamports is None else self.micro_lamports

    @classmethod
    def from_json(cls, value: Any) -> ComputeUnitPriceMicroLamports:
        if _is_int(value) and 0 <= value < 1 << 64:
            return cls(value)
        if value == _AUTO and isinstance(value, str):
            return cls(None)
        raise FieldParseError(
            "data did not match any variant of untagged enum ComputeUnitPriceMicroLamports"
        )


class PriorityLevel(str, Enum):
    """How aggressively the priority fee is set."""

    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "veryHigh"


@dataclass(frozen=True)
class AutoMultiplier:
    """Automatic priority fee scaled by a multiplier."""

    multiplier: int

    def __post_init__(self) -> None:
        _parse_uint(self.multiplier, 32, "autoMultiplier")


@dataclass(frozen=True)
class JitoTipLamports:
    """A tip of the given lamports paid to Jito."""

    lamports: int

    def __post_init__(self) -> None:
        _parse_uint(self.lamports, 64, "jitoTipLamports")


@dataclass(frozen=True)
class PriorityLevelWithMaxLamports:
    """A priority level capped at a maximum number of lamports."""

    priority_level: PriorityLevel
    max_lamports: int
    global_: bool = False

    def __post_init__(self) -> None:
        _parse_uint(self.max_lamports, 64, "maxLamports")


@dataclass(frozen=True)
class AutoFee:
    """Let the API pick the prioritization fee."""


@dataclass(frozen=True)
class Lamports:
    """A fixed prioritization fee in lamports."""

    lamports: int

    def __post_init__(self) -> None:
        _parse_uint(self.lamports, 64, "prioritizationFeeLamports")


@dataclass(frozen=True)
class DisabledFee:
    """No prioritization fee."""


PrioritizationFeeLamports = Union[
    AutoMultiplier, JitoTipLamports, PriorityLevelWithMaxLamports, AutoFee, Lamports, DisabledFee
]


def prioritization_fee_to_json(fee: PrioritizationFeeLamports) -> Any:
    """Render a prioritization fee in its wire form."""
    if isinstance(fee, AutoMultiplier):
        return {"autoMultiplier": fee.multiplier}
    if isinstance(fee, JitoTipLamports):
        return {"jitoTipLamports": fee.lamports}
    if isinstance(fee, AutoFee):
        return _AUTO
    if isinstance(fee, Lamports):
        return fee.lamports
    if isinstance(fee, DisabledFee):
        return _DISABLED
    if isinstance(fee, PriorityLevelWithMaxLamports):
        return {
            "priorityLevelWithMaxLamports": {
                "priorityLevel": fee.priority_level.value,
                "maxLamports": fee.max_lamports,
                "global": fee.global_,
            }
        }
    raise TypeError(f"not a prioritization fee: {fee!r}")


def _parse_priority_level(value: Any) -> PriorityLevel:
    if isinstance(value, str):
        for level in PriorityLevel:
            if level.value == value:
                return level
    raise FieldParseError(f"unknown variant {value!r} for `priorityLevel`")


def prioritization_fee_from_json(value: Any) -> PrioritizationFeeLamports:
    """Parse a prioritization fee from its wire form."""
    if isinstance(value, Mapping) and len(value) == 1:
        ((key, inner),) = value.items()
        if key == "autoMultiplier":
            return AutoMultiplier(_parse_uint(inner, 32, key))
        if key == "jitoTipLamports":
            return JitoTipLamports(_parse_uint(inner, 64, key))
        if key == "priorityLevelWithMaxLamports":
            inner = _ensure_mapping(inner, key)
            return PriorityLevelWithMaxLamports(
                priority_level=_parse_priority_level(_require(inner, "priorityLevel")),
                max_lamports=_parse_uint(_require(inner, "maxLamports"), 64, "maxLamports"),
                global_=_parse_bool(inner.get("global", False), "global"),
            )
    if isinstance(value, str):
        if value == _AUTO:
            return AutoFee()
        if value == _DISABLED:
            return DisabledFee()
    if _is_int(value) and 0 <= value < 1 << 64:
        return Lamports(value)
    raise FieldParseError(
        f"data did not match any variant of enum PrioritizationFeeLamports: {value!r}"
    )


def _optional(data: Mapping[str, Any], key: str, parse: Callable[[Any], T]) -> T | None:
    value = data.get(key)
    return None if value is None else parse(value)


@dataclass
class DynamicSlippageSettings:
    """Bounds for dynamic slippage, in basis points."""

    min_bps: int | None = None
    max_bps: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"minBps": self.min_bps, "maxBps": self.max_bps}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DynamicSlippageSettings:
        data = _ensure_mapping(data, "DynamicSlippageSettings")
        return cls(
            min_bps=_optional(data, "minBps", lambda v: _parse_uint(v, 16, "minBps")),
            max_bps=_optional(data, "maxBps", lambda v: _parse_uint(v, 16, "maxBps")),
        )


@dataclass
class KeyedUiAccount:
    """An account supplied by the caller, with its fields kept as given."""

    pubkey: str
    ui_account: dict[str, Any]
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"pubkey": self.pubkey}
        data.update(self.ui_account)
        data["params"] = self.params
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> KeyedUiAccount:
        data = _ensure_mapping(data, "KeyedUiAccount")
        pubkey = _parse_str(_require(data, "pubkey"), "pubkey")
        account = {k: v for k, v in data.items() if k not in ("pubkey", "params")}
        return cls(pubkey=pubkey, ui_account=account, params=data.get("params"))


def _parse_keyed_accounts(value: Any) -> list[KeyedUiAccount]:
    if not isinstance(value, list):
        raise FieldParseError(f"invalid value for `keyedUiAccounts`: {value!r}")
    return [KeyedUiAccount.from_dict(item) for item in value]


@dataclass
class TransactionConfig:
    """Options controlling how the swap transaction is assembled."""

    wrap_and_unwrap_sol: bool = True
    allow_optimized_wrapped_sol_token_account: bool = False
    fee_account: Pubkey | None = None
    destination_token_account: Pubkey | None = None
    tracking_account: Pubkey | None = None
    compute_unit_price_micro_lamports: ComputeUnitPriceMicroLamports | None = None
    prioritization_fee_lamports: PrioritizationFeeLamports | None = None
    dynamic_compute_unit_limit: bool = False
    as_legacy_transaction: bool = False
    use_shared_accounts: bool | None = None
    use_token_ledger: bool = False
    skip_user_accounts_rpc_calls: bool = False
    keyed_ui_accounts: list[KeyedUiAccount] | None = None
    program_authority_id: int | None = None
    dynamic_slippage: DynamicSlippageSettings | None = None
    blockhash_slots_to_expiry: int | None = None
    correct_last_valid_block_height: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "wrapAndUnwrapSol": self.wrap_and_unwrap_sol,
            "allowOptimizedWrappedSolTokenAccount": self.allow_optimized_wrapped_sol_token_account,
            "feeAccount": option_field_as_string(self.fee_account),
            "destinationTokenAccount": option_field_as_string(self.destination_token_account),
            "trackingAccount": option_field_as_string(self.tracking_account),
            "computeUnitPriceMicroLamports": (
                None
                if self.compute_unit_price_micro_lamports is None
                else self.compute_unit_price_micro_lamports.to_json()
            ),
            "prioritizationFeeLamports": (
                None
                if self.prioritization_fee_lamports is None
                else prioritization_fee_to_json(self.prioritization_fee_lamports)
            ),
            "dynamicComputeUnitLimit": self.dynamic_compute_unit_limit,
            "asLegacyTransaction": self.as_legacy_transaction,
            "useSharedAccounts": self.use_shared_accounts,
            "useTokenLedger": self.use_token_ledger,
            "skipUserAccountsRpcCalls": self.skip_user_accounts_rpc_calls,
            "keyedUiAccounts": (
                None
                if self.keyed_ui_accounts is None
                else [account.to_dict() for account in self.keyed_ui_accounts]
            ),
            "programAuthorityId": self.program_authority_id,
            "dynamicSlippage": (
                None if self.dynamic_slippage is None else self.dynamic_slippage.to_dict()
            ),
            "blockhashSlotsToExpiry": self.blockhash_slots_to_expiry,
            "correctLastValidBlockHeight": self.correct_last_valid_block_height,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TransactionConfig:
        """Parse a config; absent fields take their defaults and unknown keys are ignored."""
        data = _ensure_mapping(data, "TransactionConfig")
        defaults = cls()

        def flag(key: str, default: bool) -> bool:
            return _parse_bool(data[key], key) if key in data else default

        def pubkey(key: str) -> Pubkey | None:
            return parse_optional_field(data.get(key), Pubkey.from_string)

        return cls(
            wrap_and_unwrap_sol=flag("wrapAndUnwrapSol", defaults.wrap_and_unwrap_sol),
            allow_optimized_wrapped_sol_token_account=flag(
                "allowOptimizedWrappedSolTokenAccount",
                defaults.allow_optimized_wrapped_sol_token_account,
            ),
            fee_account=pubkey("feeAccount"),
            destination_token_account=pubkey("destinationTokenAccount"),
            tracking_account=pubkey("trackingAccount"),
            compute_unit_price_micro_lamports=_optional(
                data, "computeUnitPriceMicroLamports", ComputeUnitPriceMicroLamports.from_json
            ),
            prioritization_fee_lamports=_optional(
                data, "prioritizationFeeLamports", prioritization_fee_from_json
            ),
            dynamic_compute_unit_limit=flag(
                "dynamicComputeUnitLimit", defaults.dynamic_compute_unit_limit
            ),
            as_legacy_transaction=flag("asLegacyTransaction", defaults.as_legacy_transaction),
            use_shared_accounts=_optional(
                data, "useSharedAccounts", lambda v: _parse_bool(v, "useSharedAccounts")
            ),
            use_token_ledger=flag("useTokenLedger", defaults.use_token_ledger),
            skip_user_accounts_rpc_calls=flag(
                "skipUserAccountsRpcCalls", defaults.skip_user_accounts_rpc_calls
            ),
            keyed_ui_accounts=_optional(data, "keyedUiAccounts", _parse_keyed_accounts),
            program_authority_id=_optional(
                data, "programAuthorityId", lambda v: _parse_uint(v, 8, "programAuthorityId")
            ),
            dynamic_slippage=_optional(
                data, "dynamicSlippage", DynamicSlippageSettings.from_dict
            ),
            blockhash_slots_to_expiry=_optional(
                data,
                "blockhashSlotsToExpiry",
                lambda v: _parse_uint(v, 8, "blockhashSlotsToExpiry"),
            ),
            correct_last_valid_block_height=flag(
                "correctLastValidBlockHeight", defaults.correct_last_valid_block_height
            ),
        )