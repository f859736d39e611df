"""String-encoded wire fields: base58 public keys and integers carried as strings."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import re
from typing import Any, TypeVar

T = TypeVar("T")

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {ch: i for i, ch in enumerate(_ALPHABET)}
_PUBKEY_BYTES = 32
_MAX_BASE58_LEN = 44
_U64_MAX = (1 << 64) - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


class FieldParseError(ValueError):
    """Raised when a field of a JSON document cannot be decoded."""


def b58encode(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    raw = bytes(data)
    number = int.from_bytes(raw, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    leading = len(raw) - len(raw.lstrip(b"\0"))
    return "1" * leading + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode a base58 string; raise ValueError on characters outside the alphabet."""
    number = 0
    for ch in text:
        digit = _INDEX.get(ch)
        if digit is None:
            raise ValueError(f"invalid base58 character {ch!r}")
        number = number * 58 + digit
    leading = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\0" * leading + body


@dataclass(frozen=True, repr=False)
class Pubkey:
    """A 32-byte account address, written as base58 text."""

    data: bytes

    def __init__(self, data: bytes) -> None:
        raw = bytes(data)
        if len(raw) != _PUBKEY_BYTES:
            raise ValueError(f"public key must be {_PUBKEY_BYTES} bytes, got {len(raw)}")
        object.__setattr__(self, "data", raw)

    @classmethod
    def from_string(cls, value: str) -> Pubkey:
        """Parse a base58 address."""
        if len(value) > _MAX_BASE58_LEN:
            raise ValueError("String is the wrong size")
        try:
            raw = b58decode(value)
        except ValueError:
            raise ValueError("Invalid Base58 string") from None
        if len(raw) != _PUBKEY_BYTES:
            raise ValueError("String is the wrong size")
        return cls(raw)

    def __str__(self) -> str:
        return b58encode(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"Pubkey({str(self)!r})"


def field_as_string(value: Any) -> str:
    """Render a value in its string wire form."""
    return str(value)


def parse_field(value: Any, parser: Callable[[str], T]) -> T:
    """Parse a string wire field with ``parser``."""
    if not isinstance(value, str):
        raise FieldParseError(f"invalid type: expected a string, got {value!r}")
    try:
        return parser(value)
    except ValueError as exc:
        raise FieldParseError(f"Parse error: {exc}") from exc


def option_field_as_string(value: Any) -> str | None:
    """Render an optional value as a string, keeping ``None``."""
    return None if value is None else str(value)


def parse_optional_field(value: Any, parser: Callable[[str], T]) -> T | None:
    """Parse an optional string wire field; ``None`` stays ``None``."""
    if value is None:
        return None
    return parse_field(value, parser)


def parse_u64(value: str) -> int:
    """Parse an unsigned 64-bit decimal integer."""
    if not _UNSIGNED.fullmatch(value):
        raise ValueError(f"invalid digit found in string {value!r}")
    number = int(value)
    if number > _U64_MAX:
        raise ValueError(f"number too large to fit in target type: {value!r}")
    return number


def _ensure_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise FieldParseError(f"invalid type: expected an object for {what}, got {data!r}")
    return data


def _require(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise FieldParseError(f"missing field `{key}`") from None


def _parse_uint(value: Any, bits: int, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < (1 << bits):
        raise FieldParseError(f"invalid value for `{key}`: expected u{bits}, got {value!r}")
    return value


def _parse_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise FieldParseError(f"invalid value for `{key}`: expected a boolean, got {value!r}")
    return value


def _parse_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise FieldParseError(f"invalid value for `{key}`: expected a string, got {value!r}")
    return value