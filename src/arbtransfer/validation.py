"""
Validation utilities for the arbtransfer SDK.

Provides:
- Account identifier validation (20-byte hex addresses)
- Exact decimal-to-minor-unit amount conversion
- Minor-unit formatting for operator output

All validation functions raise ValidationError subclasses on failure.
"""

from __future__ import annotations

import re
from typing import Union

from .constants import ADDRESS_HEX_LENGTH, ETHER_DECIMALS, MAX_SAFE_AMOUNT
from .errors import AmountParseError, InvalidAddressError
from .models import AccountId

__all__ = ["validate_address", "parse_amount", "format_units", "is_valid_address"]

_HEX_RE = re.compile(r"[0-9a-fA-F]*")
_DECIMAL_RE = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?")


def validate_address(text: Union[str, AccountId], field_name: str = "address") -> AccountId:
    """
    Validate an account identifier and parse it to its 20-byte form.

    An optional ``0x`` marker is stripped, then exactly 40 hex characters
    must remain. Case is ignored; EIP-55 checksums are not enforced.

    Args:
        text: Address text, with or without the 0x marker
        field_name: Field name for error messages

    Returns:
        AccountId holding the 20 address bytes

    Raises:
        InvalidAddressError: If the length or any character is wrong
    """
    if isinstance(text, AccountId):
        return text

    if not isinstance(text, str):
        raise InvalidAddressError(repr(text), field=field_name, reason="must be a string")

    body = text[2:] if text[:2] in ("0x", "0X") else text

    if len(body) != ADDRESS_HEX_LENGTH:
        raise InvalidAddressError(
            text,
            field=field_name,
            reason=f"expected {ADDRESS_HEX_LENGTH} hex characters, got {len(body)}",
        )

    if not _HEX_RE.fullmatch(body):
        raise InvalidAddressError(text, field=field_name, reason="contains non-hex characters")

    return AccountId(bytes.fromhex(body))


def is_valid_address(text: str) -> bool:
    try:
        validate_address(text)
    except InvalidAddressError:
        return False
    return True


def parse_amount(amount: str, decimals: int = ETHER_DECIMALS) -> int:
    """
    Convert a human-readable decimal amount to an exact minor-unit integer.

    "0.0001" with 18 decimals becomes 100_000_000_000_000. Trailing zeros
    beyond the unit precision are accepted since they lose nothing; any
    other digit past the precision is rejected rather than rounded.

    Args:
        amount: Decimal string, e.g. "1.5" or "0.001"
        decimals: Fractional digits of the unit (18 for ETH)

    Returns:
        Amount in minor units

    Raises:
        AmountParseError: On malformed numerals, negative values,
            over-precise fractions or amounts above MAX_SAFE_AMOUNT
    """
    if not isinstance(amount, str):
        raise AmountParseError(repr(amount), reason="amount must be a decimal string", decimals=decimals)

    text = amount.strip()
    match = _DECIMAL_RE.fullmatch(text)
    if not match or not (match.group("whole") or match.group("frac")):
        raise AmountParseError(amount, reason="not a decimal number", decimals=decimals)

    whole = match.group("whole") or "0"
    frac = (match.group("frac") or "").rstrip("0")

    if len(frac) > decimals:
        raise AmountParseError(
            amount,
            reason=f"more than {decimals} fractional digits",
            decimals=decimals,
        )

    value = int(whole) * 10**decimals + int(frac.ljust(decimals, "0") or "0")
    if value > MAX_SAFE_AMOUNT:
        raise AmountParseError(amount, reason="exceeds maximum safe amount", decimals=decimals)
    return value


def format_units(value: int, decimals: int = ETHER_DECIMALS) -> str:
    """
    Render a minor-unit integer as a plain decimal string.

    Example:
        >>> format_units(2_100_000_000_000_000)
        '0.0021'
    """
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10**decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole}"
    frac_text = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_text}"
