"""
Exceptions for the arbtransfer SDK.

All SDK exceptions inherit from ArbTransferError, which carries a
machine-readable code, the pipeline stage that produced it, an optional
transaction hash and a dictionary of the offending values.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "ArbTransferError",
    "ValidationError",
    "ConfigurationError",
    "InvalidAddressError",
    "AmountParseError",
    "IdentityMismatchError",
    "InvalidIdentityError",
    "WrongNetworkError",
    "RpcError",
    "SubmitError",
    "PollError",
]


class ArbTransferError(Exception):
    """
    Base exception for all arbtransfer errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "INVALID_ADDRESS").
        stage: Pipeline stage that raised the error (e.g., "build").
        tx_hash: Optional transaction hash related to the error.
        details: Dictionary with the values that violated the precondition.

    Example:
        >>> raise ArbTransferError(
        ...     "Transaction rejected",
        ...     code="SUBMIT_ERROR",
        ...     stage="submit",
        ...     details={"reason": "insufficient funds"}
        ... )
    """

    default_code = "ARBTRANSFER_ERROR"
    default_stage = "unknown"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        stage: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.stage = stage or self.default_stage
        self.tx_hash = tx_hash
        self.details = details or {}

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.tx_hash:
            parts.append(f"(tx: {self.tx_hash[:10]}...)")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"stage={self.stage!r}, "
            f"tx_hash={self.tx_hash!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "details": self.details,
        }


class ValidationError(ArbTransferError):
    """Raised when input validation fails."""

    default_code = "VALIDATION_ERROR"
    default_stage = "validate"


class ConfigurationError(ValidationError):
    """Raised when a TransferConfig holds unusable values."""

    default_code = "CONFIGURATION_ERROR"
    default_stage = "config"


class InvalidAddressError(ValidationError):
    """
    Raised when an account identifier is not 40 hex characters.

    Example:
        >>> raise InvalidAddressError("0x123", reason="expected 40 hex characters, got 3")
    """

    default_code = "INVALID_ADDRESS"

    def __init__(
        self,
        address: str,
        *,
        field: str = "address",
        reason: Optional[str] = None,
        stage: Optional[str] = None,
    ) -> None:
        message = f"Invalid {field}: {address!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(
            message,
            stage=stage,
            details={"address": address, "field": field, "reason": reason},
        )
        self.address = address
        self.field = field
        self.reason = reason


class AmountParseError(ValidationError):
    """Raised when a decimal amount is malformed or too precise for the unit."""

    default_code = "AMOUNT_PARSE_ERROR"
    default_stage = "build"

    def __init__(self, amount: str, *, reason: str, decimals: Optional[int] = None) -> None:
        super().__init__(
            f"Cannot convert amount {amount!r}: {reason}",
            details={"amount": amount, "reason": reason, "decimals": decimals},
        )
        self.amount = amount
        self.reason = reason


class IdentityMismatchError(ValidationError):
    """Raised when the signing key does not derive the declared sender."""

    default_code = "IDENTITY_MISMATCH"
    default_stage = "build"

    def __init__(self, declared: str, derived: str) -> None:
        super().__init__(
            f"Signing key address {derived} does not match sender address {declared}",
            details={"declared": declared, "derived": derived},
        )
        self.declared = declared
        self.derived = derived


class InvalidIdentityError(IdentityMismatchError):
    """Raised when private key material cannot be loaded. The key is never echoed."""

    default_code = "INVALID_IDENTITY"

    def __init__(self, reason: str = "invalid private key format (key not shown for security)") -> None:
        ValidationError.__init__(self, reason, details={"reason": reason})
        self.declared = None
        self.derived = None


class WrongNetworkError(ValidationError):
    """Raised when the connected chain id differs from the expected network."""

    default_code = "WRONG_NETWORK"
    default_stage = "build"

    def __init__(self, expected: int, actual: int, network: Optional[str] = None) -> None:
        label = f"{network} " if network else ""
        super().__init__(
            f"Not connected to {label}(expected chain id {expected}, got {actual})",
            details={"expected": expected, "actual": actual, "network": network},
        )
        self.expected = expected
        self.actual = actual


class RpcError(ArbTransferError):
    """Raised when an RPC/provider read fails."""

    default_code = "RPC_ERROR"
    default_stage = "rpc"


class SubmitError(ArbTransferError):
    """
    Raised when the node rejects a signed transaction.

    The node's reason (e.g. "insufficient funds for gas * price + value",
    "nonce too low", "max fee per gas less than block base fee") is kept
    verbatim in ``reason``.
    """

    default_code = "SUBMIT_ERROR"
    default_stage = "submit"

    def __init__(self, reason: str, *, tx_hash: Optional[str] = None) -> None:
        super().__init__(
            f"Transaction rejected: {reason}",
            tx_hash=tx_hash,
            details={"reason": reason},
        )
        self.reason = reason


class PollError(ArbTransferError):
    """
    Raised when a receipt query fails while waiting for confirmation.

    The transaction's on-chain fate is unknown, not failed.
    """

    default_code = "POLL_ERROR"
    default_stage = "poll"

    def __init__(self, tx_hash: str, reason: str, *, attempt: Optional[int] = None) -> None:
        super().__init__(
            f"Error checking receipt: {reason}",
            tx_hash=tx_hash,
            details={"reason": reason, "attempt": attempt},
        )
        self.reason = reason
        self.attempt = attempt
