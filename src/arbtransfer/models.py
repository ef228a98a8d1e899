from dataclasses import dataclass
from enum import Enum
from typing import Optional

from web3 import Web3

from .constants import ADDRESS_LENGTH
from .errors import ArbTransferError

__all__ = [
    "AccountId",
    "BlockInfo",
    "FeeParameters",
    "TransactionDraft",
    "SignedTransaction",
    "Receipt",
    "PollState",
    "PollResult",
    "OutcomeKind",
    "TransferOutcome",
]


@dataclass(frozen=True)
class AccountId:
    """A 20-byte account identifier.

    Two AccountIds are equal when their bytes are equal, whatever case or
    prefix the source text used.
    """

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ADDRESS_LENGTH:
            raise ValueError(f"AccountId must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}")

    @property
    def hex(self) -> str:
        return "0x" + self.raw.hex()

    @property
    def checksum(self) -> str:
        return Web3.to_checksum_address(self.hex)

    def __str__(self) -> str:
        return self.checksum


@dataclass(frozen=True)
class BlockInfo:
    """Latest-block fields the pipeline reads. ``base_fee`` is None when the node omits it."""

    number: int
    hash: str
    timestamp: int
    base_fee: Optional[int] = None


@dataclass(frozen=True)
class FeeParameters:
    """Point-in-time fee budget for one transfer, all values in wei.

    Attributes:
        base_fee: Observed (or fallback) base fee per gas
        priority_fee: Tip offered to the block producer per gas
        effective_gas_price: Gas price the transaction offers
        gas_limit: Maximum gas the transfer may consume
    """

    base_fee: int
    priority_fee: int
    effective_gas_price: int
    gas_limit: int

    def __post_init__(self) -> None:
        for name in ("base_fee", "priority_fee", "effective_gas_price", "gas_limit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.effective_gas_price < self.base_fee:
            raise ValueError(
                f"effective_gas_price ({self.effective_gas_price}) is below base_fee ({self.base_fee})"
            )

    @property
    def max_cost(self) -> int:
        return self.effective_gas_price * self.gas_limit


@dataclass(frozen=True)
class TransactionDraft:
    sender: AccountId
    to: AccountId
    value: int
    gas_limit: int
    gas_price: int
    nonce: int
    chain_id: int

    def to_tx_params(self) -> dict:
        return {
            "from": self.sender.checksum,
            "to": self.to.checksum,
            "value": self.value,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class SignedTransaction:
    """Signed, network-ready payload. Only valid on ``chain_id``."""

    raw: bytes
    tx_hash: str
    chain_id: int
    fees: Optional[FeeParameters] = None

    def __repr__(self) -> str:
        return f"SignedTransaction(tx_hash={self.tx_hash!r}, chain_id={self.chain_id})"


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    block_number: int
    gas_used: int
    status: bool


class PollState(str, Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    POLL_ERROR = "poll_error"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_POLL_STATES


_TERMINAL_POLL_STATES = frozenset(
    {PollState.CONFIRMED, PollState.FAILED, PollState.TIMED_OUT, PollState.POLL_ERROR}
)


@dataclass(frozen=True)
class PollResult:
    """Snapshot of the confirmation poller after a tick.

    Attributes:
        tx_hash: Transaction identifier being watched
        state: Current poll state
        attempts: Receipt queries issued so far
        receipt: Receipt for CONFIRMED / FAILED, None otherwise
        error: The PollError for POLL_ERROR, None otherwise
    """

    tx_hash: str
    state: PollState
    attempts: int
    receipt: Optional[Receipt] = None
    error: Optional[ArbTransferError] = None

    @property
    def block_number(self) -> Optional[int]:
        return self.receipt.block_number if self.receipt else None

    @property
    def gas_used(self) -> Optional[int]:
        return self.receipt.gas_used if self.receipt else None


class OutcomeKind(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    POLL_ERROR = "poll_error"
    INVALID_ADDRESS = "invalid_address"
    IDENTITY_MISMATCH = "identity_mismatch"
    WRONG_NETWORK = "wrong_network"
    AMOUNT_PARSE_ERROR = "amount_parse_error"
    SUBMIT_ERROR = "submit_error"
    RPC_ERROR = "rpc_error"


@dataclass(frozen=True)
class TransferOutcome:
    """Closed result of TransferClient.transfer().

    Callers branch on ``kind``. ``tx_hash`` is set once a transaction has been
    signed and sent, so a TIMED_OUT, POLL_ERROR or rejected transfer can
    still be looked up later.
    """

    kind: OutcomeKind
    stage: str
    tx_hash: Optional[str] = None
    fees: Optional[FeeParameters] = None
    receipt: Optional[Receipt] = None
    error: Optional[ArbTransferError] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.CONFIRMED

    @property
    def submitted(self) -> bool:
        """True once the node accepted the transaction."""
        return self.tx_hash is not None and self.kind != OutcomeKind.SUBMIT_ERROR
