"""Native ETH transfer client for Arbitrum.

This module provides the TransferClient class, which runs the full
transfer lifecycle against a single chain:

- Address validation
- Fee estimation from the latest base fee
- Building and signing (chain id and signer checked first)
- Broadcast
- Bounded confirmation polling

Example:
    >>> from arbtransfer import TransferClient, TransferConfig
    >>> client = TransferClient(TransferConfig(private_key="0x..."))
    >>> outcome = client.transfer(
    ...     sender="0xd78677EFed3b87f8f421E68dA3F984ad8Ef76439",
    ...     to="0x7292dD72151DaCFBbE76305db1C8Ab1928E922E4",
    ...     amount="0.0001",
    ... )
    >>> outcome.kind
    <OutcomeKind.CONFIRMED: 'confirmed'>
"""
import time
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Type, Union

from web3 import Web3

from .broadcaster import Broadcaster
from .builder import Identity, TransactionBuilder
from .chain import ChainClient, Web3ChainClient
from .config import TransferConfig
from .constants import BASIC_TRANSFER_GAS_LIMIT, ETHER_DECIMALS
from .errors import (
    AmountParseError,
    ArbTransferError,
    IdentityMismatchError,
    InvalidAddressError,
    InvalidIdentityError,
    RpcError,
    SubmitError,
    WrongNetworkError,
)
from .fees import FeeEstimator
from .logging import get_logger
from .models import AccountId, FeeParameters, OutcomeKind, PollResult, PollState, SignedTransaction, TransferOutcome
from .poller import ConfirmationPoller, PollPolicy, TickCallback
from .validation import format_units, validate_address

__all__ = ["TransferClient"]

_logger = get_logger(__name__)

_KIND_BY_ERROR: Tuple[Tuple[Type[ArbTransferError], OutcomeKind], ...] = (
    (InvalidAddressError, OutcomeKind.INVALID_ADDRESS),
    (IdentityMismatchError, OutcomeKind.IDENTITY_MISMATCH),
    (WrongNetworkError, OutcomeKind.WRONG_NETWORK),
    (AmountParseError, OutcomeKind.AMOUNT_PARSE_ERROR),
    (RpcError, OutcomeKind.RPC_ERROR),
)

_KIND_BY_POLL_STATE = {
    PollState.CONFIRMED: OutcomeKind.CONFIRMED,
    PollState.FAILED: OutcomeKind.FAILED,
    PollState.TIMED_OUT: OutcomeKind.TIMED_OUT,
    PollState.POLL_ERROR: OutcomeKind.POLL_ERROR,
}


class TransferClient:
    """Transfer pipeline bound to one network, built from an explicit TransferConfig."""

    def __init__(
        self,
        config: Optional[TransferConfig] = None,
        chain: Optional[ChainClient] = None,
        web3: Optional[Web3] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or TransferConfig()
        self.network = self.config.network_config
        self.chain: ChainClient = chain or Web3ChainClient(
            self.network.rpc_url, web3=web3, timeout=self.config.request_timeout
        )
        self._sleep = sleep

        self.fees = FeeEstimator.from_config(self.config, self.chain)
        self.builder = TransactionBuilder(
            self.chain,
            self.fees,
            expected_chain_id=self.config.expected_chain_id,
            network_name=self.network.name.value,
        )
        self.broadcaster = Broadcaster(self.chain)
        self.poller = ConfirmationPoller(
            self.chain,
            PollPolicy(interval=self.config.poll_interval, budget=self.config.poll_budget),
            sleep=sleep,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def transfer(
        self,
        sender: Union[str, AccountId],
        to: Union[str, AccountId],
        amount: str,
        identity: Optional[Identity] = None,
        on_tick: Optional[TickCallback] = None,
    ) -> TransferOutcome:
        """Run validate -> estimate -> build/sign -> submit -> poll.

        Every precondition failure stops the pipeline before anything is
        broadcast. No stage is retried.

        Args:
            sender: Declared sender address
            to: Receiver address
            amount: Amount in ETH as a decimal string
            identity: Private key or LocalAccount; defaults to ``config.private_key``
            on_tick: Called with each PollResult while waiting

        Returns:
            TransferOutcome; branch on ``outcome.kind``
        """
        try:
            sender_id = validate_address(sender, "sender")
            to_id = validate_address(to, "receiver")
        except InvalidAddressError as e:
            return self._failed_outcome(e, "validate")

        signer = identity if identity is not None else self.config.private_key
        try:
            if signer is None:
                raise InvalidIdentityError("no signing key configured (set PRIVATE_KEY)")
            signed = self.builder.build_and_sign(sender_id, to_id, amount, signer)
        except (InvalidAddressError, IdentityMismatchError, WrongNetworkError, AmountParseError, RpcError) as e:
            return self._failed_outcome(e, "build")

        if self.config.pre_broadcast_delay > 0:
            self._sleep(self.config.pre_broadcast_delay)

        try:
            tx_hash = self.broadcaster.submit(signed)
        except SubmitError as e:
            return TransferOutcome(
                OutcomeKind.SUBMIT_ERROR, "submit", tx_hash=signed.tx_hash, fees=signed.fees, error=e
            )

        result = self.poller.wait(tx_hash, on_tick=on_tick)
        return TransferOutcome(
            kind=_KIND_BY_POLL_STATE[result.state],
            stage="poll",
            tx_hash=tx_hash,
            fees=signed.fees,
            receipt=result.receipt,
            error=result.error,
            attempts=result.attempts,
        )

    def build_and_sign(
        self, sender: Union[str, AccountId], to: Union[str, AccountId], amount: str, identity: Optional[Identity] = None
    ) -> SignedTransaction:
        signer = identity if identity is not None else self.config.private_key
        if signer is None:
            raise InvalidIdentityError("no signing key configured (set PRIVATE_KEY)")
        return self.builder.build_and_sign(sender, to, amount, signer)

    def submit(self, signed: SignedTransaction) -> str:
        return self.broadcaster.submit(signed)

    def wait_for_confirmation(self, tx_hash: str, on_tick: Optional[TickCallback] = None) -> PollResult:
        return self.poller.wait(tx_hash, on_tick=on_tick)

    # ------------------------------------------------------------------
    # Fees
    # ------------------------------------------------------------------
    def estimate_fees(self) -> FeeParameters:
        return self.fees.estimate_latest()

    def estimated_fee(self, gas_limit: int = BASIC_TRANSFER_GAS_LIMIT) -> Tuple[int, str]:
        return self.fees.estimated_fee(gas_limit)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_balance(self, address: Union[str, AccountId]) -> int:
        return self.chain.get_balance(validate_address(address))

    def format_balance(self, address: Union[str, AccountId]) -> str:
        """Balance of ``address`` in ETH, e.g. "0.0421"."""
        return format_units(self.get_balance(address), ETHER_DECIMALS)

    def get_chain_id(self) -> int:
        return self.chain.get_chain_id()

    def network_info(self) -> Dict[str, Any]:
        """Connectivity summary: chain id, whether it matches the configured network, latest block."""
        chain_id = self.chain.get_chain_id()
        block = self.chain.get_latest_block()
        return {
            "network": self.network.name.value,
            "rpc_url": self.network.rpc_url,
            "chain_id": chain_id,
            "expected_chain_id": self.config.expected_chain_id,
            "chain_id_matches": chain_id == self.config.expected_chain_id,
            "block_number": block.number,
            "block_hash": block.hash,
            "timestamp": block.timestamp,
            "base_fee": block.base_fee,
        }

    def call_read_only(
        self,
        contract: Union[str, AccountId],
        method: str,
        args: Sequence[Any] = (),
        abi: Optional[list] = None,
    ) -> Any:
        return self.chain.call_read_only_method(validate_address(contract, "contract"), method, args, abi)

    def token_info(self, contract: Union[str, AccountId]) -> Dict[str, Any]:
        """Read ERC-20 metadata (name, symbol, decimals, totalSupply) from ``contract``."""
        contract_id = validate_address(contract, "contract")
        return {
            "address": contract_id.checksum,
            "name": self.call_read_only(contract_id, "name"),
            "symbol": self.call_read_only(contract_id, "symbol"),
            "decimals": self.call_read_only(contract_id, "decimals"),
            "total_supply": self.call_read_only(contract_id, "totalSupply"),
        }

    def explorer_tx_url(self, tx_hash: str) -> str:
        return f"{self.network.explorer_url}/tx/{tx_hash}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _failed_outcome(error: ArbTransferError, stage: str) -> TransferOutcome:
        for error_type, kind in _KIND_BY_ERROR:
            if isinstance(error, error_type):
                _logger.warning(
                    "Transfer aborted",
                    extra={"stage": stage, "kind": kind.value, "code": error.code, "error": error.message},
                )
                return TransferOutcome(kind, stage, error=error)
        raise error
