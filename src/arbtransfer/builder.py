"""Transaction building and signing.

``TransactionBuilder.build_and_sign`` checks every precondition before
anything is signed:

1. the node reports the expected chain id
2. the signing key derives the declared sender
3. fee parameters are estimated from the latest block
4. the amount converts exactly to wei

Only then is the draft assembled and signed. The only network traffic is
reads (chain id, latest block, nonce).
"""
from typing import Optional, Tuple, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from .chain import ChainClient
from .constants import ETHER_DECIMALS
from .errors import IdentityMismatchError, InvalidIdentityError, WrongNetworkError
from .fees import FeeEstimator
from .logging import get_logger
from .models import AccountId, FeeParameters, SignedTransaction, TransactionDraft
from .validation import parse_amount, validate_address

__all__ = ["TransactionBuilder", "load_identity", "Identity"]

_logger = get_logger(__name__)

Identity = Union[str, bytes, LocalAccount]


def load_identity(identity: Identity) -> LocalAccount:
    """Turn a hex private key (or an existing LocalAccount) into a signer.

    Raises:
        InvalidIdentityError: If the key cannot be parsed. The key is never echoed.
    """
    if isinstance(identity, LocalAccount):
        return identity
    # Sanitize private key errors to prevent key leakage in stack traces
    try:
        return Account.from_key(identity)
    except Exception:
        raise InvalidIdentityError() from None


class TransactionBuilder:
    def __init__(
        self,
        chain: ChainClient,
        fee_estimator: FeeEstimator,
        expected_chain_id: int,
        network_name: Optional[str] = None,
        decimals: int = ETHER_DECIMALS,
    ):
        self.chain = chain
        self.fee_estimator = fee_estimator
        self.expected_chain_id = expected_chain_id
        self.network_name = network_name
        self.decimals = decimals

    def check_network(self) -> int:
        """Fetch the live chain id and insist it matches the expected network.

        Raises:
            WrongNetworkError: If the node serves a different chain
        """
        chain_id = self.chain.get_chain_id()
        if chain_id != self.expected_chain_id:
            raise WrongNetworkError(self.expected_chain_id, chain_id, self.network_name)
        return chain_id

    @staticmethod
    def check_identity(sender: AccountId, identity: Identity) -> LocalAccount:
        account = load_identity(identity)
        derived = AccountId(bytes.fromhex(account.address[2:]))
        if derived != sender:
            raise IdentityMismatchError(declared=sender.checksum, derived=derived.checksum)
        return account

    def prepare(
        self,
        sender: Union[str, AccountId],
        to: Union[str, AccountId],
        amount: str,
        identity: Identity,
    ) -> Tuple[TransactionDraft, LocalAccount, FeeParameters]:
        """Run all preconditions and assemble the unsigned draft.

        Args:
            sender: Declared sender address
            to: Receiver address
            amount: Amount in ETH as a decimal string (e.g. "0.0001")
            identity: Private key or LocalAccount that must derive ``sender``

        Returns:
            Tuple of (draft, signer, fee parameters)

        Raises:
            InvalidAddressError: If either address is malformed
            WrongNetworkError: If the chain id is not the expected one
            IdentityMismatchError: If the key does not derive ``sender``
            AmountParseError: If ``amount`` is malformed or over-precise
            RpcError: If a precondition read fails
        """
        sender_id = validate_address(sender, "sender")
        to_id = validate_address(to, "receiver")

        chain_id = self.check_network()
        account = self.check_identity(sender_id, identity)
        fees = self.fee_estimator.estimate(self.chain.get_latest_block())
        value = parse_amount(amount, self.decimals)
        nonce = self.chain.get_transaction_count(sender_id, "pending")

        draft = TransactionDraft(
            sender=sender_id,
            to=to_id,
            value=value,
            gas_limit=fees.gas_limit,
            gas_price=fees.effective_gas_price,
            nonce=nonce,
            chain_id=chain_id,
        )
        _logger.info(
            "Prepared transfer",
            extra={
                "from": sender_id.checksum,
                "to": to_id.checksum,
                "value_wei": value,
                "gas_price_wei": fees.effective_gas_price,
                "gas_limit": fees.gas_limit,
                "nonce": nonce,
                "chain_id": chain_id,
            },
        )
        return draft, account, fees

    @staticmethod
    def sign(draft: TransactionDraft, account: LocalAccount, fees: Optional[FeeParameters] = None) -> SignedTransaction:
        params = draft.to_tx_params()
        params.pop("from")
        signed = account.sign_transaction(params)
        return SignedTransaction(
            raw=bytes(signed.raw_transaction),
            tx_hash=Web3.to_hex(signed.hash),
            chain_id=draft.chain_id,
            fees=fees,
        )

    def build_and_sign(
        self,
        sender: Union[str, AccountId],
        to: Union[str, AccountId],
        amount: str,
        identity: Identity,
    ) -> SignedTransaction:
        """Validate, price and sign a native transfer. See ``prepare`` for the errors raised."""
        draft, account, fees = self.prepare(sender, to, amount, identity)
        return self.sign(draft, account, fees)
