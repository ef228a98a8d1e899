"""Broadcast of signed transactions."""
from .chain import ChainClient
from .errors import SubmitError
from .logging import get_logger
from .models import SignedTransaction

__all__ = ["Broadcaster", "extract_rejection_reason"]

_logger = get_logger(__name__)


def extract_rejection_reason(error: Exception) -> str:
    """Pull the node's own rejection message out of a provider exception.

    Handles the JSON-RPC error dict web3.py puts in ``args[0]`` (older
    releases) or ``rpc_response["error"]`` (``Web3RPCError``).
    """
    payload = None
    if error.args and isinstance(error.args[0], dict):
        payload = error.args[0]
    rpc_response = getattr(error, "rpc_response", None)
    if payload is None and isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        payload = rpc_response["error"]

    if payload is not None:
        reason = payload.get("message") or payload.get("reason")
        if reason:
            return str(reason)

    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


class Broadcaster:
    """Submits a signed payload once. Never retries."""

    def __init__(self, chain: ChainClient):
        self.chain = chain

    def submit(self, signed: SignedTransaction) -> str:
        """Send ``signed`` with eth_sendRawTransaction.

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            SubmitError: With the node's verbatim reason (insufficient funds,
                nonce too low, fee below base fee, ...)
        """
        try:
            tx_hash = self.chain.send_raw_transaction(signed.raw)
        except Exception as e:
            reason = extract_rejection_reason(e)
            _logger.warning("Transaction rejected", extra={"tx_hash": signed.tx_hash, "reason": reason})
            raise SubmitError(reason, tx_hash=signed.tx_hash) from e

        if tx_hash.lower() != signed.tx_hash.lower():
            _logger.warning(
                "Node returned a different hash than the signed payload",
                extra={"expected": signed.tx_hash, "returned": tx_hash},
            )
        _logger.info("Transaction submitted", extra={"tx_hash": tx_hash, "chain_id": signed.chain_id})
        return tx_hash
