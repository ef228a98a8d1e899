"""Chain collaborator used by the transfer pipeline.

``ChainClient`` is the read/submit surface every stage depends on;
``Web3ChainClient`` implements it over a web3.py HTTP provider. Stages
never touch web3 directly, so tests can inject a fake chain.
"""
from typing import Any, Optional, Protocol, Sequence, Union

from web3 import Web3
from web3.exceptions import TransactionNotFound

from .constants import PROVIDER_TIMEOUT_SECONDS
from .errors import RpcError
from .logging import get_logger
from .models import AccountId, BlockInfo, Receipt

__all__ = ["ChainClient", "Web3ChainClient", "ERC20_METADATA_ABI"]

_logger = get_logger(__name__)

AddressLike = Union[str, AccountId]

# Minimal ERC-20 metadata ABI for read-only calls
ERC20_METADATA_ABI = [
    {"inputs": [], "name": "name", "outputs": [{"name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "symbol", "outputs": [{"name": "", "type": "string"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "totalSupply", "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class ChainClient(Protocol):
    def get_chain_id(self) -> int:
        ...

    def get_latest_block(self) -> BlockInfo:
        ...

    def get_balance(self, address: AddressLike) -> int:
        ...

    def get_gas_price(self) -> int:
        ...

    def get_transaction_count(self, address: AddressLike, block: str = "pending") -> int:
        ...

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        ...

    def send_raw_transaction(self, payload: bytes) -> str:
        ...

    def call_read_only_method(
        self, contract: AddressLike, method: str, args: Sequence[Any] = (), abi: Optional[list] = None
    ) -> Any:
        ...


def _checksum(address: AddressLike) -> str:
    if isinstance(address, AccountId):
        return address.checksum
    return Web3.to_checksum_address(address)


class Web3ChainClient:
    """ChainClient backed by web3.py.

    Read failures surface as RpcError. ``send_raw_transaction`` lets the
    provider's exception through untouched so the Broadcaster can extract
    the node's reason verbatim.
    """

    def __init__(
        self,
        rpc_url: str,
        web3: Optional[Web3] = None,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
    ):
        self.rpc_url = rpc_url
        # Configure HTTPProvider with timeout so a stalled node cannot hang a poll tick
        self.w3 = web3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

    def _read(self, what: str, fn, *args):
        try:
            return fn(*args)
        except RpcError:
            raise
        except Exception as e:
            _logger.debug("RPC read failed", extra={"call": what, "error": str(e)})
            raise RpcError(f"{what} failed: {e}", details={"call": what, "rpc_url": self.rpc_url}) from e

    def get_chain_id(self) -> int:
        return int(self._read("eth_chainId", lambda: self.w3.eth.chain_id))

    def get_latest_block(self) -> BlockInfo:
        block = self._read("eth_getBlockByNumber", self.w3.eth.get_block, "latest")
        base_fee = block.get("baseFeePerGas")
        block_hash = block.get("hash")
        return BlockInfo(
            number=int(block["number"]),
            hash=Web3.to_hex(block_hash) if block_hash is not None else "",
            timestamp=int(block["timestamp"]),
            base_fee=int(base_fee) if base_fee is not None else None,
        )

    def get_balance(self, address: AddressLike) -> int:
        return int(self._read("eth_getBalance", self.w3.eth.get_balance, _checksum(address)))

    def get_gas_price(self) -> int:
        return int(self._read("eth_gasPrice", lambda: self.w3.eth.gas_price))

    def get_transaction_count(self, address: AddressLike, block: str = "pending") -> int:
        return int(
            self._read("eth_getTransactionCount", self.w3.eth.get_transaction_count, _checksum(address), block)
        )

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """Fetch the receipt for ``tx_hash``; None while the transaction is not yet included."""
        try:
            raw = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except Exception as e:
            raise RpcError(
                f"eth_getTransactionReceipt failed: {e}",
                tx_hash=tx_hash,
                details={"call": "eth_getTransactionReceipt", "rpc_url": self.rpc_url},
            ) from e
        if raw is None or raw.get("blockNumber") is None:
            return None
        return Receipt(
            tx_hash=tx_hash,
            block_number=int(raw["blockNumber"]),
            gas_used=int(raw.get("gasUsed") or 0),
            status=int(raw.get("status", 0)) == 1,
        )

    def send_raw_transaction(self, payload: bytes) -> str:
        return Web3.to_hex(self.w3.eth.send_raw_transaction(payload))

    def call_read_only_method(
        self, contract: AddressLike, method: str, args: Sequence[Any] = (), abi: Optional[list] = None
    ) -> Any:
        """Call a view method with eth_call. Defaults to the ERC-20 metadata ABI."""
        instance = self.w3.eth.contract(address=_checksum(contract), abi=abi or ERC20_METADATA_ABI)
        return self._read(f"eth_call {method}", lambda: getattr(instance.functions, method)(*args).call())
