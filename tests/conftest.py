"""
Shared fixtures for arbtransfer tests.

FakeChain stands in for the RPC node: it records every call, serves
receipts from a script, and hashes submitted payloads the way a node
would (keccak of the raw bytes). No test touches the network.
"""

from typing import List, Optional

import pytest
from eth_account import Account
from web3 import Web3

from arbtransfer import TransferClient, TransferConfig
from arbtransfer.models import BlockInfo, Receipt

# Private keys for tests (DO NOT USE IN PRODUCTION)
SENDER_KEY = "0x" + "11" * 32
ARBITRUM_SEPOLIA_CHAIN_ID = 421614


class FakeChain:
    def __init__(
        self,
        chain_id: int = ARBITRUM_SEPOLIA_CHAIN_ID,
        base_fee: Optional[int] = 100,
        gas_price: int = 20_000_000,
        balances: Optional[dict] = None,
        receipts: Optional[list] = None,
        nonce: int = 7,
    ):
        self.chain_id = chain_id
        self.base_fee = base_fee
        self.gas_price = gas_price
        self.balances = balances or {}
        self.receipts: list = list(receipts or [])
        self.nonce = nonce
        self.calls: List[str] = []
        self.sent: List[bytes] = []
        self.send_error: Optional[Exception] = None
        self.read_only_values: dict = {}

    def get_chain_id(self) -> int:
        self.calls.append("get_chain_id")
        return self.chain_id

    def get_latest_block(self) -> BlockInfo:
        self.calls.append("get_latest_block")
        return BlockInfo(number=1_000, hash="0x" + "ab" * 32, timestamp=1_700_000_000, base_fee=self.base_fee)

    def get_balance(self, address) -> int:
        self.calls.append("get_balance")
        return self.balances.get(address.checksum, 0)

    def get_gas_price(self) -> int:
        self.calls.append("get_gas_price")
        return self.gas_price

    def get_transaction_count(self, address, block="pending") -> int:
        self.calls.append("get_transaction_count")
        return self.nonce

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        self.calls.append("get_transaction_receipt")
        if not self.receipts:
            return None
        item = self.receipts.pop(0)
        if isinstance(item, Exception):
            raise item
        if item is None:
            return None
        return Receipt(tx_hash=tx_hash, block_number=item.block_number, gas_used=item.gas_used, status=item.status)

    def send_raw_transaction(self, payload: bytes) -> str:
        self.calls.append("send_raw_transaction")
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(payload)
        return Web3.to_hex(Web3.keccak(payload))

    def call_read_only_method(self, contract, method, args=(), abi=None):
        self.calls.append(f"call:{method}")
        return self.read_only_values[method]

    def count(self, call: str) -> int:
        return self.calls.count(call)


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture()
def sender_address() -> str:
    return Account.from_key(SENDER_KEY).address


@pytest.fixture()
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def config() -> TransferConfig:
    return TransferConfig(private_key=SENDER_KEY)


@pytest.fixture()
def client(config, chain, sleep) -> TransferClient:
    return TransferClient(config, chain=chain, sleep=sleep)


@pytest.fixture()
def make_chain():
    return FakeChain


@pytest.fixture()
def clean_env(monkeypatch):
    # setenv registers each variable for removal on teardown, including values a .env file loads
    for name in ("ARBTRANSFER_NETWORK", "ARBITRUM_SEPOLIA_RPC", "RPC_URL", "PRIVATE_KEY"):
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    return monkeypatch
