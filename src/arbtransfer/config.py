import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

from .constants import (
    BPS_DENOMINATOR,
    DEFAULT_BASE_FEE_MARGIN_BPS,
    DEFAULT_FALLBACK_BASE_FEE_WEI,
    DEFAULT_POLL_BUDGET,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PRIORITY_FEE_WEI,
    DEFAULT_TRANSFER_GAS_LIMIT,
    MAX_GAS_LIMIT,
    PROVIDER_TIMEOUT_SECONDS,
)
from .errors import ConfigurationError

__all__ = [
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    "TransferConfig",
    "load_config",
]


class Network(str, Enum):
    ARBITRUM_SEPOLIA = "arbitrum-sepolia"
    ARBITRUM_ONE = "arbitrum-one"


@dataclass
class NetworkConfig:
    name: Network
    chain_id: int
    rpc_url: str
    explorer_url: str


NETWORKS: dict[Network, NetworkConfig] = {
    Network.ARBITRUM_SEPOLIA: NetworkConfig(
        name=Network.ARBITRUM_SEPOLIA,
        chain_id=421614,
        rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
        explorer_url="https://sepolia.arbiscan.io",
    ),
    Network.ARBITRUM_ONE: NetworkConfig(
        name=Network.ARBITRUM_ONE,
        chain_id=42161,
        rpc_url="https://arb1.arbitrum.io/rpc",
        explorer_url="https://arbiscan.io",
    ),
}


def get_network_config(network: Network, rpc_url: Optional[str] = None) -> NetworkConfig:
    cfg = NETWORKS[Network(network)]
    if rpc_url:
        return replace(cfg, rpc_url=rpc_url)
    return cfg


@dataclass
class TransferConfig:
    """Everything a TransferClient needs, resolved once at construction.

    Attributes:
        network: Network the client is bound to
        rpc_url: RPC endpoint override (defaults to the network's public RPC)
        expected_chain_id: Chain id the builder insists on (defaults to the network's)
        private_key: Hex private key used when transfer() is called without an identity
        priority_fee_wei: Fixed tip offered above the base fee
        base_fee_margin_bps: Margin added on top of the observed base fee, in basis points
        fallback_base_fee_wei: Base fee assumed when the latest block omits one
        transfer_gas_limit: Gas limit for a plain transfer
        poll_interval: Seconds between receipt queries
        poll_budget: Maximum number of receipt queries
        pre_broadcast_delay: Seconds to wait between signing and broadcast
        request_timeout: HTTP provider timeout in seconds
    """

    network: Network = Network.ARBITRUM_SEPOLIA
    rpc_url: Optional[str] = None
    expected_chain_id: Optional[int] = None
    private_key: Optional[str] = field(default=None, repr=False)
    priority_fee_wei: int = DEFAULT_PRIORITY_FEE_WEI
    base_fee_margin_bps: int = DEFAULT_BASE_FEE_MARGIN_BPS
    fallback_base_fee_wei: int = DEFAULT_FALLBACK_BASE_FEE_WEI
    transfer_gas_limit: int = DEFAULT_TRANSFER_GAS_LIMIT
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    poll_budget: int = DEFAULT_POLL_BUDGET
    pre_broadcast_delay: float = 0.0
    request_timeout: int = PROVIDER_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        try:
            self.network = Network(self.network)
        except ValueError:
            raise ConfigurationError(
                f"Unknown network {self.network!r}",
                details={"network": self.network, "known": [n.value for n in Network]},
            ) from None
        if self.expected_chain_id is None:
            self.expected_chain_id = NETWORKS[self.network].chain_id
        self.validate()

    @property
    def network_config(self) -> NetworkConfig:
        return get_network_config(self.network, self.rpc_url)

    def validate(self) -> None:
        """Reject fee, gas and polling settings the pipeline cannot honour.

        Raises:
            ConfigurationError: If any setting is out of range
        """
        for name in ("priority_fee_wei", "base_fee_margin_bps", "fallback_base_fee_wei"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative", details={name: getattr(self, name)})
        if self.base_fee_margin_bps > 10 * BPS_DENOMINATOR:
            raise ConfigurationError(
                "base_fee_margin_bps cannot exceed 1000%",
                details={"base_fee_margin_bps": self.base_fee_margin_bps},
            )
        if not 0 < self.transfer_gas_limit <= MAX_GAS_LIMIT:
            raise ConfigurationError(
                f"transfer_gas_limit must be between 1 and {MAX_GAS_LIMIT}",
                details={"transfer_gas_limit": self.transfer_gas_limit},
            )
        if self.poll_budget < 1:
            raise ConfigurationError("poll_budget must be at least 1", details={"poll_budget": self.poll_budget})
        if self.poll_interval < 0 or self.pre_broadcast_delay < 0:
            raise ConfigurationError("poll_interval and pre_broadcast_delay must be non-negative")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")


def load_config(env_file: Optional[str] = None, **overrides) -> TransferConfig:
    """Build a TransferConfig from the environment (and an optional .env file).

    Reads ARBTRANSFER_NETWORK, ARBITRUM_SEPOLIA_RPC (or RPC_URL) and
    PRIVATE_KEY. Keyword overrides win over the environment; None values
    are ignored so argparse defaults can be passed straight through.

    Example:
        >>> config = load_config(poll_budget=24)
    """
    load_dotenv(env_file)

    values = {
        "network": os.getenv("ARBTRANSFER_NETWORK", Network.ARBITRUM_SEPOLIA.value),
        "rpc_url": os.getenv("ARBITRUM_SEPOLIA_RPC") or os.getenv("RPC_URL") or None,
        "private_key": os.getenv("PRIVATE_KEY") or None,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    return TransferConfig(**values)
