"""Fee estimation under an EIP-1559 base-fee model."""
from typing import Optional, Tuple

from .chain import ChainClient
from .config import TransferConfig
from .constants import (
    BASIC_TRANSFER_GAS_LIMIT,
    BPS_DENOMINATOR,
    DEFAULT_BASE_FEE_MARGIN_BPS,
    DEFAULT_FALLBACK_BASE_FEE_WEI,
    DEFAULT_PRIORITY_FEE_WEI,
    DEFAULT_TRANSFER_GAS_LIMIT,
    ETHER_DECIMALS,
    GWEI_DECIMALS,
)
from .errors import ConfigurationError
from .logging import get_logger
from .models import BlockInfo, FeeParameters
from .validation import format_units

__all__ = ["FeeEstimator", "basic_transfer_gas_limit"]

_logger = get_logger(__name__)


def basic_transfer_gas_limit() -> int:
    """Gas a plain ETH transfer consumes on Ethereum (21 000 units)."""
    return BASIC_TRANSFER_GAS_LIMIT


class FeeEstimator:
    """Derives a gas price that clears the current base fee.

    ``effective_gas_price = base_fee + base_fee * margin_bps // 10_000 + priority_fee``

    With the default 2000 bps margin this is ``base + floor(base / 5) + tip``:
    a 20% cushion for base-fee drift between estimation and inclusion.
    The result is a point-in-time estimate; call ``estimate`` again before
    every submission attempt.
    """

    def __init__(
        self,
        chain: Optional[ChainClient] = None,
        priority_fee_wei: int = DEFAULT_PRIORITY_FEE_WEI,
        base_fee_margin_bps: int = DEFAULT_BASE_FEE_MARGIN_BPS,
        fallback_base_fee_wei: int = DEFAULT_FALLBACK_BASE_FEE_WEI,
        gas_limit: int = DEFAULT_TRANSFER_GAS_LIMIT,
    ):
        if min(priority_fee_wei, base_fee_margin_bps, fallback_base_fee_wei) < 0:
            raise ConfigurationError("fee parameters must be non-negative")
        self.chain = chain
        self.priority_fee_wei = priority_fee_wei
        self.base_fee_margin_bps = base_fee_margin_bps
        self.fallback_base_fee_wei = fallback_base_fee_wei
        self.gas_limit = gas_limit

    @classmethod
    def from_config(cls, config: TransferConfig, chain: Optional[ChainClient] = None) -> "FeeEstimator":
        return cls(
            chain=chain,
            priority_fee_wei=config.priority_fee_wei,
            base_fee_margin_bps=config.base_fee_margin_bps,
            fallback_base_fee_wei=config.fallback_base_fee_wei,
            gas_limit=config.transfer_gas_limit,
        )

    def estimate(self, latest_block: BlockInfo) -> FeeParameters:
        """Compute fee parameters from the latest block.

        Args:
            latest_block: Block whose base fee is used; a missing base fee
                falls back to ``fallback_base_fee_wei``

        Returns:
            FeeParameters with ``effective_gas_price >= base_fee``
        """
        base_fee = latest_block.base_fee
        if base_fee is None:
            _logger.warning(
                "Latest block has no base fee, using fallback",
                extra={"block": latest_block.number, "fallback_wei": self.fallback_base_fee_wei},
            )
            base_fee = self.fallback_base_fee_wei
        base_fee = max(int(base_fee), 0)

        margin = base_fee * self.base_fee_margin_bps // BPS_DENOMINATOR
        effective = base_fee + margin + self.priority_fee_wei

        fees = FeeParameters(
            base_fee=base_fee,
            priority_fee=self.priority_fee_wei,
            effective_gas_price=effective,
            gas_limit=self.gas_limit,
        )
        _logger.debug(
            "Estimated fees",
            extra={
                "block": latest_block.number,
                "base_fee_wei": base_fee,
                "gas_price_wei": effective,
                "gas_limit": self.gas_limit,
            },
        )
        return fees

    def estimate_latest(self) -> FeeParameters:
        return self.estimate(self._require_chain().get_latest_block())

    def current_price(self) -> int:
        """Network-reported gas price (eth_gasPrice), in wei."""
        return self._require_chain().get_gas_price()

    def estimated_fee(self, gas_limit: int = BASIC_TRANSFER_GAS_LIMIT) -> Tuple[int, str]:
        """Estimate the fee for ``gas_limit`` units at the current gas price.

        Returns:
            Tuple of (fee in wei, operator-facing breakdown in gwei and ETH)
        """
        gas_price = self.current_price()
        fee = gas_price * gas_limit
        breakdown = (
            f"Gas Price: {format_units(gas_price, GWEI_DECIMALS)} Gwei\n"
            f"Gas Limit: {gas_limit} units\n"
            f"Estimated Fee: {format_units(fee, GWEI_DECIMALS)} Gwei "
            f"({format_units(fee, ETHER_DECIMALS)} ETH)"
        )
        return fee, breakdown

    def gas_price_info(self) -> str:
        gas_price = self.current_price()
        return (
            "Current Gas Price:\n"
            f"  {gas_price} wei\n"
            f"  {format_units(gas_price, GWEI_DECIMALS)} Gwei\n"
            f"  {format_units(gas_price, ETHER_DECIMALS)} ETH"
        )

    def _require_chain(self) -> ChainClient:
        if self.chain is None:
            raise ConfigurationError("FeeEstimator has no chain client for network queries")
        return self.chain
