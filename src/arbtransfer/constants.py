"""Constants for the arbtransfer SDK.

This module defines the constant values used across the SDK,
including gas and fee parameters, confirmation polling policy,
unit precision and validation bounds.
"""

# Ethereum Constants
ADDRESS_HEX_LENGTH = 40
ADDRESS_LENGTH = 20
ETHER_DECIMALS = 18
GWEI_DECIMALS = 9

# Gas Constants (Arbitrum L2)
BASIC_TRANSFER_GAS_LIMIT = 21_000
DEFAULT_TRANSFER_GAS_LIMIT = 100_000  # headroom for L1 data posting on L2
MAX_GAS_LIMIT = 1_000_000
DEFAULT_PRIORITY_FEE_WEI = 10_000_000  # 0.01 gwei tip
DEFAULT_FALLBACK_BASE_FEE_WEI = 10_000_000  # 0.01 gwei, used when block omits baseFeePerGas
DEFAULT_BASE_FEE_MARGIN_BPS = 2_000  # 20% above observed base fee
BPS_DENOMINATOR = 10_000

# Amount Validation Constants
MAX_SAFE_AMOUNT = 2**255 - 1
LOW_BALANCE_WARNING_WEI = 10**15  # 0.001 ETH

# Confirmation Polling
DEFAULT_POLL_INTERVAL_SECONDS = 5.0
DEFAULT_POLL_BUDGET = 12  # 12 * 5s = 60s
DEFAULT_PRE_BROADCAST_DELAY_SECONDS = 3.0

# Network Constants
PROVIDER_TIMEOUT_SECONDS = 30

__all__ = [
    "ADDRESS_HEX_LENGTH",
    "ADDRESS_LENGTH",
    "ETHER_DECIMALS",
    "GWEI_DECIMALS",
    "BASIC_TRANSFER_GAS_LIMIT",
    "DEFAULT_TRANSFER_GAS_LIMIT",
    "MAX_GAS_LIMIT",
    "DEFAULT_PRIORITY_FEE_WEI",
    "DEFAULT_FALLBACK_BASE_FEE_WEI",
    "DEFAULT_BASE_FEE_MARGIN_BPS",
    "BPS_DENOMINATOR",
    "MAX_SAFE_AMOUNT",
    "LOW_BALANCE_WARNING_WEI",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DEFAULT_POLL_BUDGET",
    "DEFAULT_PRE_BROADCAST_DELAY_SECONDS",
    "PROVIDER_TIMEOUT_SECONDS",
]
