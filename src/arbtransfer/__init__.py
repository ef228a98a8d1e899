from .broadcaster import Broadcaster
from .builder import TransactionBuilder, load_identity
from .chain import ChainClient, Web3ChainClient
from .client import TransferClient
from .config import NETWORKS, Network, NetworkConfig, TransferConfig, get_network_config, load_config
from .constants import (
    BASIC_TRANSFER_GAS_LIMIT,
    DEFAULT_BASE_FEE_MARGIN_BPS,
    DEFAULT_FALLBACK_BASE_FEE_WEI,
    DEFAULT_POLL_BUDGET,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PRIORITY_FEE_WEI,
    DEFAULT_TRANSFER_GAS_LIMIT,
    ETHER_DECIMALS,
    MAX_GAS_LIMIT,
    PROVIDER_TIMEOUT_SECONDS,
)
from .errors import (
    AmountParseError,
    ArbTransferError,
    ConfigurationError,
    IdentityMismatchError,
    InvalidAddressError,
    InvalidIdentityError,
    PollError,
    RpcError,
    SubmitError,
    ValidationError,
    WrongNetworkError,
)
from .fees import FeeEstimator, basic_transfer_gas_limit
from .models import (
    AccountId,
    BlockInfo,
    FeeParameters,
    OutcomeKind,
    PollResult,
    PollState,
    Receipt,
    SignedTransaction,
    TransactionDraft,
    TransferOutcome,
)
from .poller import ConfirmationPoller, PollPolicy
from .validation import format_units, parse_amount, validate_address

__version__ = "0.1.0"

__all__ = [
    # Client
    "TransferClient",
    # Pipeline stages
    "validate_address",
    "FeeEstimator",
    "TransactionBuilder",
    "Broadcaster",
    "ConfirmationPoller",
    "PollPolicy",
    "load_identity",
    "basic_transfer_gas_limit",
    # Chain
    "ChainClient",
    "Web3ChainClient",
    # Config
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "TransferConfig",
    "get_network_config",
    "load_config",
    # Models
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
    # Errors
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
    # Units
    "parse_amount",
    "format_units",
    # Constants
    "BASIC_TRANSFER_GAS_LIMIT",
    "DEFAULT_TRANSFER_GAS_LIMIT",
    "DEFAULT_PRIORITY_FEE_WEI",
    "DEFAULT_FALLBACK_BASE_FEE_WEI",
    "DEFAULT_BASE_FEE_MARGIN_BPS",
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "DEFAULT_POLL_BUDGET",
    "ETHER_DECIMALS",
    "MAX_GAS_LIMIT",
    "PROVIDER_TIMEOUT_SECONDS",
]
