"""Fusion Swap SDK.

Cross-chain swap settlement: a source-chain order escrow priced by a Dutch
auction, and a destination-chain hash-time-lock escrow released by a shared
secret.
"""

from .config import (
    SwapConfig,
    ResolvedSwapConfig,
    resolve_config,
    load_config_from_env,
    configure_logging,
)
from .escrow import (
    FeeConfig,
    AuctionPoint,
    AuctionCurve,
    Order,
    OrderAccounts,
    FeeSplit,
    FillResult,
    OrderEscrowState,
    EscrowState,
    NATIVE_ASSET,
    compute_order_hash,
    calculate_rate_bump,
    calculate_premium,
    get_fee_amounts,
    priced_amount,
    estimated_amount,
)
from .chains import (
    InMemoryLedger,
    ManualClock,
    ResolverWhitelist,
    OrderEscrowProgram,
    HashTimeLockContract,
    generate_secret,
)

__version__ = "0.1.0"

__all__ = [
    "SwapConfig",
    "ResolvedSwapConfig",
    "resolve_config",
    "load_config_from_env",
    "configure_logging",
    "FeeConfig",
    "AuctionPoint",
    "AuctionCurve",
    "Order",
    "OrderAccounts",
    "FeeSplit",
    "FillResult",
    "OrderEscrowState",
    "EscrowState",
    "NATIVE_ASSET",
    "compute_order_hash",
    "calculate_rate_bump",
    "calculate_premium",
    "get_fee_amounts",
    "priced_amount",
    "estimated_amount",
    "InMemoryLedger",
    "ManualClock",
    "ResolverWhitelist",
    "OrderEscrowProgram",
    "HashTimeLockContract",
    "generate_secret",
]
