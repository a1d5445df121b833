"""Fusion Swap Escrow Math.

Pure building blocks shared by both chains' escrows.

Key components:
- Order hash (deterministic fingerprint binding all order terms)
- Dutch auction rate bump and destination amount pricing
- Fee split (protocol fee, integrator fee, positive-slippage surplus)
- Resolver cancellation premium
- Order authorization signing (EIP-712)

Example usage:
    ```python
    from fusion_swap_sdk.escrow import (
        Order,
        OrderAccounts,
        AuctionCurve,
        compute_order_hash,
        priced_amount,
        estimated_amount,
        get_fee_amounts,
    )

    order = Order(
        id=1,
        src_amount=1000,
        min_dst_amount=900,
        estimated_dst_amount=950,
        expiration_time=1_700_003_600,
        auction=AuctionCurve(start_time=1_700_000_000, duration=600, initial_rate_bump=1000),
    )
    order_hash = compute_order_hash(order, OrderAccounts(
        src_asset="0x...", dst_asset="0x...", receiver="0x...",
    ))

    dst_amount = priced_amount(order, 500, timestamp=1_700_000_300)  # 453
    split = get_fee_amounts(dst_amount, estimated_amount(order, 500), order.fee)
    ```
"""

from .types import (
    FeeConfig,
    AuctionPoint,
    AuctionCurve,
    Order,
    OrderAccounts,
    FeeSplit,
    FillResult,
    OrderEscrowState,
    OrderEscrowRecord,
    EscrowState,
    EscrowRecord,
    default_auction_curve,
)
from .order_id import (
    compute_order_hash,
    verify_order_hash,
    order_hash_hex,
    parse_order_hash,
)
from .auction import (
    calculate_rate_bump,
    calculate_premium,
    get_dst_amount,
    priced_amount,
    estimated_amount,
)
from .fees import get_fee_amounts
from .signing import (
    ORDER_AUTHORIZATION_TYPES,
    OrderAuthorization,
    SignedOrderAuthorization,
    create_eip712_domain,
    create_order_authorization,
    sign_order_authorization,
    verify_order_authorization_signature,
)
from .utils import (
    BASE_1E2,
    BASE_1E5,
    NATIVE_ASSET,
    ZERO_ADDRESS,
    mul_div_ceil,
    mul_div_floor,
    format_fee,
    percent_to_fee,
)
from . import errors

__all__ = [
    # Types
    "FeeConfig",
    "AuctionPoint",
    "AuctionCurve",
    "Order",
    "OrderAccounts",
    "FeeSplit",
    "FillResult",
    "OrderEscrowState",
    "OrderEscrowRecord",
    "EscrowState",
    "EscrowRecord",
    "default_auction_curve",
    # Order hash
    "compute_order_hash",
    "verify_order_hash",
    "order_hash_hex",
    "parse_order_hash",
    # Pricing
    "calculate_rate_bump",
    "calculate_premium",
    "get_dst_amount",
    "priced_amount",
    "estimated_amount",
    "get_fee_amounts",
    # Signing
    "ORDER_AUTHORIZATION_TYPES",
    "OrderAuthorization",
    "SignedOrderAuthorization",
    "create_eip712_domain",
    "create_order_authorization",
    "sign_order_authorization",
    "verify_order_authorization_signature",
    # Utils
    "BASE_1E2",
    "BASE_1E5",
    "NATIVE_ASSET",
    "ZERO_ADDRESS",
    "mul_div_ceil",
    "mul_div_floor",
    "format_fee",
    "percent_to_fee",
    "errors",
]
