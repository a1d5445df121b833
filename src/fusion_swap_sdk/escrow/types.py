"""Escrow Types for the fusion swap escrows.

Order terms shared by both chains, plus the records each escrow keeps.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class FeeConfig:
    """Fees applied to an order."""

    protocol_fee: int = 0
    """Protocol fee where 100000 = 100%."""

    integrator_fee: int = 0
    """Integrator fee where 100000 = 100%."""

    surplus_percentage: int = 0
    """Share of positive slippage taken by the protocol, where 100 = 100%."""

    max_cancellation_premium: int = 0
    """Maximum reward for a resolver cancelling the expired order (native units)."""


@dataclass(frozen=True)
class AuctionPoint:
    """A checkpoint of the Dutch auction curve."""

    rate_bump: int
    """Rate bump at this checkpoint where 100000 = 100%."""

    time_delta: int
    """Seconds since the previous checkpoint (or the auction start)."""


@dataclass(frozen=True)
class AuctionCurve:
    """Piecewise-linear rate bump decaying to zero at ``start_time + duration``."""

    start_time: int
    """Unix timestamp of the auction start."""

    duration: int
    """Auction duration in seconds."""

    initial_rate_bump: int
    """Rate bump at ``start_time`` where 100000 = 100%."""

    points: Tuple[AuctionPoint, ...] = ()
    """Ordered checkpoints between start and finish."""


def default_auction_curve() -> AuctionCurve:
    """Curve starting in the far future, so orders price at the flat rate."""
    return AuctionCurve(
        start_time=0xFFFFFFFF - 32000,
        duration=32000,
        initial_rate_bump=0,
    )


@dataclass(frozen=True)
class Order:
    """Immutable terms of a swap order."""

    id: int
    """Maker-chosen order id (uint32)."""

    src_amount: int
    """Amount of source asset the maker sells."""

    min_dst_amount: int
    """Minimum amount of destination asset for the full source amount."""

    estimated_dst_amount: int
    """Maker's estimate for the full source amount; surplus baseline."""

    expiration_time: int
    """Unix timestamp after which the order can no longer be filled."""

    src_asset_is_native: bool = False
    dst_asset_is_native: bool = False
    fee: FeeConfig = field(default_factory=FeeConfig)
    auction: AuctionCurve = field(default_factory=default_auction_curve)

    cancellation_auction_duration: int = 0
    """Seconds over which the resolver cancellation premium ramps up."""


@dataclass(frozen=True)
class OrderAccounts:
    """Identities bound into an order's fingerprint."""

    src_asset: str
    """Source asset address (``NATIVE_ASSET`` for the native coin)."""

    dst_asset: str
    """Destination asset address."""

    receiver: str
    """Address receiving the destination asset on the maker's behalf."""

    protocol_dst: Optional[str] = None
    """Protocol fee recipient; required iff protocol fee or surplus is set."""

    integrator_dst: Optional[str] = None
    """Integrator fee recipient; required iff integrator fee is set."""


@dataclass(frozen=True)
class FeeSplit:
    """Destination amount split into its recipients' shares."""

    protocol_amount: int
    integrator_amount: int
    maker_amount: int

    @property
    def total(self) -> int:
        return self.protocol_amount + self.integrator_amount + self.maker_amount


class OrderEscrowState(Enum):
    """Lifecycle of a source-chain order escrow."""

    CREATED = "created"
    PARTIALLY_FILLED = "partially_filled"
    CLOSED = "closed"
    CANCELLED = "cancelled"
    CANCELLED_BY_RESOLVER = "cancelled_by_resolver"

    @property
    def is_terminal(self) -> bool:
        return self not in (OrderEscrowState.CREATED, OrderEscrowState.PARTIALLY_FILLED)


@dataclass
class OrderEscrowRecord:
    """Custody held by the source chain for one order."""

    maker: str
    order: Order
    accounts: OrderAccounts
    order_hash: bytes
    address: str
    """Deterministic custody address derived from maker and order hash."""

    remaining: int
    """Source asset still held."""

    collateral: int
    """Native units held to fund the resolver cancellation premium."""

    state: OrderEscrowState = OrderEscrowState.CREATED


class EscrowState(Enum):
    """Lifecycle of a destination-chain hash-time-lock escrow."""

    CREATED = "created"
    CLAIMED = "claimed"
    REFUNDED = "refunded"


@dataclass
class EscrowRecord:
    """Hash-time-locked deposit on the destination chain."""

    id: int
    token: str
    amount: int
    depositor: str
    """Resolver who locked the funds."""

    beneficiary: str
    """Maker who may claim with the secret."""

    hash_lock: bytes
    """SHA-256 of the secret (32 bytes)."""

    expiration: int
    """Unix timestamp; claim before it, refund from it on."""

    src_chain_id: int
    """Chain id of the linked source order."""

    order_hash: bytes
    """Fingerprint of the linked source order."""

    is_claimed: bool = False
    """True once either terminal transition happened."""

    state: EscrowState = EscrowState.CREATED


@dataclass(frozen=True)
class FillResult:
    """Outcome of a single fill."""

    src_amount: int
    """Source asset delivered to the taker."""

    dst_amount: int
    """Destination asset paid by the taker, before the fee split."""

    fees: FeeSplit
    remaining: int
    """Source asset left in the escrow after this fill."""

    state: OrderEscrowState
