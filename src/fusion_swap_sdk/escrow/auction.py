"""Dutch auction pricing and cancellation premium curves.

Both curves are pure functions of a caller-supplied timestamp; nothing here
reads a clock.
"""

from typing import Optional

from .types import AuctionCurve, Order
from .utils import BASE_1E5, mul_div_ceil


def calculate_rate_bump(timestamp: int, curve: AuctionCurve) -> int:
    """Evaluate the auction's rate bump at ``timestamp``.

    The curve starts at ``initial_rate_bump``, passes through each checkpoint
    and reaches zero at ``start_time + duration``. Between points the value is
    linearly interpolated and truncated toward zero.

    Callers must keep every rate bump within uint16 and the timestamp within
    40 bits, so ``timestamp * rate_bump`` stays below 2**64.

    Args:
        timestamp: Unix timestamp to evaluate at
        curve: Auction curve

    Returns:
        Rate bump where 100000 = 100%
    """
    if timestamp <= curve.start_time:
        return curve.initial_rate_bump
    auction_finish_time = curve.start_time + curve.duration
    if timestamp >= auction_finish_time:
        return 0

    current_rate_bump = curve.initial_rate_bump
    current_point_time = curve.start_time

    for point in curve.points:
        next_rate_bump = point.rate_bump
        next_point_time = current_point_time + point.time_delta

        if timestamp <= next_point_time:
            # current_point_time < timestamp <= next_point_time, so time_delta != 0
            return (
                (timestamp - current_point_time) * next_rate_bump
                + (next_point_time - timestamp) * current_rate_bump
            ) // point.time_delta

        current_rate_bump = next_rate_bump
        current_point_time = next_point_time

    return (
        current_rate_bump
        * (auction_finish_time - timestamp)
        // (auction_finish_time - current_point_time)
    )


def get_dst_amount(
    initial_src_amount: int,
    initial_dst_amount: int,
    src_amount: int,
    curve: Optional[AuctionCurve] = None,
    timestamp: Optional[int] = None,
) -> int:
    """Amount of destination asset owed for ``src_amount`` of source asset.

    The proportional share is rounded up so the maker is never short-changed.
    With a curve, the share is bumped by the rate at ``timestamp`` (rounded up
    again).

    Args:
        initial_src_amount: Order's full source amount (must be nonzero)
        initial_dst_amount: Destination amount for the full source amount
        src_amount: Source amount being filled
        curve: Optional auction curve
        timestamp: Evaluation time, required when ``curve`` is given

    Returns:
        Destination amount

    Raises:
        ArithmeticOverflowError: If a result exceeds uint64
    """
    result = mul_div_ceil(initial_dst_amount, src_amount, initial_src_amount)

    if curve is not None:
        if timestamp is None:
            raise ValueError("timestamp is required to price against a curve")
        rate_bump = calculate_rate_bump(timestamp, curve)
        result = mul_div_ceil(result, BASE_1E5 + rate_bump, BASE_1E5)
    return result


def priced_amount(order: Order, src_amount: int, timestamp: int) -> int:
    """Taker-facing quote: minimum destination amount bumped by the auction."""
    return get_dst_amount(
        order.src_amount, order.min_dst_amount, src_amount, order.auction, timestamp
    )


def estimated_amount(order: Order, src_amount: int) -> int:
    """Maker's estimated quote for ``src_amount``; the surplus baseline.

    Recomputed on every fill rather than snapshotted at creation.
    """
    return get_dst_amount(order.src_amount, order.estimated_dst_amount, src_amount)


def calculate_premium(
    timestamp: int,
    auction_start_time: int,
    auction_duration: int,
    max_cancellation_premium: int,
) -> int:
    """Resolver reward for cancelling an expired order at ``timestamp``.

    Zero until the start, ramps linearly over ``auction_duration`` and stays
    at ``max_cancellation_premium`` afterwards.
    """
    if timestamp <= auction_start_time:
        return 0

    time_elapsed = timestamp - auction_start_time
    if time_elapsed >= auction_duration:
        return max_cancellation_premium

    return time_elapsed * max_cancellation_premium // auction_duration
