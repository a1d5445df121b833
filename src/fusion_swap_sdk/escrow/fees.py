"""Fee allocation for filled orders."""

from .errors import ArithmeticOverflowError
from .types import FeeConfig, FeeSplit
from .utils import BASE_1E2, BASE_1E5, mul_div_floor


def get_fee_amounts(
    dst_amount: int, estimated_dst_amount: int, fee: FeeConfig
) -> FeeSplit:
    """Split a destination amount between protocol, integrator and maker.

    Protocol and integrator fees are taken first (rounded down). If what is
    left for the maker beats the estimated amount, ``surplus_percentage`` of
    the difference goes to the protocol as well. The maker receives the rest,
    so the three shares always sum to ``dst_amount``.

    Args:
        dst_amount: Destination amount paid by the taker
        estimated_dst_amount: Maker's estimate for the same fill
        fee: Order fee configuration

    Returns:
        FeeSplit with protocol, integrator and maker shares

    Raises:
        ArithmeticOverflowError: If fees exceed the amount or a product overflows
    """
    integrator_amount = mul_div_floor(dst_amount, fee.integrator_fee, BASE_1E5)
    protocol_amount = mul_div_floor(dst_amount, fee.protocol_fee, BASE_1E5)

    actual_dst_amount = dst_amount - protocol_amount - integrator_amount
    if actual_dst_amount < 0:
        raise ArithmeticOverflowError("Fees exceed the destination amount")

    if actual_dst_amount > estimated_dst_amount:
        protocol_amount += mul_div_floor(
            actual_dst_amount - estimated_dst_amount,
            fee.surplus_percentage,
            BASE_1E2,
        )

    return FeeSplit(
        protocol_amount=protocol_amount,
        integrator_amount=integrator_amount,
        maker_amount=dst_amount - integrator_amount - protocol_amount,
    )
