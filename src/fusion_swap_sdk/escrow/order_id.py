"""Order fingerprint for the fusion swap escrows.

The order hash binds every immutable term of an order together with the
identities it pays out to. It provides:
- A deterministic seed for the escrow's custody address
- Tamper evidence on every fill/cancel (terms are re-hashed and must match)
- Cross-chain linkage (the destination HTLC records the same hash)
"""

import hashlib
from typing import Optional, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import is_address, to_checksum_address

from .types import Order, OrderAccounts
from .utils import ZERO_ADDRESS

ORDER_ABI_TYPES = [
    "uint32",  # id
    "uint64",  # src_amount
    "uint64",  # min_dst_amount
    "uint64",  # estimated_dst_amount
    "uint32",  # expiration_time
    "bool",  # src_asset_is_native
    "bool",  # dst_asset_is_native
    "(uint16,uint16,uint8,uint64)",  # fee
    "(uint32,uint32,uint16,(uint16,uint16)[])",  # auction
    "uint32",  # cancellation_auction_duration
]

ACCOUNTS_ABI_TYPES = [
    "(bool,address)",  # protocol_dst
    "(bool,address)",  # integrator_dst
    "address",  # src_asset
    "address",  # dst_asset
    "address",  # receiver
]


def normalize_address(address: str, name: str = "address") -> str:
    """Validate an address and return it in checksum form.

    Raises:
        ValueError: If the address is invalid
    """
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"Invalid {name}: {address}")
    return to_checksum_address(address)


def _optional_address(address: Optional[str], name: str):
    if address is None:
        return (False, ZERO_ADDRESS)
    return (True, normalize_address(address, name))


def encode_order(order: Order, accounts: OrderAccounts) -> bytes:
    """ABI-encode order terms followed by the bound identities.

    Raises:
        ValueError: If an address is invalid or a term exceeds its integer width
    """
    fee = order.fee
    auction = order.auction
    order_values = [
        order.id,
        order.src_amount,
        order.min_dst_amount,
        order.estimated_dst_amount,
        order.expiration_time,
        order.src_asset_is_native,
        order.dst_asset_is_native,
        (
            fee.protocol_fee,
            fee.integrator_fee,
            fee.surplus_percentage,
            fee.max_cancellation_premium,
        ),
        (
            auction.start_time,
            auction.duration,
            auction.initial_rate_bump,
            [(p.rate_bump, p.time_delta) for p in auction.points],
        ),
        order.cancellation_auction_duration,
    ]
    accounts_values = [
        _optional_address(accounts.protocol_dst, "protocol_dst"),
        _optional_address(accounts.integrator_dst, "integrator_dst"),
        normalize_address(accounts.src_asset, "src_asset"),
        normalize_address(accounts.dst_asset, "dst_asset"),
        normalize_address(accounts.receiver, "receiver"),
    ]

    try:
        return encode(
            ORDER_ABI_TYPES + ACCOUNTS_ABI_TYPES, order_values + accounts_values
        )
    except EncodingError as exc:
        raise ValueError(f"Order terms out of range: {exc}") from exc


def compute_order_hash(order: Order, accounts: OrderAccounts) -> bytes:
    """Compute the 32-byte fingerprint of an order.

    Args:
        order: Immutable order terms
        accounts: Recipients and assets bound to the order

    Returns:
        SHA-256 digest of the encoded order

    Raises:
        ValueError: If an address is invalid or a term exceeds its integer width
    """
    return hashlib.sha256(encode_order(order, accounts)).digest()


def order_hash_hex(order_hash: bytes) -> str:
    """Render an order hash as a 0x-prefixed hex string."""
    return "0x" + order_hash.hex()


def parse_order_hash(order_hash: Union[bytes, str]) -> bytes:
    """Accept an order hash as bytes or (0x-prefixed) hex string.

    Raises:
        ValueError: If the value is not 32 bytes
    """
    if isinstance(order_hash, str):
        order_hash = bytes.fromhex(
            order_hash[2:] if order_hash.startswith("0x") else order_hash
        )
    if len(order_hash) != 32:
        raise ValueError(f"Invalid order hash length: {len(order_hash)}")
    return bytes(order_hash)


def verify_order_hash(
    order_hash: Union[bytes, str], order: Order, accounts: OrderAccounts
) -> bool:
    """Verify an order hash matches the given terms.

    Returns:
        True if the hash matches, False otherwise
    """
    try:
        return parse_order_hash(order_hash) == compute_order_hash(order, accounts)
    except ValueError:
        return False
