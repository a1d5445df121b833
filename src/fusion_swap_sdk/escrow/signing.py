"""Order Authorization Signing for the fusion swap escrows.

Makers sign the order hash with EIP-712 so that resolvers can relay the
order off-chain and check who stands behind it before locking funds on the
destination chain.
"""

from dataclasses import dataclass
from typing import Any, Dict, TypedDict

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import is_address, to_checksum_address

from .order_id import order_hash_hex
from .types import Order


ORDER_AUTHORIZATION_TYPES = {
    "OrderAuthorization": [
        {"name": "orderHash", "type": "bytes32"},
        {"name": "maker", "type": "address"},
        {"name": "orderId", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
    ],
}


class EIP712Domain(TypedDict):
    """EIP-712 domain separator."""

    name: str
    version: str
    chainId: int
    verifyingContract: str


@dataclass
class OrderAuthorization:
    """Order authorization to be signed by the maker."""

    order_hash: str
    """Order hash (bytes32 hex string)."""

    maker: str
    """Address of the maker funding the source escrow."""

    order_id: int
    """Maker-chosen order id."""

    deadline: int
    """Unix timestamp after which the authorization is void (order expiration)."""


@dataclass
class SignedOrderAuthorization(OrderAuthorization):
    """Order authorization with signature."""

    signature: str
    """EIP-712 signature (65 bytes packed hex string)."""


def create_eip712_domain(program_address: str, chain_id: int) -> EIP712Domain:
    """Create EIP-712 domain for the source-chain escrow program.

    Raises:
        ValueError: If program address is invalid
    """
    if not is_address(program_address):
        raise ValueError(f"Invalid program address: {program_address}")

    return {
        "name": "FusionSwapEscrow",
        "version": "1",
        "chainId": chain_id,
        "verifyingContract": to_checksum_address(program_address),
    }


def create_order_authorization(
    order_hash: bytes, maker: str, order: Order
) -> OrderAuthorization:
    """Create an order authorization object.

    Raises:
        ValueError: If maker address is invalid or the hash is not 32 bytes
    """
    if not is_address(maker):
        raise ValueError(f"Invalid maker address: {maker}")
    if len(order_hash) != 32:
        raise ValueError(f"Invalid order hash length: {len(order_hash)}")

    return OrderAuthorization(
        order_hash=order_hash_hex(order_hash),
        maker=to_checksum_address(maker),
        order_id=order.id,
        deadline=order.expiration_time,
    )


def _message(auth: OrderAuthorization) -> Dict[str, Any]:
    return {
        "orderHash": auth.order_hash,
        "maker": auth.maker,
        "orderId": auth.order_id,
        "deadline": auth.deadline,
    }


def sign_order_authorization(
    private_key: str,
    program_address: str,
    auth: OrderAuthorization,
    chain_id: int,
) -> SignedOrderAuthorization:
    """Sign an order authorization with EIP-712 using a private key.

    Args:
        private_key: Private key (hex string with or without 0x prefix)
        program_address: Address of the source-chain escrow program
        auth: Order authorization to sign
        chain_id: Source chain id

    Returns:
        SignedOrderAuthorization with signature
    """
    domain = create_eip712_domain(program_address, chain_id)

    account = Account.from_key(private_key)
    signed_message = account.sign_typed_data(
        domain_data=domain,
        message_types=ORDER_AUTHORIZATION_TYPES,
        message_data=_message(auth),
    )

    return SignedOrderAuthorization(
        order_hash=auth.order_hash,
        maker=auth.maker,
        order_id=auth.order_id,
        deadline=auth.deadline,
        signature=signed_message.signature.hex(),
    )


def verify_order_authorization_signature(
    signed_auth: SignedOrderAuthorization,
    program_address: str,
    chain_id: int,
    expected_signer: str,
) -> bool:
    """Verify an order authorization signature locally.

    Returns:
        True if the signature is valid and from ``expected_signer``
    """
    domain = create_eip712_domain(program_address, chain_id)

    signable_message = encode_typed_data(
        domain_data=domain,
        message_types=ORDER_AUTHORIZATION_TYPES,
        message_data=_message(signed_auth),
    )
    signature = signed_auth.signature
    try:
        recovered = Account.recover_message(
            signable_message,
            signature=bytes.fromhex(
                signature[2:] if signature.startswith("0x") else signature
            ),
        )
    except Exception:
        return False
    return recovered.lower() == expected_signer.lower()
