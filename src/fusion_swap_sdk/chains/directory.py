"""Account Directory: deterministic custody addresses for order escrows."""

from typing import Protocol

from eth_utils import keccak, to_canonical_address, to_checksum_address

ESCROW_SEED = b"escrow"


class AccountDirectory(Protocol):
    def escrow_address(self, maker: str, order_hash: bytes) -> str:
        ...


class DeterministicDirectory:
    """Derives custody addresses the way a program-derived address would.

    address = keccak256("escrow" || program || maker || order_hash)[12:]

    The address is a pure function of the maker and the order hash, so any
    caller holding the order terms can locate the escrow without stored
    state.
    """

    def __init__(self, program_address: str):
        self.program_address = to_checksum_address(program_address)

    def escrow_address(self, maker: str, order_hash: bytes) -> str:
        if len(order_hash) != 32:
            raise ValueError(f"Invalid order hash length: {len(order_hash)}")
        digest = keccak(
            ESCROW_SEED
            + to_canonical_address(self.program_address)
            + to_canonical_address(maker)
            + order_hash
        )
        return to_checksum_address(digest[12:])
