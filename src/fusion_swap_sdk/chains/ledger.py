"""Ledger collaborator: value transfers and caller authorization.

The escrow programs never hold balances themselves. They describe each
movement as a ``NativeTransfer`` or ``TokenTransfer`` and hand it to
``execute_transfer``; the ledger decides whether it can be applied.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Protocol, Set, Tuple, Union

from eth_utils import to_checksum_address

from ..escrow.errors import InsufficientFunds, InvalidAmount, Unauthorized
from ..escrow.utils import NATIVE_ASSET

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeTransfer:
    """Move native coin between two accounts."""

    source: str
    destination: str
    amount: int


@dataclass(frozen=True)
class TokenTransfer:
    """Move a token between two accounts."""

    token: str
    source: str
    destination: str
    amount: int


Transfer = Union[NativeTransfer, TokenTransfer]


def asset_transfer(
    asset: str, is_native: bool, source: str, destination: str, amount: int
) -> Transfer:
    """Build the transfer variant matching an asset's nativity."""
    if is_native:
        return NativeTransfer(source=source, destination=destination, amount=amount)
    return TokenTransfer(
        token=asset, source=source, destination=destination, amount=amount
    )


class Ledger(Protocol):
    """Execution environment the escrow programs run against."""

    def balance_of(self, asset: str, holder: str) -> int:
        ...

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> None:
        ...

    def require_auth(self, address: str) -> None:
        """Raise ``Unauthorized`` unless ``address`` signed the current call."""
        ...

    def atomic(self):
        """Context manager undoing every transfer made inside it on error."""
        ...


def execute_transfer(ledger: Ledger, transfer: Transfer) -> None:
    """Apply a transfer variant to the ledger."""
    if isinstance(transfer, NativeTransfer):
        asset = NATIVE_ASSET
    else:
        asset = transfer.token
    ledger.transfer(asset, transfer.source, transfer.destination, transfer.amount)


class InMemoryLedger:
    """Dictionary-backed ledger for tests and simulations.

    Usage:
        ledger = InMemoryLedger()
        ledger.mint(USDC, alice, 1_000_000)
        ledger.authorize(alice)

        with ledger.atomic():
            ledger.transfer(USDC, alice, bob, 500_000)
    """

    def __init__(self):
        self._balances: Dict[Tuple[str, str], int] = {}
        self._authorized: Set[str] = set()
        self._lock = threading.RLock()

    @staticmethod
    def _key(asset: str, holder: str) -> Tuple[str, str]:
        return to_checksum_address(asset), to_checksum_address(holder)

    def balance_of(self, asset: str, holder: str) -> int:
        with self._lock:
            return self._balances.get(self._key(asset, holder), 0)

    def mint(self, asset: str, holder: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"Cannot mint negative amount: {amount}")
        key = self._key(asset, holder)
        with self._lock:
            self._balances[key] = self._balances.get(key, 0) + amount

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"Cannot transfer negative amount: {amount}")
        source_key = self._key(asset, source)
        destination_key = self._key(asset, destination)
        with self._lock:
            available = self._balances.get(source_key, 0)
            if available < amount:
                raise InsufficientFunds(
                    f"{source} holds {available} of {asset}, needs {amount}"
                )
            self._balances[source_key] = available - amount
            self._balances[destination_key] = (
                self._balances.get(destination_key, 0) + amount
            )
        logger.debug("transfer %s %s: %s -> %s", amount, asset, source, destination)

    def authorize(self, *addresses: str) -> None:
        """Treat ``addresses`` as signers of subsequent calls."""
        self._authorized.update(to_checksum_address(a) for a in addresses)

    def revoke(self, *addresses: str) -> None:
        self._authorized.difference_update(to_checksum_address(a) for a in addresses)

    def require_auth(self, address: str) -> None:
        if to_checksum_address(address) not in self._authorized:
            raise Unauthorized(f"Missing authorization from {address}")

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Hold the ledger for the whole block and roll back its balances on error.

        Other writers, including programs sharing this ledger, wait until the
        block exits.
        """
        with self._lock:
            snapshot = dict(self._balances)
            try:
                yield
            except BaseException:
                self._balances = snapshot
                raise
