"""Destination-chain hash-time-lock escrow.

A resolver locks the destination asset for the maker under ``H = SHA256(S)``.
The maker claims it by revealing ``S`` before the time lock expires; the
revealed secret is kept so that the resolver can observe it and settle the
linked source-chain order. After expiry, only the depositor can take the
funds back.
"""

import dataclasses
import hashlib
import logging
import secrets
import threading
from typing import Dict, Optional, Tuple, Union

from eth_utils import to_checksum_address

from ..config import ResolvedSwapConfig, SwapConfig, resolve_config
from ..escrow.errors import (
    AlreadyClaimed,
    AlreadyRefunded,
    EscrowNotFound,
    FusionError,
    InvalidAmount,
    InvalidDuration,
    InvalidHashLock,
    InvalidSecret,
    TimelockExpired,
    TimelockNotExpired,
    Unauthorized,
)
from ..escrow.order_id import normalize_address, parse_order_hash
from ..escrow.types import EscrowRecord, EscrowState
from .clock import Clock, SystemClock
from .ledger import Ledger, TokenTransfer, execute_transfer

logger = logging.getLogger(__name__)


def generate_secret() -> Tuple[bytes, bytes]:
    """Generate a random 32-byte secret S and its hash lock H = SHA256(S)."""
    secret = secrets.token_bytes(32)
    return secret, compute_hash_lock(secret)


def compute_hash_lock(secret: bytes) -> bytes:
    return hashlib.sha256(secret).digest()


def verify_preimage(hash_lock: bytes, secret: bytes) -> bool:
    """True if SHA256(secret) == hash_lock."""
    return secrets.compare_digest(compute_hash_lock(secret), hash_lock)


class HashTimeLockContract:
    """Hash-time-locked escrows keyed by a monotonically increasing id.

    Example:
        ```python
        htlc = HashTimeLockContract(ledger, clock=clock)
        secret, hash_lock = generate_secret()

        escrow_id = htlc.deposit(
            resolver, USDC, 100, maker, hash_lock, 3600,
            src_chain_id=1, order_hash=order_hash,
        )
        htlc.claim(escrow_id, secret, maker)
        assert htlc.get_secret(escrow_id) == secret
        ```
    """

    def __init__(
        self,
        ledger: Ledger,
        clock: Optional[Clock] = None,
        config: Optional[SwapConfig] = None,
    ):
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.config: ResolvedSwapConfig = resolve_config(config)
        self.address = to_checksum_address(self.config.htlc_address)

        self._escrows: Dict[int, EscrowRecord] = {}
        self._secrets: Dict[int, bytes] = {}
        self._counter = 0
        self._lock = threading.RLock()

    def deposit(
        self,
        depositor: str,
        token: str,
        amount: int,
        beneficiary: str,
        hash_lock: bytes,
        duration: int,
        src_chain_id: int,
        order_hash: Union[bytes, str],
    ) -> int:
        """Lock ``amount`` of ``token`` for ``beneficiary`` under ``hash_lock``.

        Args:
            depositor: Resolver funding the escrow
            token: Destination asset address
            amount: Amount to lock (positive)
            beneficiary: Maker allowed to claim with the secret
            hash_lock: SHA-256 of the secret (32 bytes)
            duration: Seconds until the depositor may refund
            src_chain_id: Chain id of the linked source order
            order_hash: Fingerprint of the linked source order

        Returns:
            New escrow id

        Raises:
            InvalidAmount: If amount is not positive
            InvalidDuration: If duration is outside the configured bounds
            InvalidHashLock: If hash_lock is not 32 bytes
            Unauthorized: If the depositor did not sign
        """
        depositor = normalize_address(depositor, "depositor")
        beneficiary = normalize_address(beneficiary, "beneficiary")
        token = normalize_address(token, "token")
        order_hash = parse_order_hash(order_hash)

        with self._lock, self.ledger.atomic():
            try:
                self.ledger.require_auth(depositor)
                if amount <= 0:
                    raise InvalidAmount("Amount must be positive")
                self._validate_duration(duration)
                if len(hash_lock) != 32:
                    raise InvalidHashLock()

                execute_transfer(
                    self.ledger, TokenTransfer(token, depositor, self.address, amount)
                )
            except FusionError as exc:
                logger.warning("Deposit rejected for %s: %s", depositor, exc)
                raise

            self._counter += 1
            escrow = EscrowRecord(
                id=self._counter,
                token=token,
                amount=amount,
                depositor=depositor,
                beneficiary=beneficiary,
                hash_lock=bytes(hash_lock),
                expiration=self.clock.now() + duration,
                src_chain_id=src_chain_id,
                order_hash=order_hash,
            )
            self._escrows[escrow.id] = escrow

        logger.info(
            "HTLC escrow %d created: amount=%d beneficiary=%s expiration=%d",
            escrow.id,
            amount,
            beneficiary,
            escrow.expiration,
        )
        return escrow.id

    def claim(self, escrow_id: int, secret: bytes, claimant: str) -> None:
        """Release the escrow to its beneficiary on presentation of the secret.

        Raises:
            EscrowNotFound: If no escrow has ``escrow_id``
            AlreadyClaimed / AlreadyRefunded: If the escrow is already settled
            Unauthorized: If the claimant did not sign or is not the beneficiary
            TimelockExpired: If the time lock has expired
            InvalidSecret: If SHA256(secret) does not match the hash lock
        """
        claimant = normalize_address(claimant, "claimant")
        with self._lock, self.ledger.atomic():
            try:
                self.ledger.require_auth(claimant)
                escrow = self._get_created(escrow_id)
                if claimant != escrow.beneficiary:
                    raise Unauthorized("Only beneficiary can claim")
                if self.clock.now() >= escrow.expiration:
                    raise TimelockExpired()
                if not verify_preimage(escrow.hash_lock, secret):
                    raise InvalidSecret()

                execute_transfer(
                    self.ledger,
                    TokenTransfer(
                        escrow.token, self.address, escrow.beneficiary, escrow.amount
                    ),
                )
            except FusionError as exc:
                logger.warning("Claim rejected for HTLC escrow %s: %s", escrow_id, exc)
                raise

            escrow.is_claimed = True
            escrow.state = EscrowState.CLAIMED
            self._secrets[escrow_id] = bytes(secret)

        logger.info("HTLC escrow %d claimed by %s", escrow_id, claimant)

    def refund(self, escrow_id: int, refunder: str) -> None:
        """Return an expired, unclaimed escrow to its depositor.

        Raises:
            EscrowNotFound: If no escrow has ``escrow_id``
            AlreadyClaimed / AlreadyRefunded: If the escrow is already settled
            Unauthorized: If the refunder did not sign or is not the depositor
            TimelockNotExpired: If the time lock is still running
        """
        refunder = normalize_address(refunder, "refunder")
        with self._lock, self.ledger.atomic():
            try:
                self.ledger.require_auth(refunder)
                escrow = self._get_created(escrow_id)
                if refunder != escrow.depositor:
                    raise Unauthorized("Only depositor can refund")
                if self.clock.now() < escrow.expiration:
                    raise TimelockNotExpired()

                execute_transfer(
                    self.ledger,
                    TokenTransfer(
                        escrow.token, self.address, escrow.depositor, escrow.amount
                    ),
                )
            except FusionError as exc:
                logger.warning("Refund rejected for HTLC escrow %s: %s", escrow_id, exc)
                raise

            # Shares the claimed flag so neither transition can follow the other
            escrow.is_claimed = True
            escrow.state = EscrowState.REFUNDED

        logger.info("HTLC escrow %d refunded to %s", escrow_id, refunder)

    def get_escrow(self, escrow_id: int) -> EscrowRecord:
        """Snapshot of an escrow; raises ``EscrowNotFound`` for unknown ids."""
        with self._lock:
            return dataclasses.replace(self._find(escrow_id))

    def get_secret(self, escrow_id: int) -> Optional[bytes]:
        """Secret revealed by the claim, or None while unclaimed."""
        return self._secrets.get(escrow_id)

    def is_active(self, escrow_id: int) -> bool:
        escrow = self._escrows.get(escrow_id)
        if escrow is None:
            return False
        return (
            escrow.state is EscrowState.CREATED
            and self.clock.now() < escrow.expiration
        )

    def get_escrow_counter(self) -> int:
        return self._counter

    def _find(self, escrow_id: int) -> EscrowRecord:
        escrow = self._escrows.get(escrow_id)
        if escrow is None:
            raise EscrowNotFound(f"Escrow {escrow_id} not found")
        return escrow

    def _get_created(self, escrow_id: int) -> EscrowRecord:
        escrow = self._find(escrow_id)
        if escrow.state is EscrowState.CLAIMED:
            raise AlreadyClaimed()
        if escrow.state is EscrowState.REFUNDED:
            raise AlreadyRefunded()
        return escrow

    def _validate_duration(self, duration: int) -> None:
        if duration <= 0 or duration < self.config.min_htlc_duration:
            raise InvalidDuration(
                f"Duration too short: {duration}s. "
                f"Minimum: {self.config.min_htlc_duration}s"
            )
        max_duration = self.config.max_htlc_duration
        if max_duration is not None and duration > max_duration:
            raise InvalidDuration(
                f"Duration too long: {duration}s. Maximum: {max_duration}s"
            )
