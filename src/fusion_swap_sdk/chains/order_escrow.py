"""Source-chain order escrow with Dutch auction pricing.

The maker deposits the full source amount into a custody address derived
from the order hash. Resolvers fill it in one or more steps, paying the
destination asset at the current auction price; the maker can cancel at any
time, and once the order expires any resolver may cancel it in exchange for
a premium taken from the maker's collateral.
"""

import dataclasses
import logging
import threading
from typing import Dict, Optional, Union

from ..config import ResolvedSwapConfig, SwapConfig, resolve_config
from ..escrow.auction import calculate_premium, estimated_amount, priced_amount
from ..escrow.errors import (
    CancelOrderByResolverIsForbidden,
    EscrowAlreadyExists,
    EscrowNotActive,
    EscrowNotFound,
    FusionError,
    InconsistentIntegratorFeeConfig,
    InconsistentNativeDstTrait,
    InconsistentNativeSrcTrait,
    InconsistentProtocolFeeConfig,
    InvalidAmount,
    InvalidCancellationFee,
    InvalidEstimatedTakingAmount,
    InvalidProtocolSurplusFee,
    NotEnoughTokensInEscrow,
    OrderExpired,
    OrderHashMismatch,
    OrderNotExpired,
)
from ..escrow.fees import get_fee_amounts
from ..escrow.order_id import (
    compute_order_hash,
    normalize_address,
    order_hash_hex,
    parse_order_hash,
)
from ..escrow.types import (
    FillResult,
    Order,
    OrderAccounts,
    OrderEscrowRecord,
    OrderEscrowState,
)
from ..escrow.utils import BASE_1E2, NATIVE_ASSET
from .clock import Clock, SystemClock
from .directory import AccountDirectory, DeterministicDirectory
from .ledger import Ledger, NativeTransfer, asset_transfer, execute_transfer
from .whitelist import ResolverWhitelist

logger = logging.getLogger(__name__)


class OrderEscrowProgram:
    """Source-chain escrow program.

    Example:
        ```python
        program = OrderEscrowProgram(ledger, clock=clock)

        order_hash = program.create(maker, order, accounts, collateral=10_000)
        program.fill(resolver, maker, order, accounts, amount=order.src_amount // 2)
        program.cancel(maker, order_hash)
        ```

    Every operation runs under the program lock and inside ``ledger.atomic()``:
    it either applies all of its transfers and its state transition, or none.
    """

    def __init__(
        self,
        ledger: Ledger,
        clock: Optional[Clock] = None,
        config: Optional[SwapConfig] = None,
        directory: Optional[AccountDirectory] = None,
        whitelist: Optional[ResolverWhitelist] = None,
    ):
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.config: ResolvedSwapConfig = resolve_config(config)
        self.directory = directory or DeterministicDirectory(
            self.config.program_address
        )
        if self.config.enforce_whitelist and whitelist is None:
            raise ValueError("enforce_whitelist requires a ResolverWhitelist")
        self.whitelist = whitelist if self.config.enforce_whitelist else None

        self._escrows: Dict[str, OrderEscrowRecord] = {}
        self._lock = threading.RLock()

    def find_escrow_address(self, maker: str, order_hash: Union[bytes, str]) -> str:
        return self.directory.escrow_address(
            normalize_address(maker, "maker"), parse_order_hash(order_hash)
        )

    def get_order_escrow(
        self, maker: str, order_hash: Union[bytes, str]
    ) -> OrderEscrowRecord:
        """Return a snapshot of the escrow record for an order.

        Raises:
            EscrowNotFound: If no escrow was ever created for the order
        """
        with self._lock:
            return dataclasses.replace(self._find(maker, order_hash))

    def create(
        self,
        maker: str,
        order: Order,
        accounts: OrderAccounts,
        collateral: int = 0,
    ) -> bytes:
        """Validate an order and move the maker's source asset into custody.

        Args:
            maker: Address funding the escrow
            order: Order terms
            accounts: Assets, receiver and fee recipients bound to the order
            collateral: Native units deposited alongside to fund a resolver
                cancellation premium

        Returns:
            The order hash

        Raises:
            ValidationError: If the terms are inconsistent or expired
            EscrowAlreadyExists: If the same order is already active
            InsufficientFunds: If the maker cannot cover amount and collateral
        """
        maker = normalize_address(maker, "maker")
        with self._lock, self.ledger.atomic():
            try:
                self.ledger.require_auth(maker)
                self._validate_new_order(order, accounts, collateral, self.clock.now())

                order_hash = compute_order_hash(order, accounts)
                address = self.directory.escrow_address(maker, order_hash)
                existing = self._escrows.get(address)
                if existing is not None and not existing.state.is_terminal:
                    raise EscrowAlreadyExists(f"Escrow {address} is already active")

                # Maker => Escrow
                execute_transfer(
                    self.ledger,
                    asset_transfer(
                        accounts.src_asset,
                        order.src_asset_is_native,
                        maker,
                        address,
                        order.src_amount,
                    ),
                )
                if collateral > 0:
                    execute_transfer(
                        self.ledger, NativeTransfer(maker, address, collateral)
                    )
            except FusionError as exc:
                logger.warning("Order %s rejected at create: %s", order.id, exc)
                raise

            self._escrows[address] = OrderEscrowRecord(
                maker=maker,
                order=order,
                accounts=accounts,
                order_hash=order_hash,
                address=address,
                remaining=order.src_amount,
                collateral=collateral,
            )

        logger.info(
            "Order escrow created: %s maker=%s src_amount=%d",
            order_hash_hex(order_hash),
            maker,
            order.src_amount,
        )
        return order_hash

    def fill(
        self,
        taker: str,
        maker: str,
        order: Order,
        accounts: OrderAccounts,
        amount: int,
    ) -> FillResult:
        """Sell ``amount`` of the escrowed source asset to the taker.

        The taker pays the destination asset at the current auction price,
        split between the maker's receiver, the protocol and the integrator.

        Raises:
            OrderExpired: If the order's expiration has passed
            OrderHashMismatch: If the terms do not address an escrow
            EscrowNotActive: If the escrow was closed or cancelled
            NotEnoughTokensInEscrow: If ``amount`` exceeds the remaining balance
            InvalidAmount: If ``amount`` is zero
            Unauthorized: If the taker did not sign or is not whitelisted
            InsufficientFunds: If the taker cannot pay the destination amount
        """
        taker = normalize_address(taker, "taker")
        maker = normalize_address(maker, "maker")
        with self._lock, self.ledger.atomic():
            try:
                self._require_resolver(taker)
                now = self.clock.now()
                if now >= order.expiration_time:
                    raise OrderExpired()

                record = self._lookup(maker, order, accounts)
                if amount > record.remaining:
                    raise NotEnoughTokensInEscrow(
                        f"Requested {amount}, escrow holds {record.remaining}"
                    )
                if amount == 0:
                    raise InvalidAmount()

                # Escrow => Taker
                execute_transfer(
                    self.ledger,
                    asset_transfer(
                        accounts.src_asset,
                        order.src_asset_is_native,
                        record.address,
                        taker,
                        amount,
                    ),
                )

                dst_amount = priced_amount(order, amount, now)
                fees = get_fee_amounts(
                    dst_amount, estimated_amount(order, amount), order.fee
                )

                # Taker => Maker
                params = asset_transfer(
                    accounts.dst_asset,
                    order.dst_asset_is_native,
                    taker,
                    accounts.receiver,
                    fees.maker_amount,
                )
                execute_transfer(self.ledger, params)

                if fees.protocol_amount > 0:
                    if accounts.protocol_dst is None:
                        raise InconsistentProtocolFeeConfig()
                    execute_transfer(
                        self.ledger,
                        dataclasses.replace(
                            params,
                            destination=accounts.protocol_dst,
                            amount=fees.protocol_amount,
                        ),
                    )

                if fees.integrator_amount > 0:
                    if accounts.integrator_dst is None:
                        raise InconsistentIntegratorFeeConfig()
                    execute_transfer(
                        self.ledger,
                        dataclasses.replace(
                            params,
                            destination=accounts.integrator_dst,
                            amount=fees.integrator_amount,
                        ),
                    )

                remaining = record.remaining - amount
                if remaining == 0:
                    # Close escrow, collateral goes back to the maker
                    if record.collateral > 0:
                        execute_transfer(
                            self.ledger,
                            NativeTransfer(record.address, maker, record.collateral),
                        )
            except FusionError as exc:
                logger.warning("Fill rejected for order %s: %s", order.id, exc)
                raise

            record.remaining = remaining
            if remaining == 0:
                record.collateral = 0
                record.state = OrderEscrowState.CLOSED
            else:
                record.state = OrderEscrowState.PARTIALLY_FILLED

        logger.info(
            "Order %s filled: amount=%d dst_amount=%d remaining=%d state=%s",
            order_hash_hex(record.order_hash),
            amount,
            dst_amount,
            remaining,
            record.state.value,
        )
        return FillResult(
            src_amount=amount,
            dst_amount=dst_amount,
            fees=fees,
            remaining=remaining,
            state=record.state,
        )

    def cancel(self, maker: str, order_hash: Union[bytes, str]) -> int:
        """Return the unfilled balance and collateral to the maker.

        Returns:
            Source amount refunded

        Raises:
            EscrowNotFound: If the maker has no escrow for ``order_hash``
            EscrowNotActive: If the escrow was already closed or cancelled
            Unauthorized: If the maker did not sign
        """
        maker = normalize_address(maker, "maker")
        order_hash = parse_order_hash(order_hash)
        with self._lock, self.ledger.atomic():
            try:
                self.ledger.require_auth(maker)
                record = self._find(maker, order_hash)
                if record.state.is_terminal:
                    raise EscrowNotActive(f"Escrow is {record.state.value}")

                refunded = record.remaining
                self._refund_source(record)
                if record.collateral > 0:
                    execute_transfer(
                        self.ledger,
                        NativeTransfer(record.address, maker, record.collateral),
                    )
            except FusionError as exc:
                logger.warning(
                    "Cancel rejected for %s: %s", order_hash_hex(order_hash), exc
                )
                raise

            record.remaining = 0
            record.collateral = 0
            record.state = OrderEscrowState.CANCELLED

        logger.info(
            "Order %s cancelled by maker: refunded=%d",
            order_hash_hex(order_hash),
            refunded,
        )
        return refunded

    def cancel_by_resolver(
        self,
        resolver: str,
        maker: str,
        order: Order,
        accounts: OrderAccounts,
        reward_limit: int,
    ) -> int:
        """Cancel an expired order on the maker's behalf for a premium.

        The unfilled balance goes back to the maker. The resolver receives the
        cancellation premium at the current time, capped by ``reward_limit``,
        out of the collateral; the maker gets the rest of the collateral.

        Returns:
            Premium paid to the resolver

        Raises:
            InvalidAmount: If ``reward_limit`` is negative
            CancelOrderByResolverIsForbidden: If the maker set no premium
            OrderNotExpired: If the order can still be filled
            OrderHashMismatch: If the terms do not address an escrow
            EscrowNotActive: If the escrow was already closed or cancelled
            Unauthorized: If the resolver did not sign or is not whitelisted
        """
        resolver = normalize_address(resolver, "resolver")
        maker = normalize_address(maker, "maker")
        with self._lock, self.ledger.atomic():
            try:
                self._require_resolver(resolver)
                if reward_limit < 0:
                    raise InvalidAmount(f"Negative reward limit: {reward_limit}")
                if order.fee.max_cancellation_premium == 0:
                    raise CancelOrderByResolverIsForbidden()
                now = self.clock.now()
                if now < order.expiration_time:
                    raise OrderNotExpired()

                record = self._lookup(maker, order, accounts)
                self._refund_source(record)

                premium = min(
                    calculate_premium(
                        now,
                        order.expiration_time,
                        order.cancellation_auction_duration,
                        order.fee.max_cancellation_premium,
                    ),
                    reward_limit,
                )
                if premium > 0:
                    execute_transfer(
                        self.ledger, NativeTransfer(record.address, resolver, premium)
                    )
                if record.collateral - premium > 0:
                    execute_transfer(
                        self.ledger,
                        NativeTransfer(
                            record.address, maker, record.collateral - premium
                        ),
                    )
            except FusionError as exc:
                logger.warning(
                    "Resolver cancel rejected for order %s: %s", order.id, exc
                )
                raise

            record.remaining = 0
            record.collateral = 0
            record.state = OrderEscrowState.CANCELLED_BY_RESOLVER

        logger.info(
            "Order %s cancelled by resolver %s: premium=%d",
            order_hash_hex(record.order_hash),
            resolver,
            premium,
        )
        return premium

    def _require_resolver(self, resolver: str) -> None:
        self.ledger.require_auth(resolver)
        if self.whitelist is not None:
            self.whitelist.require_access(resolver)

    def _find(self, maker: str, order_hash: Union[bytes, str]) -> OrderEscrowRecord:
        address = self.find_escrow_address(maker, order_hash)
        record = self._escrows.get(address)
        if record is None:
            raise EscrowNotFound(f"No escrow at {address}")
        return record

    def _lookup(
        self, maker: str, order: Order, accounts: OrderAccounts
    ) -> OrderEscrowRecord:
        # Terms are re-hashed on every call; tampered terms address nothing
        order_hash = compute_order_hash(order, accounts)
        address = self.directory.escrow_address(maker, order_hash)
        record = self._escrows.get(address)
        if record is None:
            raise OrderHashMismatch(
                f"No escrow for order hash {order_hash_hex(order_hash)}"
            )
        if record.state.is_terminal:
            raise EscrowNotActive(f"Escrow is {record.state.value}")
        return record

    def _refund_source(self, record: OrderEscrowRecord) -> None:
        if record.remaining == 0:
            return
        execute_transfer(
            self.ledger,
            asset_transfer(
                record.accounts.src_asset,
                record.order.src_asset_is_native,
                record.address,
                record.maker,
                record.remaining,
            ),
        )

    @staticmethod
    def _validate_new_order(
        order: Order, accounts: OrderAccounts, collateral: int, now: int
    ) -> None:
        if order.src_amount == 0 or order.min_dst_amount == 0:
            raise InvalidAmount()

        src_asset = normalize_address(accounts.src_asset, "src_asset")
        dst_asset = normalize_address(accounts.dst_asset, "dst_asset")
        # Only the canonical native identity may be flagged native
        if order.src_asset_is_native and src_asset != NATIVE_ASSET:
            raise InconsistentNativeSrcTrait()
        if order.dst_asset_is_native and dst_asset != NATIVE_ASSET:
            raise InconsistentNativeDstTrait()

        if now >= order.expiration_time:
            raise OrderExpired()

        if order.fee.surplus_percentage > BASE_1E2:
            raise InvalidProtocolSurplusFee()

        if order.estimated_dst_amount < order.min_dst_amount:
            raise InvalidEstimatedTakingAmount()

        fee = order.fee
        if (fee.protocol_fee > 0 or fee.surplus_percentage > 0) != (
            accounts.protocol_dst is not None
        ):
            raise InconsistentProtocolFeeConfig()
        if (fee.integrator_fee > 0) != (accounts.integrator_dst is not None):
            raise InconsistentIntegratorFeeConfig()

        if collateral < 0 or collateral < fee.max_cancellation_premium:
            raise InvalidCancellationFee()
