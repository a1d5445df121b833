"""Tests for the escrow math module."""

import dataclasses

import pytest
from eth_account import Account

from fusion_swap_sdk.escrow import (
    AuctionCurve,
    AuctionPoint,
    FeeConfig,
    Order,
    OrderAccounts,
    calculate_premium,
    calculate_rate_bump,
    compute_order_hash,
    create_eip712_domain,
    create_order_authorization,
    default_auction_curve,
    estimated_amount,
    format_fee,
    get_dst_amount,
    get_fee_amounts,
    mul_div_ceil,
    mul_div_floor,
    order_hash_hex,
    percent_to_fee,
    priced_amount,
    sign_order_authorization,
    verify_order_authorization_signature,
    verify_order_hash,
)
from fusion_swap_sdk.escrow.errors import ArithmeticOverflowError


# Test wallets (DO NOT use in production)
TEST_PRIVATE_KEY = "0x" + "ab" * 32  # Deterministic test key
TEST_ACCOUNT = Account.from_key(TEST_PRIVATE_KEY)
TEST_ADDRESS = TEST_ACCOUNT.address
RECEIVER = Account.from_key("0x" + "12" * 32).address
PROTOCOL = Account.from_key("0x" + "13" * 32).address
WETH = Account.from_key("0x" + "21" * 32).address
USDC = Account.from_key("0x" + "22" * 32).address
PROGRAM_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

START = 1_700_000_000

ACCOUNTS = OrderAccounts(src_asset=WETH, dst_asset=USDC, receiver=RECEIVER)


def make_order(**overrides) -> Order:
    order = Order(
        id=1,
        src_amount=1000,
        min_dst_amount=900,
        estimated_dst_amount=950,
        expiration_time=START + 3600,
        auction=AuctionCurve(start_time=START, duration=600, initial_rate_bump=1000),
    )
    return dataclasses.replace(order, **overrides)


# Curve with two checkpoints: 50% -> 20% over 10000s -> 10% over 20000s -> 0 over 2000s
STEPPED_CURVE = AuctionCurve(
    start_time=START,
    duration=32000,
    initial_rate_bump=50000,
    points=(
        AuctionPoint(rate_bump=20000, time_delta=10000),
        AuctionPoint(rate_bump=10000, time_delta=20000),
    ),
)


class TestOrderHash:
    """Tests for the order fingerprint."""

    def test_order_hash_basic(self):
        """Test basic order hash generation."""
        order_hash = compute_order_hash(make_order(), ACCOUNTS)

        assert isinstance(order_hash, bytes)
        assert len(order_hash) == 32
        assert order_hash_hex(order_hash).startswith("0x")
        assert len(order_hash_hex(order_hash)) == 66

    def test_order_hash_deterministic(self):
        """Test that order hash generation is deterministic."""
        assert compute_order_hash(make_order(), ACCOUNTS) == compute_order_hash(
            make_order(), ACCOUNTS
        )

    def test_order_hash_changes_with_terms(self):
        """Test that every bound term changes the hash."""
        base = compute_order_hash(make_order(), ACCOUNTS)

        variants = [
            make_order(id=2),
            make_order(src_amount=1001),
            make_order(min_dst_amount=901),
            make_order(estimated_dst_amount=951),
            make_order(expiration_time=START + 3601),
            make_order(fee=FeeConfig(max_cancellation_premium=1)),
            make_order(cancellation_auction_duration=60),
            make_order(
                auction=AuctionCurve(
                    start_time=START,
                    duration=600,
                    initial_rate_bump=1000,
                    points=(AuctionPoint(rate_bump=500, time_delta=300),),
                )
            ),
        ]
        hashes = {compute_order_hash(order, ACCOUNTS) for order in variants}

        assert base not in hashes
        assert len(hashes) == len(variants)

    def test_order_hash_changes_with_accounts(self):
        """Test that receiver, assets and fee recipients are bound."""
        base = compute_order_hash(make_order(), ACCOUNTS)

        assert compute_order_hash(
            make_order(), dataclasses.replace(ACCOUNTS, receiver=TEST_ADDRESS)
        ) != base
        assert compute_order_hash(
            make_order(), dataclasses.replace(ACCOUNTS, dst_asset=WETH)
        ) != base
        assert compute_order_hash(
            make_order(), dataclasses.replace(ACCOUNTS, protocol_dst=PROTOCOL)
        ) != base

    def test_order_hash_accepts_lowercase_addresses(self):
        """Test that address casing does not change the hash."""
        lowered = OrderAccounts(
            src_asset=WETH.lower(), dst_asset=USDC.lower(), receiver=RECEIVER.lower()
        )
        assert compute_order_hash(make_order(), lowered) == compute_order_hash(
            make_order(), ACCOUNTS
        )

    def test_order_hash_invalid_address(self):
        """Test that invalid address raises error."""
        accounts = dataclasses.replace(ACCOUNTS, receiver="invalid")

        with pytest.raises(ValueError, match="Invalid receiver"):
            compute_order_hash(make_order(), accounts)

    def test_order_hash_rate_bump_out_of_range(self):
        """Test that terms wider than their integer type are rejected."""
        order = make_order(
            auction=AuctionCurve(start_time=START, duration=600, initial_rate_bump=70000)
        )

        with pytest.raises(ValueError, match="out of range"):
            compute_order_hash(order, ACCOUNTS)

    def test_verify_order_hash(self):
        """Test order hash verification."""
        order = make_order()
        order_hash = compute_order_hash(order, ACCOUNTS)

        assert verify_order_hash(order_hash, order, ACCOUNTS) is True
        assert verify_order_hash(order_hash_hex(order_hash), order, ACCOUNTS) is True

        # Modify terms
        assert verify_order_hash(order_hash, make_order(id=7), ACCOUNTS) is False
        assert verify_order_hash("0x1234", order, ACCOUNTS) is False


class TestRateBump:
    """Tests for the Dutch auction curve."""

    def test_before_and_at_start(self):
        assert calculate_rate_bump(START - 100, STEPPED_CURVE) == 50000
        assert calculate_rate_bump(START, STEPPED_CURVE) == 50000

    def test_at_and_after_finish(self):
        assert calculate_rate_bump(START + 32000, STEPPED_CURVE) == 0
        assert calculate_rate_bump(START + 50000, STEPPED_CURVE) == 0

    def test_interpolates_within_segments(self):
        """Test linear interpolation between checkpoints."""
        assert calculate_rate_bump(START + 5000, STEPPED_CURVE) == 35000
        assert calculate_rate_bump(START + 10000, STEPPED_CURVE) == 20000
        assert calculate_rate_bump(START + 20000, STEPPED_CURVE) == 15000
        assert calculate_rate_bump(START + 30000, STEPPED_CURVE) == 10000

    def test_interpolates_after_last_checkpoint(self):
        """Test decay from the last checkpoint to zero at the finish."""
        assert calculate_rate_bump(START + 31000, STEPPED_CURVE) == 5000

    def test_no_checkpoints(self):
        """Test a curve that decays straight to zero."""
        curve = AuctionCurve(start_time=START, duration=600, initial_rate_bump=1000)

        assert calculate_rate_bump(START + 300, curve) == 500
        assert calculate_rate_bump(START + 599, curve) == 1

    def test_truncates_toward_zero(self):
        curve = AuctionCurve(start_time=START, duration=3, initial_rate_bump=1000)

        assert calculate_rate_bump(START + 1, curve) == 666

    def test_non_increasing_and_non_negative(self):
        """Test the curve never rises and never goes negative."""
        values = [
            calculate_rate_bump(START + t, STEPPED_CURVE) for t in range(0, 32001, 250)
        ]

        assert all(v >= 0 for v in values)
        assert all(a >= b for a, b in zip(values, values[1:]))


class TestDstAmount:
    """Tests for destination amount pricing."""

    def test_priced_amount_example(self):
        """Test half fill at the middle of a 1% auction."""
        order = make_order()

        # ceil(900 * 500 / 1000) = 450; ceil(450 * 100500 / 100000) = ceil(452.25)
        assert priced_amount(order, 500, START + 300) == 453

    def test_proportional_amount_rounds_up(self):
        assert get_dst_amount(1000, 900, 333) == 300

    def test_estimated_amount_ignores_auction(self):
        order = make_order()

        assert estimated_amount(order, 500) == 475

    def test_default_curve_prices_flat(self):
        """Test that the default curve applies no rate bump."""
        order = make_order(auction=default_auction_curve())

        assert priced_amount(order, 500, START) == 450

    def test_price_after_auction_end(self):
        order = make_order()

        assert priced_amount(order, 1000, START + 600) == 900

    def test_overflow_raises(self):
        """Test that results beyond uint64 surface as errors."""
        with pytest.raises(ArithmeticOverflowError):
            get_dst_amount(1, 2**64 - 1, 2)

    def test_curve_requires_timestamp(self):
        with pytest.raises(ValueError, match="timestamp"):
            get_dst_amount(1000, 900, 500, curve=make_order().auction)


class TestFeeSplit:
    """Tests for the fee allocation."""

    def test_no_fees(self):
        split = get_fee_amounts(1000, 1000, FeeConfig())

        assert (split.protocol_amount, split.integrator_amount, split.maker_amount) == (
            0,
            0,
            1000,
        )

    def test_protocol_and_integrator_fees(self):
        """Test 1% protocol fee and 0.5% integrator fee."""
        fee = FeeConfig(protocol_fee=1000, integrator_fee=500)
        split = get_fee_amounts(10000, 10000, fee)

        assert split.integrator_amount == 50
        assert split.protocol_amount == 100
        assert split.maker_amount == 9850

    def test_surplus_goes_to_protocol(self):
        """Test that half of the positive slippage goes to the protocol."""
        fee = FeeConfig(protocol_fee=1000, surplus_percentage=50)
        split = get_fee_amounts(10000, 9000, fee)

        # actual = 9900, surplus = 900, half of it = 450
        assert split.protocol_amount == 550
        assert split.integrator_amount == 0
        assert split.maker_amount == 9450

    def test_no_surplus_when_actual_equals_estimate(self):
        fee = FeeConfig(protocol_fee=1000, surplus_percentage=100)
        split = get_fee_amounts(10000, 9900, fee)

        assert split.protocol_amount == 100
        assert split.maker_amount == 9900

    def test_full_surplus(self):
        fee = FeeConfig(surplus_percentage=100)
        split = get_fee_amounts(1200, 1000, fee)

        assert split.protocol_amount == 200
        assert split.maker_amount == 1000

    def test_shares_always_sum_to_amount(self):
        """Test there is no rounding leakage."""
        fees = [
            FeeConfig(),
            FeeConfig(protocol_fee=333, integrator_fee=777, surplus_percentage=33),
            FeeConfig(protocol_fee=65535, surplus_percentage=100),
            FeeConfig(integrator_fee=12345, surplus_percentage=1),
        ]
        for fee in fees:
            for dst_amount in (0, 1, 7, 999, 123457, 10**18):
                for estimate in (0, dst_amount // 2, dst_amount):
                    split = get_fee_amounts(dst_amount, estimate, fee)
                    assert split.total == dst_amount
                    assert min(
                        split.protocol_amount,
                        split.integrator_amount,
                        split.maker_amount,
                    ) >= 0

    def test_fees_above_hundred_percent(self):
        """Test that fees exceeding the amount raise an arithmetic error."""
        fee = FeeConfig(protocol_fee=60000, integrator_fee=60000)

        with pytest.raises(ArithmeticOverflowError):
            get_fee_amounts(1000, 1000, fee)


class TestPremium:
    """Tests for the resolver cancellation premium."""

    def test_zero_until_start(self):
        assert calculate_premium(START - 1, START, 1000, 4000) == 0
        assert calculate_premium(START, START, 1000, 4000) == 0

    def test_linear_ramp(self):
        assert calculate_premium(START + 250, START, 1000, 4000) == 1000
        assert calculate_premium(START + 999, START, 1000, 4000) == 3996

    def test_capped_after_ramp(self):
        assert calculate_premium(START + 1000, START, 1000, 4000) == 4000
        assert calculate_premium(START + 10**6, START, 1000, 4000) == 4000

    def test_zero_duration_jumps_to_max(self):
        assert calculate_premium(START, START, 0, 4000) == 0
        assert calculate_premium(START + 1, START, 0, 4000) == 4000

    def test_monotonic(self):
        values = [calculate_premium(START + t, START, 777, 12345) for t in range(0, 900)]

        assert all(a <= b for a, b in zip(values, values[1:]))


class TestSigning:
    """Tests for EIP-712 order authorization."""

    def test_create_order_authorization(self):
        order = make_order()
        order_hash = compute_order_hash(order, ACCOUNTS)

        auth = create_order_authorization(order_hash, TEST_ADDRESS.lower(), order)

        assert auth.order_hash == order_hash_hex(order_hash)
        assert auth.maker == TEST_ADDRESS
        assert auth.order_id == order.id
        assert auth.deadline == order.expiration_time

    def test_create_order_authorization_invalid_maker(self):
        with pytest.raises(ValueError, match="Invalid maker"):
            create_order_authorization(b"\x00" * 32, "invalid", make_order())

    def test_create_eip712_domain_invalid_address(self):
        with pytest.raises(ValueError, match="Invalid program address"):
            create_eip712_domain("invalid", 1)

    def test_sign_and_verify(self):
        """Test signing and signature verification."""
        order = make_order()
        auth = create_order_authorization(
            compute_order_hash(order, ACCOUNTS), TEST_ADDRESS, order
        )

        signed = sign_order_authorization(TEST_PRIVATE_KEY, PROGRAM_ADDRESS, auth, 1)

        assert signed.signature
        assert verify_order_authorization_signature(
            signed, PROGRAM_ADDRESS, 1, TEST_ADDRESS
        ) is True

        # Verify with wrong signer
        wrong_address = Account.create().address
        assert verify_order_authorization_signature(
            signed, PROGRAM_ADDRESS, 1, wrong_address
        ) is False

        # Verify on another chain
        assert verify_order_authorization_signature(
            signed, PROGRAM_ADDRESS, 137, TEST_ADDRESS
        ) is False

    def test_tampered_order_hash_fails(self):
        order = make_order()
        auth = create_order_authorization(
            compute_order_hash(order, ACCOUNTS), TEST_ADDRESS, order
        )
        signed = sign_order_authorization(TEST_PRIVATE_KEY, PROGRAM_ADDRESS, auth, 1)

        signed.order_hash = order_hash_hex(compute_order_hash(make_order(id=2), ACCOUNTS))

        assert verify_order_authorization_signature(
            signed, PROGRAM_ADDRESS, 1, TEST_ADDRESS
        ) is False


class TestUtils:
    """Tests for utility functions."""

    def test_format_fee(self):
        assert format_fee(250) == "0.25%"
        assert format_fee(1000) == "1%"
        assert format_fee(100000) == "100%"

    def test_percent_to_fee(self):
        assert percent_to_fee(0.25) == 250
        assert percent_to_fee(1) == 1000

    def test_mul_div(self):
        assert mul_div_floor(10, 1, 3) == 3
        assert mul_div_ceil(10, 1, 3) == 4
        assert mul_div_ceil(9, 1, 3) == 3

    def test_mul_div_overflow(self):
        with pytest.raises(ArithmeticOverflowError):
            mul_div_floor(2**64, 1, 1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
