"""Cross-chain swap walkthrough against in-memory ledgers.

This example demonstrates both halves of a swap:
- Source chain: the maker escrows tokens, a resolver fills half of the order
  during the Dutch auction, and after expiry a resolver cancels the rest for
  a premium.
- Destination chain: a resolver locks funds for the maker under a hash lock
  linked to the source order; the maker claims with the secret, revealing it
  to resolvers.

Prerequisites:
1. pip install fusion-swap-sdk
2. Optionally set FUSION_* variables (see fusion_swap_sdk.config) and
   FUSION_MAKER_KEY to sign the order with your own key

Usage:
    python cross_chain_swap.py
"""

import os

from dotenv import load_dotenv
from eth_account import Account

load_dotenv()


def main():
    # Import here to show what's needed
    from fusion_swap_sdk import (
        AuctionCurve,
        AuctionPoint,
        FeeConfig,
        HashTimeLockContract,
        InMemoryLedger,
        ManualClock,
        Order,
        OrderAccounts,
        OrderEscrowProgram,
        configure_logging,
        generate_secret,
        load_config_from_env,
        resolve_config,
    )
    from fusion_swap_sdk.escrow import (
        NATIVE_ASSET,
        create_order_authorization,
        format_fee,
        sign_order_authorization,
        verify_order_authorization_signature,
    )

    config = load_config_from_env()
    configure_logging(config)
    resolved = resolve_config(config)

    maker_key = os.environ.get("FUSION_MAKER_KEY")
    maker = Account.from_key(maker_key) if maker_key else Account.create()
    resolver = Account.create()
    protocol = Account.create()
    usdc = Account.create().address
    weth = Account.create().address

    start = 1_700_000_000
    clock = ManualClock(start)

    print("=" * 60)
    print("  SOURCE CHAIN: DUTCH AUCTION ORDER ESCROW")
    print("=" * 60)

    src_ledger = InMemoryLedger()
    src_ledger.mint(weth, maker.address, 1_000_000)
    src_ledger.mint(NATIVE_ASSET, maker.address, 10_000)
    src_ledger.mint(usdc, resolver.address, 10_000_000)
    src_ledger.authorize(maker.address, resolver.address)
    program = OrderEscrowProgram(src_ledger, clock=clock, config=config)

    order = Order(
        id=1,
        src_amount=1_000_000,
        min_dst_amount=2_000_000,
        estimated_dst_amount=2_050_000,
        expiration_time=start + 3600,
        fee=FeeConfig(
            protocol_fee=100,
            surplus_percentage=50,
            max_cancellation_premium=5_000,
        ),
        auction=AuctionCurve(
            start_time=start,
            duration=1800,
            initial_rate_bump=5_000,
            points=(AuctionPoint(rate_bump=2_000, time_delta=600),),
        ),
        cancellation_auction_duration=600,
    )
    accounts = OrderAccounts(
        src_asset=weth,
        dst_asset=usdc,
        receiver=maker.address,
        protocol_dst=protocol.address,
    )

    order_hash = program.create(maker.address, order, accounts, collateral=5_000)
    print(f"\n[1] Order created: 0x{order_hash.hex()[:16]}...")
    print(f"    Protocol fee: {format_fee(order.fee.protocol_fee)}")

    auth = create_order_authorization(order_hash, maker.address, order)
    signed = sign_order_authorization(
        maker.key.hex(), resolved.program_address, auth, resolved.chain_id
    )
    assert verify_order_authorization_signature(
        signed, resolved.program_address, resolved.chain_id, maker.address
    )
    print(f"    Signed by maker: {signed.signature[:20]}...")

    clock.advance(300)
    result = program.fill(resolver.address, maker.address, order, accounts, 500_000)
    print(f"\n[2] Filled {result.src_amount} at t+300s")
    print(f"    Resolver paid: {result.dst_amount}")
    print(f"    Maker got:     {result.fees.maker_amount}")
    print(f"    Protocol got:  {result.fees.protocol_amount}")

    clock.set(order.expiration_time + 300)
    premium = program.cancel_by_resolver(
        resolver.address, maker.address, order, accounts, reward_limit=5_000
    )
    print(f"\n[3] Expired order cancelled by resolver, premium: {premium}")

    print("\n" + "=" * 60)
    print("  DESTINATION CHAIN: HASH-TIME-LOCK ESCROW")
    print("=" * 60)

    dst_ledger = InMemoryLedger()
    dst_ledger.mint(usdc, resolver.address, 2_000_000)
    dst_ledger.authorize(maker.address, resolver.address)
    htlc = HashTimeLockContract(dst_ledger, clock=clock, config=config)

    secret, hash_lock = generate_secret()
    escrow_id = htlc.deposit(
        resolver.address,
        usdc,
        1_000_000,
        maker.address,
        hash_lock,
        duration=3600,
        src_chain_id=resolved.chain_id,
        order_hash=order_hash,
    )
    print(f"\n[4] Resolver locked 1000000 in HTLC escrow #{escrow_id}")

    htlc.claim(escrow_id, secret, maker.address)
    revealed = htlc.get_secret(escrow_id)
    print(f"\n[5] Maker claimed; revealed secret: 0x{revealed.hex()[:16]}...")
    print(f"    Maker balance: {dst_ledger.balance_of(usdc, maker.address)}")


if __name__ == "__main__":
    main()
