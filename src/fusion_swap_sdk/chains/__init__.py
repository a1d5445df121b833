"""Escrow programs and the collaborators they run against."""

from .clock import Clock, SystemClock, ManualClock
from .ledger import (
    Ledger,
    InMemoryLedger,
    NativeTransfer,
    TokenTransfer,
    asset_transfer,
    execute_transfer,
)
from .directory import AccountDirectory, DeterministicDirectory
from .whitelist import ResolverWhitelist
from .order_escrow import OrderEscrowProgram
from .htlc import (
    HashTimeLockContract,
    generate_secret,
    compute_hash_lock,
    verify_preimage,
)

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "Ledger",
    "InMemoryLedger",
    "NativeTransfer",
    "TokenTransfer",
    "asset_transfer",
    "execute_transfer",
    "AccountDirectory",
    "DeterministicDirectory",
    "ResolverWhitelist",
    "OrderEscrowProgram",
    "HashTimeLockContract",
    "generate_secret",
    "compute_hash_lock",
    "verify_preimage",
]
