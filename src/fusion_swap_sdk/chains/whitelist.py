"""Resolver whitelist gating who may fill or force-cancel orders."""

import logging
from typing import Set

from eth_utils import to_checksum_address

from ..escrow.errors import Unauthorized
from .ledger import Ledger

logger = logging.getLogger(__name__)


class ResolverWhitelist:
    """Registry of resolvers, managed by a single authority.

    Usage:
        whitelist = ResolverWhitelist(ledger, authority=admin)
        whitelist.register(admin, resolver)
        program = OrderEscrowProgram(ledger, whitelist=whitelist)
    """

    def __init__(self, ledger: Ledger, authority: str):
        self.ledger = ledger
        self.authority = to_checksum_address(authority)
        self._resolvers: Set[str] = set()

    def _require_authority(self, caller: str) -> None:
        self.ledger.require_auth(caller)
        if to_checksum_address(caller) != self.authority:
            raise Unauthorized(f"{caller} is not the whitelist authority")

    def register(self, caller: str, resolver: str) -> None:
        self._require_authority(caller)
        self._resolvers.add(to_checksum_address(resolver))
        logger.info("Resolver registered: %s", resolver)

    def deregister(self, caller: str, resolver: str) -> None:
        self._require_authority(caller)
        self._resolvers.discard(to_checksum_address(resolver))
        logger.info("Resolver deregistered: %s", resolver)

    def transfer_authority(self, caller: str, new_authority: str) -> None:
        self._require_authority(caller)
        self.authority = to_checksum_address(new_authority)
        logger.info("Whitelist authority transferred to %s", self.authority)

    def is_whitelisted(self, resolver: str) -> bool:
        return to_checksum_address(resolver) in self._resolvers

    def require_access(self, resolver: str) -> None:
        if not self.is_whitelisted(resolver):
            raise Unauthorized(f"{resolver} is not a whitelisted resolver")
