"""Creates organizations inside a world."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from eth_abi import encode
from web3 import Web3

from quorumdao.chain.world import World
from quorumdao.core.config import get_settings
from quorumdao.dao.ledger import WeightLedger
from quorumdao.dao.organization import Organization, OrganizationState
from quorumdao.logger.auditLogger import AuditLogger
from quorumdao.types import Address, to_address

LOGGER = logging.getLogger(__name__)

DEFAULT_FACTORY_ADDRESS: Address = to_address(bytes(Web3.keccak(text="quorumdao.factory"))[12:])


class Factory:
    """Deploys organizations at deterministic addresses."""

    def __init__(self, world: World, address: Optional[Address] = None) -> None:
        self.world = world
        self.address = to_address(address or DEFAULT_FACTORY_ADDRESS)
        self._organizations: List[Address] = []

    def predict_address(self, index: int) -> Address:
        """Return the address the ``index``-th organization is deployed at."""
        return to_address(bytes(Web3.keccak(encode(["address", "uint256"], [self.address, index])))[12:])

    def create(
        self,
        name: str,
        symbol: str,
        quorum: Optional[int],
        members: Sequence[Address],
        weights: Sequence[int],
        audit_file: Optional[str] = None,
    ) -> Organization:
        """Create an organization with initial members and voting weights.

        A ``quorum`` of ``None`` uses ``settings.default_quorum``.

        Raises:
            ValueError: On an invalid quorum, mismatched or empty member
                lists, duplicate members or non-positive weights.
        """
        if quorum is None:
            quorum = get_settings().default_quorum
        if not 1 <= quorum <= 100:
            raise ValueError(f"Quorum must be between 1 and 100, got {quorum}")
        if len(members) != len(weights):
            raise ValueError("members and weights must have the same length")
        if not members:
            raise ValueError("An organization needs at least one member")

        ledger = WeightLedger()
        seen = set()
        for member, weight in zip(members, weights):
            member = to_address(member)
            if member in seen:
                raise ValueError(f"Duplicate member {member}")
            if weight <= 0:
                raise ValueError(f"Weight of {member} must be positive")
            seen.add(member)
            ledger.mint(member, weight)

        address = self.predict_address(len(self._organizations))
        state = OrganizationState(name=name, symbol=symbol, quorum=quorum, ledger=ledger)
        organization = Organization(address, state, audit=AuditLogger(name, audit_file))
        self.world.deploy(organization)
        self._organizations.append(address)
        LOGGER.info("Created organization %s (%s) at %s, quorum %d%%", name, symbol, address, quorum)
        return organization

    def org_at(self, index: int) -> Organization:
        """Return the ``index``-th organization created by this factory."""
        contract = self.world.contract_at(self._organizations[index])
        if not isinstance(contract, Organization):
            raise ValueError(f"No organization deployed at {self._organizations[index]}")
        return contract

    def __len__(self) -> int:
        return len(self._organizations)
