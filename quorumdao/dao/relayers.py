"""Addresses allowed to execute calls on an organization's behalf."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Set

from quorumdao.errors import ContractRevert
from quorumdao.types import Address, to_address


@dataclass
class RelayerRegistry:
    """Add-only set of permitted relayers.

    Additions happen only through the organization's quorum-authorized
    ``addPermitted`` entry point.
    """

    permitted: Set[Address] = field(default_factory=set)

    def add(self, relayer: Address) -> None:
        relayer = to_address(relayer)
        if relayer in self.permitted:
            raise ContractRevert(f"{relayer} is already permitted")
        self.permitted.add(relayer)

    def is_permitted(self, address: Address) -> bool:
        return to_address(address) in self.permitted

    def __iter__(self) -> Iterator[Address]:
        return iter(sorted(self.permitted))

    def __len__(self) -> int:
        return len(self.permitted)
