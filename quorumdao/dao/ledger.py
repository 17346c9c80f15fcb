"""Voting-weight ledger for token-governed organizations.

Each member's voting weight is their token balance. Quorum checks read the
ledger at verification time and never cache it, so a member who transfers
tokens away after signing loses that influence before execution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from quorumdao.errors import ContractRevert
from quorumdao.types import Address, to_address, to_uint


@dataclass
class WeightLedger:
    """Balances and total supply of an organization's governance token."""

    balances: Dict[Address, int] = field(default_factory=dict)
    total_supply: int = 0

    def weight_of(self, address: Address) -> int:
        """Return the current voting weight of ``address``."""
        return self.balances.get(to_address(address), 0)

    def total_weight(self) -> int:
        """Return the sum of all member balances."""
        return self.total_supply

    def members(self) -> List[Address]:
        """Return the addresses with nonzero weight, sorted."""
        return sorted(a for a, w in self.balances.items() if w > 0)

    def share_of(self, address: Address) -> float:
        """Return the normalized weight of ``address`` (0.0 if there is no supply)."""
        if self.total_supply == 0:
            return 0.0
        return self.weight_of(address) / self.total_supply

    def mint(self, to: Address, amount: int) -> None:
        """Create ``amount`` new weight for ``to``."""
        to_uint(amount, "amount")
        if amount == 0:
            raise ContractRevert("mint amount must be positive")
        to = to_address(to)
        self.balances[to] = self.balances.get(to, 0) + amount
        self.total_supply += amount

    def burn(self, owner: Address, amount: int) -> None:
        """Destroy ``amount`` of ``owner``'s weight."""
        to_uint(amount, "amount")
        owner = to_address(owner)
        balance = self.balances.get(owner, 0)
        if amount == 0 or balance < amount:
            raise ContractRevert(f"cannot burn {amount} from {owner} holding {balance}")
        self._set(owner, balance - amount)
        self.total_supply -= amount

    def transfer(self, sender: Address, recipient: Address, amount: int) -> None:
        """Move weight between members; total supply is unchanged."""
        to_uint(amount, "amount")
        sender, recipient = to_address(sender), to_address(recipient)
        balance = self.balances.get(sender, 0)
        if balance < amount:
            raise ContractRevert(f"transfer amount {amount} exceeds balance {balance} of {sender}")
        self._set(sender, balance - amount)
        self.balances[recipient] = self.balances.get(recipient, 0) + amount

    def _set(self, address: Address, amount: int) -> None:
        if amount:
            self.balances[address] = amount
        else:
            self.balances.pop(address, None)
