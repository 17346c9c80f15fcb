"""Weighted quorum helpers.

This module contains small, pure functions to determine whether a set of
signers satisfies a quorum expressed as an integer percentage of total voting
weight. All arithmetic is integer-only so that thresholds are exact for
18-decimal token balances.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Set


class WeightSource(Protocol):
    """Anything that can answer voting weight queries."""

    def weight_of(self, address: str) -> int:
        """Return the current voting weight of ``address``."""

    def total_weight(self) -> int:
        """Return the sum of all voting weights."""


def required_weight(total_weight: int, quorum: int) -> int:
    """Return the smallest weight that satisfies ``quorum`` percent of ``total_weight``.

    Args:
        total_weight: Total voting weight of the organization.
        quorum: Required percentage, 1..100.

    Returns:
        The smallest integer w such that ``w * 100 >= total_weight * quorum``.
    """
    if total_weight <= 0:
        return 0
    return -(-total_weight * quorum // 100)


def meets_quorum(weight: int, total_weight: int, quorum: int) -> bool:
    """Check a summed signer weight against the threshold.

    An organization with no voting weight can never reach quorum.
    """
    if total_weight <= 0:
        return False
    return weight * 100 >= total_weight * quorum


def signer_weight(signers: Iterable[str], *, ledger: WeightSource) -> int:
    """Sum the current weight of distinct ``signers``."""
    unique: Set[str] = set(signers)
    return sum(ledger.weight_of(a) for a in unique)


def has_weighted_quorum(signers: Iterable[str], *, ledger: WeightSource, quorum: int) -> bool:
    """Check weighted quorum using the ledger's current balances.

    Args:
        signers: Iterable of signer addresses; duplicates count once.
        ledger: Source of current voting weight.
        quorum: Required percentage of total weight.

    Returns:
        True if the cumulative weight of ``signers`` meets or exceeds the
        quorum threshold.
    """
    signer_set: Set[str] = set(signers)
    if not signer_set:
        return False
    return meets_quorum(signer_weight(signer_set, ledger=ledger), ledger.total_weight(), quorum)


__all__ = [
    "required_weight",
    "meets_quorum",
    "signer_weight",
    "has_weighted_quorum",
]
