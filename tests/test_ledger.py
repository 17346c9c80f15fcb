"""Tests for the voting-weight ledger."""

from __future__ import annotations

import pytest

from quorumdao.dao.ledger import WeightLedger
from quorumdao.errors import ContractRevert

from conftest import make_account

A = make_account(1).address
B = make_account(2).address


def test_mint_burn_and_transfer_keep_supply_consistent() -> None:
    ledger = WeightLedger()
    ledger.mint(A, 70)
    ledger.mint(B, 30)
    assert ledger.total_weight() == 100

    ledger.transfer(A, B, 20)
    assert ledger.weight_of(A) == 50
    assert ledger.weight_of(B) == 50
    assert ledger.total_weight() == 100

    ledger.burn(B, 50)
    assert ledger.weight_of(B) == 0
    assert ledger.total_weight() == 50
    assert ledger.members() == [A]


def test_lookups_accept_any_address_case() -> None:
    ledger = WeightLedger()
    ledger.mint(A.lower(), 5)
    assert ledger.weight_of(A) == 5
    assert ledger.share_of(A) == 1.0


@pytest.mark.parametrize(
    "operation",
    [
        lambda l: l.transfer(A, B, 11),
        lambda l: l.burn(A, 11),
        lambda l: l.burn(B, 1),
        lambda l: l.mint(B, 0),
    ],
)
def test_invalid_operations_revert(operation) -> None:
    ledger = WeightLedger()
    ledger.mint(A, 10)
    with pytest.raises(ContractRevert):
        operation(ledger)
    assert ledger.weight_of(A) == 10
    assert ledger.total_weight() == 10
