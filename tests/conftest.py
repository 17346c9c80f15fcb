"""Shared fixtures: a world, a factory-created organization and test contracts."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from quorumdao.chain import CallContext, Contract, World, external
from quorumdao.crypto import Signature, sign_digest
from quorumdao.dao import BatchCoordinator, Factory, Organization
from quorumdao.errors import ContractRevert
from quorumdao.types import Address, CallSpec

CHAIN_ID = 1337
GENESIS_TIME = 1_700_000_000
TIMESTAMP = 1_700_000_100


def make_account(seed: int) -> LocalAccount:
    """Deterministic test account for ``seed`` (1-based)."""
    return Account.from_key("0x" + f"{seed:064x}")


class Recorder(Contract):
    """Target contract that records calls and can be told to fail."""

    def __init__(self, address: Address) -> None:
        super().__init__(address, {"values": [], "senders": []})

    @external("record(uint256)")
    def record(self, ctx: CallContext, value: int) -> int:
        self.state["values"].append(value)
        self.state["senders"].append(ctx.sender)
        return len(self.state["values"])

    @external("fail()")
    def fail(self, ctx: CallContext) -> None:
        raise ContractRevert("Recorder: told to fail")

    def receive(self, ctx: CallContext) -> None:
        self.state["values"].append(ctx.value)


class Reenterer(Contract):
    """Target contract that calls back into the organization executing it."""

    def __init__(self, address: Address, org: Address) -> None:
        super().__init__(address, {"org": org})

    @external("poke()")
    def poke(self, ctx: CallContext) -> Any:
        org = ctx.world.contract_at(self.state["org"])
        return org.execute_permitted(self.address, CallSpec(target=self.address))


@pytest.fixture
def alice() -> LocalAccount:
    return make_account(1)


@pytest.fixture
def bob() -> LocalAccount:
    return make_account(2)


@pytest.fixture
def carol() -> LocalAccount:
    return make_account(3)


@pytest.fixture
def outsider() -> LocalAccount:
    return make_account(99)


@pytest.fixture
def world() -> World:
    return World(chain_id=CHAIN_ID, timestamp=GENESIS_TIME)


@pytest.fixture
def factory(world: World) -> Factory:
    return Factory(world)


@pytest.fixture
def org(factory: Factory, alice: LocalAccount, bob: LocalAccount) -> Organization:
    """Organization with quorum 51% and members holding 60/40."""
    return factory.create("FriendsDAO", "FRIENDS", 51, [alice.address, bob.address], [60, 40])


@pytest.fixture
def recorder(world: World) -> Recorder:
    return world.deploy(Recorder(make_account(50).address))  # type: ignore[return-value]


@pytest.fixture
def coordinator(world: World) -> BatchCoordinator:
    return BatchCoordinator(world)


def sign_intent(
    org: Organization,
    signers: Sequence[LocalAccount],
    target: Address,
    payload: bytes = b"",
    value: int = 0,
    nonce: int = -1,
    timestamp: int = TIMESTAMP,
) -> List[Signature]:
    """Have ``signers`` sign the intent digest (current nonce unless given)."""
    nonce = org.nonce if nonce < 0 else nonce
    digest = org.get_tx_hash(target, payload, value, nonce, timestamp)
    return [sign_digest(digest, account.key) for account in signers]


def submit(
    org: Organization,
    signers: Sequence[LocalAccount],
    call: CallSpec,
    nonce: int = -1,
    timestamp: int = TIMESTAMP,
) -> Any:
    """Sign ``call`` with ``signers`` and submit it at the current nonce."""
    nonce = org.nonce if nonce < 0 else nonce
    signatures = sign_intent(org, signers, call.target, call.payload, call.value, nonce, timestamp)
    return org.authorize_and_execute(call.target, call.payload, call.value, nonce, timestamp, signatures)


def snapshot_state(world: World, *addresses: Address) -> Dict[str, Any]:
    """Deep copy of the state of ``addresses`` plus their native balances."""
    return {
        address: (world.contract_at(address).snapshot(), world.balance_of(address))
        for address in addresses
    }
