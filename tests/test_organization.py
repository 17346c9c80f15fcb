"""Tests for single-intent authorization and execution on an organization."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

import pytest
from eth_account.signers.local import LocalAccount

from quorumdao.chain import World
from quorumdao.chain.abi import encode_call
from quorumdao.crypto import sign_digest
from quorumdao.dao import Factory, Organization
from quorumdao.errors import (
    ContractRevert,
    DuplicateSigner,
    ExecutionFailed,
    InvalidNonce,
    InvalidSignature,
    QuorumNotMet,
    ReentrantCall,
)
from quorumdao.types import CallSpec, IntentStatus

from conftest import TIMESTAMP, Recorder, Reenterer, make_account, sign_intent, submit

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture
    from pytest_mock.plugin import MockerFixture

X = make_account(20).address


def mint_call(org: Organization, to: str = X, amount: int = 1) -> CallSpec:
    return CallSpec(org.address, encode_call("mint(address,uint256)", to, amount))


def test_majority_member_alone_executes_and_replay_fails(org: Organization, alice: LocalAccount) -> None:
    """Quorum 51%, members 60/40: A alone mints, resubmission is a replay."""
    call = mint_call(org)
    signatures = sign_intent(org, [alice], call.target, call.payload)

    receipt = org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, signatures)

    assert receipt.status is IntentStatus.EXECUTED
    assert receipt.signers == (alice.address,)
    assert receipt.weight == 60
    assert org.nonce == 1
    assert org.weight_of(X) == 1
    assert org.total_weight() == 101

    with pytest.raises(InvalidNonce) as excinfo:
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, signatures)
    assert (excinfo.value.expected, excinfo.value.actual) == (1, 0)
    assert org.weight_of(X) == 1


def test_future_nonce_is_rejected(org: Organization, alice: LocalAccount) -> None:
    call = mint_call(org)
    signatures = sign_intent(org, [alice], call.target, call.payload, nonce=1)
    with pytest.raises(InvalidNonce):
        org.authorize_and_execute(call.target, call.payload, 0, 1, TIMESTAMP, signatures)
    assert org.nonce == 0


def test_minority_is_rejected_and_state_unchanged(
    org: Organization, bob: LocalAccount, mocker: "MockerFixture"
) -> None:
    spy = mocker.spy(org.world.executor, "execute")
    before = copy.deepcopy(org.state)

    with pytest.raises(QuorumNotMet) as excinfo:
        submit(org, [bob], mint_call(org))

    assert excinfo.value.weight == 40
    assert excinfo.value.total_weight == 100
    assert org.state == before
    spy.assert_not_called()


def test_duplicate_signatures_are_not_double_counted(factory: Factory, alice: LocalAccount, bob: LocalAccount) -> None:
    """Two copies of a 60% member's signature do not reach a 75% quorum."""
    org = factory.create("Strict", "STR", 75, [alice.address, bob.address], [60, 40])
    call = mint_call(org)
    (signature,) = sign_intent(org, [alice], call.target, call.payload)

    with pytest.raises(DuplicateSigner) as excinfo:
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, [signature, signature])
    assert excinfo.value.signer == alice.address
    assert org.nonce == 0


def test_all_members_together_meet_high_quorum(factory: Factory, alice: LocalAccount, bob: LocalAccount) -> None:
    org = factory.create("Strict", "STR", 75, [alice.address, bob.address], [60, 40])
    receipt = submit(org, [bob, alice], mint_call(org))
    assert set(receipt.signers) == {alice.address, bob.address}
    assert receipt.weight == 100


def test_malformed_signature_is_reported_with_index(org: Organization, alice: LocalAccount) -> None:
    call = mint_call(org)
    signatures = sign_intent(org, [alice], call.target, call.payload)
    with pytest.raises(InvalidSignature) as excinfo:
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, [signatures[0], b"\x00" * 10])
    assert excinfo.value.index == 1
    assert org.nonce == 0


def test_empty_signature_set_fails_quorum(org: Organization) -> None:
    call = mint_call(org)
    with pytest.raises(QuorumNotMet):
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, [])


def test_non_member_signature_adds_no_weight(org: Organization, bob: LocalAccount, outsider: LocalAccount) -> None:
    with pytest.raises(QuorumNotMet) as excinfo:
        submit(org, [bob, outsider], mint_call(org))
    assert excinfo.value.weight == 40


def test_tampered_field_invalidates_signatures(org: Organization, alice: LocalAccount) -> None:
    """Signatures are checked against the digest recomputed from submitted fields."""
    call = mint_call(org, amount=1)
    signatures = sign_intent(org, [alice], call.target, call.payload)
    tampered = mint_call(org, amount=1_000)
    with pytest.raises(QuorumNotMet):
        org.authorize_and_execute(tampered.target, tampered.payload, 0, 0, TIMESTAMP, signatures)
    with pytest.raises(QuorumNotMet):
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP + 1, signatures)


def test_signatures_do_not_transfer_between_organizations(
    factory: Factory, org: Organization, alice: LocalAccount, bob: LocalAccount
) -> None:
    twin = factory.create("Twin", "TWIN", 51, [alice.address, bob.address], [60, 40])
    call = CallSpec(X, b"", 0)
    signatures = sign_intent(org, [alice], call.target)
    with pytest.raises(QuorumNotMet):
        twin.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, signatures)


def test_signatures_do_not_transfer_between_chains(org: Organization, alice: LocalAccount) -> None:
    digest = org.get_tx_hash(X, b"", 0, 0, TIMESTAMP)
    world: World = org.world
    world.chain_id += 1
    with pytest.raises(QuorumNotMet):
        org.authorize_and_execute(X, b"", 0, 0, TIMESTAMP, [sign_digest(digest, alice.key)])


def test_weight_is_read_at_execution_time(org: Organization, alice: LocalAccount, bob: LocalAccount) -> None:
    """A member who divests after signing loses influence before execution."""
    call = mint_call(org)
    signatures = sign_intent(org, [alice], call.target, call.payload)

    transfer = CallSpec(org.address, encode_call("transfer(address,uint256)", bob.address, 20))
    org.world.call(alice.address, transfer)
    assert org.weight_of(alice.address) == 40

    with pytest.raises(QuorumNotMet):
        org.authorize_and_execute(call.target, call.payload, 0, 0, TIMESTAMP, signatures)


def test_failed_call_does_not_burn_nonce(org: Organization, alice: LocalAccount, recorder: Recorder) -> None:
    with pytest.raises(ExecutionFailed) as excinfo:
        submit(org, [alice], CallSpec(recorder.address, encode_call("fail()")))
    assert isinstance(excinfo.value.__cause__, ContractRevert)
    assert org.nonce == 0
    assert org.executed_txs == []

    # The same nonce is still usable for a corrected intent.
    submit(org, [alice], CallSpec(recorder.address, encode_call("record(uint256)", 5)))
    assert org.nonce == 1
    assert recorder.state["senders"] == [org.address]


def test_value_is_paid_from_treasury(org: Organization, alice: LocalAccount, recorder: Recorder) -> None:
    with pytest.raises(ExecutionFailed):
        submit(org, [alice], CallSpec(recorder.address, b"", 7))
    assert org.nonce == 0

    org.world.fund(org.address, 10)
    submit(org, [alice], CallSpec(recorder.address, b"", 7))
    assert org.world.balance_of(org.address) == 3
    assert org.world.balance_of(recorder.address) == 7


def test_self_only_functions_reject_direct_calls(org: Organization, alice: LocalAccount) -> None:
    """Governance functions are reachable only through authorized execution."""
    for payload in (
        encode_call("mint(address,uint256)", alice.address, 1000),
        encode_call("addPermitted(address)", alice.address),
        encode_call("commitBatch(bytes32)", b"\x01" * 32),
    ):
        with pytest.raises(ExecutionFailed):
            org.world.call(alice.address, CallSpec(org.address, payload))
    assert org.weight_of(alice.address) == 60
    assert not org.is_permitted(alice.address)


def test_history_records_executed_intents(org: Organization, alice: LocalAccount, recorder: Recorder) -> None:
    first = submit(org, [alice], CallSpec(recorder.address, encode_call("record(uint256)", 1)))
    org.world.advance_time(60)
    submit(org, [alice], CallSpec(recorder.address, encode_call("record(uint256)", 2)), timestamp=TIMESTAMP + 60)

    history = org.executed_txs
    assert [tx.nonce for tx in history] == [0, 1]
    assert history[0].digest == first.digest
    assert history[1].executed_at == history[0].executed_at + 60
    assert first.return_value == 1


def test_reentrant_execution_is_rejected(org: Organization, alice: LocalAccount) -> None:
    reenterer = org.world.deploy(Reenterer(make_account(70).address, org.address))
    with pytest.raises(ReentrantCall):
        submit(org, [alice], CallSpec(reenterer.address, encode_call("poke()")))
    assert org.nonce == 0


def test_outcomes_are_audited_with_status(
    org: Organization, alice: LocalAccount, bob: LocalAccount, caplog: "LogCaptureFixture"
) -> None:
    caplog.set_level("INFO", logger="quorumdao")
    with pytest.raises(QuorumNotMet):
        submit(org, [bob], mint_call(org))
    record = next(r for r in caplog.records if "INTENT_REJECTED" in r.getMessage())
    assert record.extra_fields["reason"] == "QuorumNotMet"
    assert record.extra_fields["organization"] == "FriendsDAO"
    assert record.extra_fields["status"] == IntentStatus.REJECTED.value

    submit(org, [alice], mint_call(org))
    executed = next(r for r in caplog.records if "INTENT_EXECUTED" in r.getMessage())
    assert executed.extra_fields["status"] == IntentStatus.EXECUTED.value


def test_undeployed_organization_cannot_execute(alice: LocalAccount) -> None:
    from quorumdao.dao import OrganizationState

    orphan = Organization(make_account(80).address, OrganizationState(name="Orphan", symbol="O", quorum=51))
    with pytest.raises(RuntimeError):
        orphan.get_tx_hash(X, b"", 0, 0, TIMESTAMP)
