"""Commit/execute batching on top of single-intent authorization.

Members sign one ordinary intent whose call is ``commitBatch(digest)`` on
their organization, where ``digest`` binds an ordered call list and the
nonce that intent rides on. Once that intent executes, a registered relayer
submits the full call list. The coordinator re-derives the digest, checks it
against the commitment store and runs every call in order as one atomic unit.
On success the commitment is consumed so the batch cannot be replayed.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence, Union

from quorumdao.chain.abi import encode_call
from quorumdao.chain.world import World
from quorumdao.crypto.digest import compute_batch_digest
from quorumdao.crypto.signatures import Signature
from quorumdao.dao.organization import Organization
from quorumdao.errors import (
    BatchExecutionFailed,
    CommitmentError,
    ExecutionFailed,
    NotARelayer,
)
from quorumdao.types import Address, BatchReceipt, CallSpec, Digest, to_address

LOGGER = logging.getLogger(__name__)

CallLike = Union[CallSpec, Sequence[Any]]

COMMIT_BATCH = "commitBatch(bytes32)"
ADD_PERMITTED = "addPermitted(address)"


class BatchCoordinator:
    """Executes pre-committed call batches for organizations in one world."""

    def __init__(self, world: World) -> None:
        self.world = world

    def organization(self, org: Address) -> Organization:
        """Return the organization contract deployed at ``org``."""
        contract = self.world.contract_at(org)
        if not isinstance(contract, Organization):
            raise ValueError(f"No organization deployed at {org}")
        return contract

    def batch_digest(self, org: Address, calls: Iterable[CallLike], future_nonce: int) -> Digest:
        """Return the batch digest for ``calls`` on this world's chain."""
        return compute_batch_digest(org, calls, future_nonce, chain_id=self.world.chain_id)

    def build_commit_call(self, org: Address, calls: Iterable[CallLike], future_nonce: int) -> CallSpec:
        """Return the call members sign to approve a batch.

        ``future_nonce`` must be the nonce the resulting intent will be
        submitted with.
        """
        digest = self.batch_digest(org, calls, future_nonce)
        return CallSpec(target=org, payload=encode_call(COMMIT_BATCH, digest), value=0)

    @staticmethod
    def build_register_relayer_call(org: Address, relayer: Address) -> CallSpec:
        """Return the call members sign to add ``relayer`` to ``org``."""
        return CallSpec(target=org, payload=encode_call(ADD_PERMITTED, to_address(relayer)), value=0)

    def execute_batch(
        self,
        caller: Address,
        org: Address,
        calls: Iterable[CallLike],
        future_nonce: int,
    ) -> BatchReceipt:
        """Execute a committed batch on behalf of a registered relayer.

        Raises:
            NotARelayer: ``caller`` is not permitted on the organization.
            CommitmentNotFound: No approved commitment matches the batch.
            CommitmentAlreadyConsumed: The matching batch already executed.
            BatchExecutionFailed: A call failed; every effect was rolled back
                and the commitment is still approved.
        """
        organization = self.organization(org)
        caller = to_address(caller)

        with self.world.serialized():
            if not organization.is_permitted(caller):
                exc = NotARelayer(caller)
                organization.audit.batch_rejected(None, caller, exc)
                raise exc

            specs: List[CallSpec] = [CallSpec.coerce(call) for call in calls]
            digest = self.batch_digest(organization.address, specs, future_nonce)
            try:
                organization.state.commitments.require_approved(digest)

                results: List[Any] = []
                with self.world.atomic():
                    for index, spec in enumerate(specs):
                        try:
                            results.append(organization.execute_permitted(caller, spec))
                        except ExecutionFailed as exc:
                            raise BatchExecutionFailed(index, spec.target, str(exc)) from exc
                    organization.state.commitments.consume(digest)
            except (CommitmentError, BatchExecutionFailed) as exc:
                organization.audit.batch_rejected(digest, caller, exc)
                raise

        organization.audit.batch_executed(digest, caller, len(specs))
        return BatchReceipt(
            digest=digest,
            organization=organization.address,
            relayer=caller,
            return_values=results,
        )

    def activate(
        self,
        caller: Address,
        org: Address,
        calls: Iterable[CallLike],
        nonce: int,
        timestamp: int,
        signatures: Sequence[Union[Signature, bytes, str]],
    ) -> BatchReceipt:
        """Commit and execute a batch in a single atomic step.

        ``signatures`` must be over the commit intent built by
        :meth:`build_commit_call` with ``future_nonce=nonce``. If the batch
        fails, the commit is undone as well and the nonce is not consumed.
        """
        organization = self.organization(org)
        caller = to_address(caller)

        with self.world.atomic():
            if not organization.is_permitted(caller):
                raise NotARelayer(caller)
            specs = [CallSpec.coerce(call) for call in calls]
            commit = self.build_commit_call(organization.address, specs, nonce)
            organization.authorize_and_execute(
                commit.target, commit.payload, commit.value, nonce, timestamp, signatures
            )
            LOGGER.debug("Activated batch on %s at nonce %d", organization.name, nonce)
            return self.execute_batch(caller, organization.address, specs, nonce)
