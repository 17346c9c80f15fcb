"""Token-governed organization contract.

The organization executes arbitrary calls once members holding at least
``quorum`` percent of the token supply have signed the call's digest. Its
own governance actions are external functions that only the organization
itself may call, so they are reachable only through an authorized intent:

- ``mint``/``burn`` change voting weight;
- ``addPermitted`` registers a relayer;
- ``commitBatch`` approves a batch digest.

Registered relayers may execute calls without signatures through
:meth:`Organization.execute_permitted`. The batch coordinator relies on this
after a batch digest has been committed.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Sequence, Union

from quorumdao.chain.contract import CallContext, Contract, external
from quorumdao.crypto.digest import compute_digest
from quorumdao.crypto.signatures import Signature
from quorumdao.dao.authorizer import TransactionAuthorizer
from quorumdao.dao.commitments import CommitmentStore
from quorumdao.dao.ledger import WeightLedger
from quorumdao.dao.relayers import RelayerRegistry
from quorumdao.errors import (
    AuthorizationError,
    ContractRevert,
    ExecutionFailed,
    NotARelayer,
    ReentrantCall,
)
from quorumdao.logger.auditLogger import AuditLogger
from quorumdao.types import (
    Address,
    CallSpec,
    CommitmentStatus,
    Digest,
    ExecutedTx,
    ExecutionReceipt,
    TransactionIntent,
    to_address,
)

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from quorumdao.chain.world import World

LOGGER = logging.getLogger(__name__)

SignatureLike = Union[Signature, bytes, str]


@dataclass
class OrganizationState:
    """All persisted state of one organization."""

    name: str
    symbol: str
    quorum: int
    ledger: WeightLedger = field(default_factory=WeightLedger)
    nonce: int = 0
    relayers: RelayerRegistry = field(default_factory=RelayerRegistry)
    commitments: CommitmentStore = field(default_factory=CommitmentStore)
    executed: List[ExecutedTx] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 1 <= self.quorum <= 100:
            raise ValueError(f"Quorum must be between 1 and 100, got {self.quorum}")


class Organization(Contract):
    """Quorum-governed organization deployed at a fixed address."""

    state: OrganizationState

    def __init__(
        self,
        address: Address,
        state: OrganizationState,
        audit: Optional[AuditLogger] = None,
        authorizer: Optional[TransactionAuthorizer] = None,
    ) -> None:
        super().__init__(address, state)
        self.audit = audit or AuditLogger(state.name)
        self.authorizer = authorizer or TransactionAuthorizer()
        self._executing = False

    # Views ---------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.state.name

    @property
    def quorum(self) -> int:
        return self.state.quorum

    @property
    def nonce(self) -> int:
        return self.state.nonce

    @property
    def ledger(self) -> WeightLedger:
        return self.state.ledger

    @property
    def executed_txs(self) -> List[ExecutedTx]:
        return list(self.state.executed)

    def weight_of(self, address: Address) -> int:
        return self.state.ledger.weight_of(address)

    def total_weight(self) -> int:
        return self.state.ledger.total_weight()

    def is_permitted(self, address: Address) -> bool:
        return self.state.relayers.is_permitted(address)

    def commitment_status(self, digest: Digest) -> Optional[CommitmentStatus]:
        return self.state.commitments.status(digest)

    def get_tx_hash(self, target: Address, payload: bytes, value: int, nonce: int, timestamp: int) -> Digest:
        """Return the digest members must sign for this call on this organization."""
        return compute_digest(self.address, target, payload, value, nonce, timestamp, chain_id=self._world().chain_id)

    # Execution entry points ----------------------------------------------

    def authorize_and_execute(
        self,
        target: Address,
        payload: bytes,
        value: int,
        nonce: int,
        timestamp: int,
        signatures: Sequence[SignatureLike],
    ) -> ExecutionReceipt:
        """Verify a signed intent and execute it.

        On success the call's effects, the nonce increment and the history
        entry are committed together. On any failure nothing changes.

        Raises:
            InvalidNonce, InvalidSignature, DuplicateSigner, QuorumNotMet:
                The intent was rejected before execution.
            ExecutionFailed: The call reverted; all effects were rolled back.
        """
        world = self._world()
        intent = TransactionIntent(
            organization=self.address,
            target=target,
            payload=payload,
            value=value,
            nonce=nonce,
            timestamp=timestamp,
        )
        with self._guard():
            try:
                auth = self.authorizer.verify(self.state, intent, signatures, chain_id=world.chain_id)
            except AuthorizationError as exc:
                self.audit.intent_rejected(nonce, intent.target, exc)
                raise

            try:
                with world.atomic():
                    self.state.nonce += 1
                    result = world.executor.execute(world, self.address, intent.call)
                    self.state.executed.append(
                        ExecutedTx(
                            digest=auth.digest,
                            target=intent.target,
                            payload=intent.payload,
                            value=intent.value,
                            nonce=intent.nonce,
                            timestamp=intent.timestamp,
                            executed_at=world.timestamp,
                        )
                    )
            except ExecutionFailed as exc:
                self.audit.intent_rejected(nonce, intent.target, exc)
                raise

        self.audit.intent_executed(auth.digest, intent.nonce, intent.target, auth.signers, auth.weight)
        return ExecutionReceipt(
            digest=auth.digest,
            nonce=intent.nonce,
            target=intent.target,
            value=intent.value,
            signers=auth.signers,
            weight=auth.weight,
            return_value=result,
        )

    def execute_permitted(self, caller: Address, call: Union[CallSpec, Sequence[Any]]) -> Any:
        """Execute ``call`` for a registered relayer without signatures.

        Raises:
            NotARelayer: ``caller`` is not in the relayer registry.
            ExecutionFailed: The call reverted; its effects were rolled back.
        """
        world = self._world()
        call = CallSpec.coerce(call)
        with self._guard():
            if not self.state.relayers.is_permitted(caller):
                raise NotARelayer(to_address(caller))
            return world.executor.execute(world, self.address, call)

    # External functions --------------------------------------------------

    @external("mint(address,uint256)")
    def mint(self, ctx: CallContext, to: Address, amount: int) -> bool:
        self._only_self(ctx)
        self.state.ledger.mint(to, amount)
        LOGGER.debug("%s minted %d to %s", self.name, amount, to)
        return True

    @external("burn(address,uint256)")
    def burn(self, ctx: CallContext, owner: Address, amount: int) -> bool:
        self._only_self(ctx)
        self.state.ledger.burn(owner, amount)
        return True

    @external("addPermitted(address)")
    def add_permitted(self, ctx: CallContext, relayer: Address) -> bool:
        self._only_self(ctx)
        self.state.relayers.add(relayer)
        LOGGER.debug("%s permitted relayer %s", self.name, relayer)
        return True

    @external("commitBatch(bytes32)")
    def commit_batch(self, ctx: CallContext, digest: bytes) -> bool:
        self._only_self(ctx)
        self.state.commitments.approve(digest)
        LOGGER.debug("%s approved batch 0x%s", self.name, digest.hex())
        return True

    @external("transfer(address,uint256)")
    def transfer(self, ctx: CallContext, to: Address, amount: int) -> bool:
        self.state.ledger.transfer(ctx.sender, to, amount)
        return True

    @external("balanceOf(address)")
    def balance_of(self, ctx: CallContext, owner: Address) -> int:
        return self.state.ledger.weight_of(owner)

    @external("totalSupply()")
    def total_supply(self, ctx: CallContext) -> int:
        return self.state.ledger.total_weight()

    @external("isPermitted(address)")
    def is_permitted_call(self, ctx: CallContext, address: Address) -> bool:
        return self.state.relayers.is_permitted(address)

    def receive(self, ctx: CallContext) -> None:
        """Accept native value into the treasury."""
        return None

    # Internals -----------------------------------------------------------

    def _only_self(self, ctx: CallContext) -> None:
        if ctx.sender != self.address:
            raise ContractRevert(f"{self.name}: only callable by the organization itself")

    def _world(self) -> "World":
        if self.world is None:
            raise RuntimeError(f"Organization {self.address} is not deployed")
        return self.world

    @contextmanager
    def _guard(self) -> Iterator[None]:
        """Serialize on the world lock and reject re-entry into execution."""
        with self._world().serialized():
            if self._executing:
                raise ReentrantCall(f"{self.name}: re-entrant execution", target=self.address)
            self._executing = True
            try:
                yield
            finally:
                self._executing = False
