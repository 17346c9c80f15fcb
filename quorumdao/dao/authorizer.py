"""Signature-set verification for single transaction intents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Set, Union

from quorumdao.consensus.weighted_quorum import meets_quorum, signer_weight
from quorumdao.crypto.digest import compute_intent_digest
from quorumdao.crypto.signatures import Signature, recover_signer
from quorumdao.errors import DuplicateSigner, InvalidNonce, InvalidSignature, QuorumNotMet
from quorumdao.types import Address, Authorization, TransactionIntent

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from quorumdao.dao.organization import OrganizationState

LOGGER = logging.getLogger(__name__)


class TransactionAuthorizer:
    """Validates an intent and its signatures against an organization's state.

    Verification only reads state. The checks run in a fixed order: nonce,
    signature recovery, signer distinctness, then weighted quorum. The first
    failure is raised as its typed error.
    """

    def verify(
        self,
        state: "OrganizationState",
        intent: TransactionIntent,
        signatures: Iterable[Union[Signature, bytes, str]],
        chain_id: int,
    ) -> Authorization:
        """Return the authorization for ``intent`` or raise why it is rejected.

        The digest is recomputed from the intent's fields, never taken from the
        caller, so a signature only counts for the exact call it was made over.

        Raises:
            InvalidNonce: ``intent.nonce`` differs from ``state.nonce``.
            InvalidSignature: A signature is malformed or unrecoverable.
            DuplicateSigner: Two signatures recover to the same address.
            QuorumNotMet: Signers hold less than ``state.quorum`` percent of
                the current total weight.
        """
        if intent.nonce != state.nonce:
            raise InvalidNonce(expected=state.nonce, actual=intent.nonce)

        digest = compute_intent_digest(intent, chain_id=chain_id)

        signers: List[Address] = []
        seen: Set[Address] = set()
        for index, signature in enumerate(signatures):
            try:
                signer = recover_signer(digest, signature)
            except InvalidSignature as exc:
                raise InvalidSignature(str(exc), index=index) from exc
            if signer in seen:
                raise DuplicateSigner(signer)
            seen.add(signer)
            signers.append(signer)

        weight = signer_weight(signers, ledger=state.ledger)
        total = state.ledger.total_weight()
        if not signers or not meets_quorum(weight, total, state.quorum):
            raise QuorumNotMet(weight=weight, total_weight=total, quorum=state.quorum)

        LOGGER.debug("Intent nonce=%d verified: %d signers, weight %d/%d", intent.nonce, len(signers), weight, total)
        return Authorization(digest=digest, signers=tuple(signers), weight=weight, total_weight=total)
