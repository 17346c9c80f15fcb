"""Organizations, their authorization logic and the batch coordinator."""

from __future__ import annotations

from quorumdao.dao.authorizer import TransactionAuthorizer
from quorumdao.dao.batch import BatchCoordinator
from quorumdao.dao.commitments import CommitmentStore
from quorumdao.dao.factory import Factory
from quorumdao.dao.ledger import WeightLedger
from quorumdao.dao.organization import Organization, OrganizationState
from quorumdao.dao.relayers import RelayerRegistry

__all__ = [
    "TransactionAuthorizer",
    "BatchCoordinator",
    "CommitmentStore",
    "Factory",
    "WeightLedger",
    "Organization",
    "OrganizationState",
    "RelayerRegistry",
]
