"""quorumdao: quorum-governed execution for token-weighted organizations.

Members authorize calls by signing a deterministic digest off-chain; an
organization executes the call once signers hold enough voting weight. A
commit/execute batching layer lets one signed approval cover an ordered list
of calls.

Public API re-exports:

  - quorumdao.crypto: digests and signatures
  - quorumdao.chain: world state, contracts and the executor
  - quorumdao.dao: organizations, factory and batch coordinator
"""

from __future__ import annotations

from .types import (  # noqa: F401
    Address,
    BatchReceipt,
    CallSpec,
    CommitmentStatus,
    ExecutedTx,
    ExecutionReceipt,
    IntentStatus,
    TransactionIntent,
)
from .errors import (  # noqa: F401
    BatchExecutionFailed,
    CommitmentAlreadyApproved,
    CommitmentAlreadyConsumed,
    CommitmentNotFound,
    ContractRevert,
    DuplicateSigner,
    ExecutionFailed,
    InvalidNonce,
    InvalidSignature,
    NotARelayer,
    QuorumDaoError,
    QuorumNotMet,
    ReentrantCall,
)
from .crypto import (  # noqa: F401
    Signature,
    compute_batch_digest,
    compute_digest,
    recover_signer,
    sign_digest,
)
from .chain import Contract, Executor, World, encode_call, external  # noqa: F401
from .dao import BatchCoordinator, Factory, Organization  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    # types
    "Address",
    "BatchReceipt",
    "CallSpec",
    "CommitmentStatus",
    "ExecutedTx",
    "ExecutionReceipt",
    "IntentStatus",
    "TransactionIntent",
    # errors
    "BatchExecutionFailed",
    "CommitmentAlreadyApproved",
    "CommitmentAlreadyConsumed",
    "CommitmentNotFound",
    "ContractRevert",
    "DuplicateSigner",
    "ExecutionFailed",
    "InvalidNonce",
    "InvalidSignature",
    "NotARelayer",
    "QuorumDaoError",
    "QuorumNotMet",
    "ReentrantCall",
    # crypto
    "Signature",
    "compute_batch_digest",
    "compute_digest",
    "recover_signer",
    "sign_digest",
    # chain
    "Contract",
    "Executor",
    "World",
    "encode_call",
    "external",
    # dao
    "BatchCoordinator",
    "Factory",
    "Organization",
]
