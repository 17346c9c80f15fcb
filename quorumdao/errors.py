"""Exception taxonomy for quorum-governed execution.

Every rejection is a distinct, typed outcome. Authorization failures are raised
before any state is touched; execution failures are raised after the world has
been rolled back to its pre-call state.
"""

from __future__ import annotations

from typing import Optional


class QuorumDaoError(Exception):
    """Base exception for all quorumdao errors."""

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)


class AuthorizationError(QuorumDaoError):
    """A transaction intent failed verification and was rejected."""


class InvalidNonce(AuthorizationError):
    """Submitted nonce does not equal the organization's current nonce."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"invalid nonce: expected {expected}, got {actual}")


class InvalidSignature(AuthorizationError):
    """A signature is malformed or does not recover to an address."""

    def __init__(self, message: str = "invalid signature", index: Optional[int] = None) -> None:
        self.index = index
        if index is not None:
            message = f"{message} (signature #{index})"
        super().__init__(message)


class DuplicateSigner(AuthorizationError):
    """Two signatures in one set recover to the same address."""

    def __init__(self, signer: str) -> None:
        self.signer = signer
        super().__init__(f"duplicate signer {signer}")


class QuorumNotMet(AuthorizationError):
    """Recovered signer weight is below the quorum threshold."""

    def __init__(self, weight: int, total_weight: int, quorum: int) -> None:
        self.weight = weight
        self.total_weight = total_weight
        self.quorum = quorum
        super().__init__(
            f"quorum not met: signers hold {weight} of {total_weight}, {quorum}% required"
        )


class ContractRevert(QuorumDaoError):
    """Raised by contract code to abort a call, like a Solidity ``require``."""


class ExecutionFailed(QuorumDaoError):
    """The authorized call reverted or errored; all its effects were rolled back."""

    def __init__(self, message: str, target: Optional[str] = None) -> None:
        self.target = target
        super().__init__(message)


class ReentrantCall(ExecutionFailed):
    """An organization entry point was re-entered while executing."""


class BatchExecutionFailed(ExecutionFailed):
    """A sub-call of a batch failed; the whole batch was rolled back."""

    def __init__(self, index: int, target: str, reason: str) -> None:
        self.index = index
        super().__init__(f"batch call #{index} to {target} failed: {reason}", target=target)


class CommitmentError(QuorumDaoError):
    """Base class for commitment store failures."""

    def __init__(self, message: str, digest: bytes) -> None:
        self.digest = digest
        super().__init__(f"{message}: 0x{digest.hex()}")


class CommitmentNotFound(CommitmentError):
    """The batch digest has no approved commitment."""

    def __init__(self, digest: bytes, message: str = "commitment not found") -> None:
        super().__init__(message, digest)


class CommitmentAlreadyConsumed(CommitmentNotFound):
    """The batch digest was approved once and has already been executed."""

    def __init__(self, digest: bytes) -> None:
        super().__init__(digest, message="commitment already consumed")


class CommitmentAlreadyApproved(CommitmentError):
    """The batch digest is already approved and awaiting execution."""

    def __init__(self, digest: bytes) -> None:
        super().__init__("commitment already approved", digest)


class NotARelayer(QuorumDaoError):
    """The caller is not in the organization's relayer registry."""

    def __init__(self, caller: str) -> None:
        self.caller = caller
        super().__init__(f"{caller} is not a permitted relayer")


__all__ = [
    "QuorumDaoError",
    "AuthorizationError",
    "InvalidNonce",
    "InvalidSignature",
    "DuplicateSigner",
    "QuorumNotMet",
    "ContractRevert",
    "ExecutionFailed",
    "ReentrantCall",
    "BatchExecutionFailed",
    "CommitmentError",
    "CommitmentNotFound",
    "CommitmentAlreadyConsumed",
    "CommitmentAlreadyApproved",
    "NotARelayer",
]
