"""Approved batch digests awaiting execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from quorumdao.errors import CommitmentAlreadyApproved, CommitmentAlreadyConsumed, CommitmentNotFound
from quorumdao.types import CommitmentStatus, Digest


@dataclass
class CommitmentStore:
    """Maps batch digests to APPROVED or CONSUMED.

    A digest moves ``absent -> APPROVED -> CONSUMED`` and never back, so a
    consumed batch cannot be replayed or re-approved.
    """

    entries: Dict[Digest, CommitmentStatus] = field(default_factory=dict)

    def status(self, digest: Digest) -> Optional[CommitmentStatus]:
        return self.entries.get(bytes(digest))

    def approve(self, digest: Digest) -> None:
        digest = _digest32(digest)
        current = self.entries.get(digest)
        if current is CommitmentStatus.APPROVED:
            raise CommitmentAlreadyApproved(digest)
        if current is CommitmentStatus.CONSUMED:
            raise CommitmentAlreadyConsumed(digest)
        self.entries[digest] = CommitmentStatus.APPROVED

    def require_approved(self, digest: Digest) -> None:
        """Raise unless ``digest`` is approved and unconsumed."""
        digest = bytes(digest)
        current = self.entries.get(digest)
        if current is CommitmentStatus.CONSUMED:
            raise CommitmentAlreadyConsumed(digest)
        if current is not CommitmentStatus.APPROVED:
            raise CommitmentNotFound(digest)

    def consume(self, digest: Digest) -> None:
        self.require_approved(digest)
        self.entries[bytes(digest)] = CommitmentStatus.CONSUMED

    def pending(self) -> int:
        """Number of approved, unconsumed digests."""
        return sum(1 for s in self.entries.values() if s is CommitmentStatus.APPROVED)


def _digest32(digest: Digest) -> bytes:
    digest = bytes(digest)
    if len(digest) != 32:
        raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
    return digest
