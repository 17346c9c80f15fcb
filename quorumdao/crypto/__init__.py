"""Digest construction and signature recovery."""

from __future__ import annotations

from quorumdao.crypto.digest import (
    batch_tag,
    compute_batch_digest,
    compute_digest,
    compute_intent_digest,
    transaction_tag,
)
from quorumdao.crypto.signatures import Signature, recover_signer, sign_digest

__all__ = [
    "batch_tag",
    "compute_batch_digest",
    "compute_digest",
    "compute_intent_digest",
    "transaction_tag",
    "Signature",
    "recover_signer",
    "sign_digest",
]
