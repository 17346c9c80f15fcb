"""Deterministic, domain-separated digests for single intents and batches.

Both digests are keccak-256 over standard ABI encoding, so an off-chain
proposer can reproduce them with any Ethereum tooling. Each encoding starts
with a protocol tag and the chain id, followed by the organization address,
which keeps digests from colliding across schemes, chains and organizations.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Union

from eth_abi import encode
from web3 import Web3

from quorumdao.core.config import get_settings
from quorumdao.types import Address, CallSpec, Digest, TransactionIntent, to_address, to_uint

TX_TYPES = ["bytes32", "uint256", "address", "address", "bytes", "uint256", "uint256", "uint256"]
BATCH_TYPES = ["bytes32", "uint256", "address", "address[]", "bytes[]", "uint256[]", "uint256"]


def transaction_tag() -> bytes:
    """Return the 32-byte domain tag for single-intent digests."""
    return bytes(Web3.keccak(text=get_settings().protocol_tag))


def batch_tag() -> bytes:
    """Return the 32-byte domain tag for batch digests."""
    return bytes(Web3.keccak(text=get_settings().batch_protocol_tag))


def _chain_id(chain_id: Optional[int]) -> int:
    return to_uint(get_settings().chain_id if chain_id is None else chain_id, "chain_id")


def compute_digest(
    org: Address,
    target: Address,
    payload: bytes,
    value: int,
    nonce: int,
    timestamp: int,
    chain_id: Optional[int] = None,
) -> Digest:
    """Return the digest members sign to authorize a single call.

    Args:
        org: Organization that will execute the call.
        target: Address the call is dispatched to.
        payload: ABI call data.
        value: Native value forwarded with the call.
        nonce: Organization nonce the intent is bound to.
        timestamp: Opaque proposer timestamp.
        chain_id: Chain id; defaults to ``settings.chain_id``.

    Returns:
        The 32-byte keccak-256 digest.
    """
    encoded = encode(
        TX_TYPES,
        [
            transaction_tag(),
            _chain_id(chain_id),
            to_address(org),
            to_address(target),
            bytes(payload),
            to_uint(value, "value"),
            to_uint(nonce, "nonce"),
            to_uint(timestamp, "timestamp"),
        ],
    )
    return bytes(Web3.keccak(encoded))


def compute_intent_digest(intent: TransactionIntent, chain_id: Optional[int] = None) -> Digest:
    """Return :func:`compute_digest` over the fields of ``intent``."""
    return compute_digest(
        intent.organization,
        intent.target,
        intent.payload,
        intent.value,
        intent.nonce,
        intent.timestamp,
        chain_id=chain_id,
    )


def compute_batch_digest(
    org: Address,
    calls: Iterable[Union[CallSpec, Sequence[Any]]],
    future_nonce: int,
    chain_id: Optional[int] = None,
) -> Digest:
    """Return the digest binding an ordered list of calls to an organization.

    ``future_nonce`` is the organization nonce the commit intent for this batch
    is expected to use. Reordering ``calls`` changes the digest.

    Raises:
        ValueError: If ``calls`` is empty.
    """
    specs: List[CallSpec] = [CallSpec.coerce(call) for call in calls]
    if not specs:
        raise ValueError("A batch must contain at least one call")
    encoded = encode(
        BATCH_TYPES,
        [
            batch_tag(),
            _chain_id(chain_id),
            to_address(org),
            [spec.target for spec in specs],
            [spec.payload for spec in specs],
            [spec.value for spec in specs],
            to_uint(future_nonce, "future_nonce"),
        ],
    )
    return bytes(Web3.keccak(encoded))
