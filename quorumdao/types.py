"""Base types and data structures for quorum-governed execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Sequence, Tuple, Union

from web3 import Web3

Address = str
Digest = bytes
ZERO_ADDRESS: Address = "0x0000000000000000000000000000000000000000"


def to_address(value: Union[str, bytes]) -> Address:
    """Return the EIP-55 checksum form of ``value``.

    Raises:
        ValueError: If ``value`` is not a 20-byte address.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(value)}")
        value = "0x" + bytes(value).hex()
    if not isinstance(value, str) or not Web3.is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(value)


def to_uint(value: int, name: str = "value") -> int:
    """Validate that ``value`` fits a uint256."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0 or value >= 2**256:
        raise ValueError(f"{name} out of uint256 range: {value}")
    return value


class IntentStatus(Enum):
    """Final outcome of a submitted transaction intent."""

    EXECUTED = "executed"
    REJECTED = "rejected"


class CommitmentStatus(Enum):
    """State of a batch digest in an organization's commitment store."""

    APPROVED = "approved"
    CONSUMED = "consumed"


@dataclass(frozen=True)
class CallSpec:
    """A single call effect: target address, opaque ABI payload and native value."""

    target: Address
    payload: bytes = b""
    value: int = 0

    def __post_init__(self) -> None:
        """Normalise the target and validate the payload and value."""
        object.__setattr__(self, "target", to_address(self.target))
        object.__setattr__(self, "payload", bytes(self.payload))
        to_uint(self.value, "value")

    @classmethod
    def coerce(cls, call: Union["CallSpec", Sequence[Any]]) -> "CallSpec":
        """Accept either a ``CallSpec`` or a ``(target, payload, value)`` triple."""
        if isinstance(call, CallSpec):
            return call
        target, payload, value = call
        return cls(target=target, payload=payload, value=value)


@dataclass(frozen=True)
class TransactionIntent:
    """Transient proposal of a single call; its digest is what members sign."""

    organization: Address
    target: Address
    payload: bytes
    value: int
    nonce: int
    timestamp: int

    def __post_init__(self) -> None:
        """Normalise addresses and validate integer fields."""
        object.__setattr__(self, "organization", to_address(self.organization))
        object.__setattr__(self, "target", to_address(self.target))
        object.__setattr__(self, "payload", bytes(self.payload))
        to_uint(self.value, "value")
        to_uint(self.nonce, "nonce")
        to_uint(self.timestamp, "timestamp")

    @property
    def call(self) -> CallSpec:
        """Return the call effect this intent authorizes."""
        return CallSpec(target=self.target, payload=self.payload, value=self.value)


@dataclass(frozen=True)
class Authorization:
    """Outcome of a successful signature-set verification."""

    digest: Digest
    signers: Tuple[Address, ...]
    weight: int
    total_weight: int


@dataclass(frozen=True)
class ExecutedTx:
    """History entry for an executed single intent."""

    digest: Digest
    target: Address
    payload: bytes
    value: int
    nonce: int
    timestamp: int
    executed_at: int


@dataclass(frozen=True)
class ExecutionReceipt:
    """Result returned to the submitter of an authorized intent."""

    digest: Digest
    nonce: int
    target: Address
    value: int
    signers: Tuple[Address, ...]
    weight: int
    return_value: Any = None
    status: IntentStatus = IntentStatus.EXECUTED


@dataclass(frozen=True)
class BatchReceipt:
    """Result returned to the relayer of an executed batch."""

    digest: Digest
    organization: Address
    relayer: Address
    return_values: List[Any] = field(default_factory=list)
