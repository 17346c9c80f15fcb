"""Typed secp256k1 signatures over EIP-191 prefixed digests.

Members sign a 32-byte digest with the Ethereum personal-message convention,
``"\\x19Ethereum Signed Message:\\n32" || digest``. This is the same thing
``signer.signMessage(arrayify(digest))`` does in ethers and
``Account.sign_message(encode_defunct(primitive=digest))`` does here. Signing
and verification must use the same prefix. A mismatch does not raise; it
recovers an unrelated address.
"""

from __future__ import annotations

import binascii
from dataclasses import dataclass
from typing import Union

from eth_account import Account
from eth_account.messages import encode_defunct

from quorumdao.errors import InvalidSignature
from quorumdao.types import Address, Digest

SIGNATURE_LENGTH = 65
VALID_V = frozenset({0, 1, 27, 28})


@dataclass(frozen=True)
class Signature:
    """A 65-byte ``r || s || v`` signature, validated on construction."""

    raw: bytes

    def __post_init__(self) -> None:
        """Reject values that cannot possibly be recoverable signatures."""
        if not isinstance(self.raw, (bytes, bytearray)):
            raise InvalidSignature(f"signature must be bytes, got {type(self.raw).__name__}")
        object.__setattr__(self, "raw", bytes(self.raw))
        if len(self.raw) != SIGNATURE_LENGTH:
            raise InvalidSignature(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(self.raw)}")
        if self.v not in VALID_V:
            raise InvalidSignature(f"invalid recovery id v={self.v}")

    @classmethod
    def parse(cls, value: Union["Signature", bytes, str]) -> "Signature":
        """Build a signature from raw bytes, a hex string or an existing ``Signature``."""
        if isinstance(value, Signature):
            return value
        if isinstance(value, str):
            text = value[2:] if value.startswith(("0x", "0X")) else value
            try:
                value = binascii.unhexlify(text)
            except (binascii.Error, ValueError) as exc:
                raise InvalidSignature("signature is not valid hex") from exc
        return cls(value)

    @property
    def r(self) -> int:
        return int.from_bytes(self.raw[0:32], "big")

    @property
    def s(self) -> int:
        return int.from_bytes(self.raw[32:64], "big")

    @property
    def v(self) -> int:
        return self.raw[64]

    def hex(self) -> str:
        return "0x" + self.raw.hex()


def recover_signer(digest: Digest, signature: Union[Signature, bytes, str]) -> Address:
    """Recover the checksum address that signed ``digest``.

    Raises:
        InvalidSignature: If the signature is malformed or unrecoverable.
    """
    if len(digest) != 32:
        raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
    sig = Signature.parse(signature)
    try:
        return Account.recover_message(encode_defunct(primitive=bytes(digest)), signature=sig.raw)
    except Exception as exc:  # BadSignature, ValidationError or ValueError from the backend
        raise InvalidSignature(f"signature does not recover: {exc}") from exc


def sign_digest(digest: Digest, private_key: Union[str, bytes]) -> Signature:
    """Sign ``digest`` the way an off-chain member wallet would."""
    signed = Account.sign_message(encode_defunct(primitive=bytes(digest)), private_key=private_key)
    return Signature(bytes(signed.signature))
