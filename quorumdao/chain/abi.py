"""Ethereum ABI call-data helpers.

Payloads are ``selector || abi.encode(args)``. The selector is the first
four bytes of ``keccak256(signature)``, exactly as produced by ethers
``interface.encodeFunctionData`` or web3 ``contract.encodeABI``.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from eth_abi import decode, encode
from web3 import Web3

from quorumdao.types import to_address

SELECTOR_LENGTH = 4


def argument_types(signature: str) -> List[str]:
    """Return the argument types of ``name(type1,type2,...)``."""
    open_idx = signature.find("(")
    if open_idx <= 0 or not signature.endswith(")"):
        raise ValueError(f"Malformed function signature: {signature!r}")
    inner = signature[open_idx + 1 : -1].strip()
    if not inner:
        return []
    if "(" in inner:
        raise ValueError(f"Tuple arguments are not supported: {signature!r}")
    return [part.strip() for part in inner.split(",")]


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector of ``signature``."""
    argument_types(signature)
    return bytes(Web3.keccak(text=signature.replace(" ", "")))[:SELECTOR_LENGTH]


def encode_call(signature: str, *args: Any) -> bytes:
    """Build call data for ``signature`` with ``args``."""
    types = argument_types(signature)
    if len(types) != len(args):
        raise ValueError(f"{signature} takes {len(types)} arguments, got {len(args)}")
    return function_selector(signature) + encode(types, list(args))


def split_call(payload: bytes) -> Tuple[bytes, bytes]:
    """Split call data into ``(selector, encoded_arguments)``."""
    if len(payload) < SELECTOR_LENGTH:
        raise ValueError("Call data shorter than a function selector")
    return bytes(payload[:SELECTOR_LENGTH]), bytes(payload[SELECTOR_LENGTH:])


def decode_call(signature: str, payload: bytes) -> Tuple[Any, ...]:
    """Decode the arguments of call data produced for ``signature``.

    Address arguments are returned in checksum form.

    Raises:
        ValueError: If the selector does not match ``signature``.
    """
    selector, data = split_call(payload)
    if selector != function_selector(signature):
        raise ValueError(f"Selector 0x{selector.hex()} does not match {signature}")
    types = argument_types(signature)
    values = decode(types, data)
    return tuple(to_address(v) if t == "address" else v for t, v in zip(types, values))


def coerce_argument(abi_type: str, text: str) -> Any:
    """Convert a command-line string into a value for ``abi_type``."""
    if abi_type.endswith("]"):
        raise ValueError(f"Array arguments are not supported on the command line: {abi_type}")
    if abi_type.startswith(("uint", "int")):
        return int(text, 0)
    if abi_type == "bool":
        if text.lower() not in ("true", "false", "1", "0"):
            raise ValueError(f"Invalid bool: {text!r}")
        return text.lower() in ("true", "1")
    if abi_type == "address":
        return to_address(text)
    if abi_type.startswith("bytes"):
        return Web3.to_bytes(hexstr=text)
    return text


def coerce_arguments(signature: str, texts: Sequence[str]) -> List[Any]:
    """Apply :func:`coerce_argument` to each positional text argument."""
    types = argument_types(signature)
    if len(types) != len(texts):
        raise ValueError(f"{signature} takes {len(types)} arguments, got {len(texts)}")
    return [coerce_argument(t, s) for t, s in zip(types, texts)]
