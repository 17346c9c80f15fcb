"""In-memory chain: ABI helpers, contracts, world state and the executor."""

from __future__ import annotations

from quorumdao.chain.abi import decode_call, encode_call, function_selector
from quorumdao.chain.contract import CallContext, Contract, external
from quorumdao.chain.executor import Executor
from quorumdao.chain.world import World

__all__ = [
    "decode_call",
    "encode_call",
    "function_selector",
    "CallContext",
    "Contract",
    "external",
    "Executor",
    "World",
]
