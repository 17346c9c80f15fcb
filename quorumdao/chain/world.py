"""In-memory chain state: accounts, native balances and deployed contracts."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from quorumdao.chain.contract import Contract
from quorumdao.chain.executor import Executor
from quorumdao.core.config import get_settings
from quorumdao.errors import ContractRevert
from quorumdao.types import Address, CallSpec, to_address, to_uint

LOGGER = logging.getLogger(__name__)

Snapshot = Tuple[Dict[Address, int], Dict[Address, Any]]


class World:
    """Serialized, snapshot-able container of all contract and balance state.

    Every state-changing entry point runs under one re-entrant lock, so
    operations on the same world never interleave. :meth:`atomic` gives
    all-or-nothing semantics to any block of work.
    """

    def __init__(
        self,
        chain_id: Optional[int] = None,
        timestamp: Optional[int] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        """Initialise an empty world.

        Args:
            chain_id: Chain id used for digest domain separation; defaults to
                ``settings.chain_id``.
            timestamp: Initial block timestamp; defaults to the wall clock.
            executor: Effect executor; a default :class:`Executor` if omitted.
        """
        self.chain_id = to_uint(get_settings().chain_id if chain_id is None else chain_id, "chain_id")
        self.timestamp = int(time.time()) if timestamp is None else to_uint(timestamp, "timestamp")
        self.executor = executor or Executor()
        self._contracts: Dict[Address, Contract] = {}
        self._balances: Dict[Address, int] = {}
        self._lock = threading.RLock()
        self._depth = 0

    # Contracts -----------------------------------------------------------

    def deploy(self, contract: Contract) -> Contract:
        """Register ``contract`` at its address."""
        with self._lock:
            if contract.address in self._contracts:
                raise ValueError(f"Address {contract.address} already holds a contract")
            contract.world = self
            self._contracts[contract.address] = contract
            LOGGER.debug("Deployed %s at %s", type(contract).__name__, contract.address)
            return contract

    def contract_at(self, address: Address) -> Optional[Contract]:
        """Return the contract deployed at ``address``, if any."""
        return self._contracts.get(to_address(address))

    def is_contract(self, address: Address) -> bool:
        return to_address(address) in self._contracts

    # Native balances -----------------------------------------------------

    def balance_of(self, address: Address) -> int:
        return self._balances.get(to_address(address), 0)

    def fund(self, address: Address, amount: int) -> None:
        """Credit native value to ``address`` out of thin air (genesis/faucet)."""
        to_uint(amount, "amount")
        with self._lock:
            address = to_address(address)
            self._balances[address] = self._balances.get(address, 0) + amount

    def transfer_value(self, sender: Address, recipient: Address, amount: int) -> None:
        """Move native value between accounts.

        Raises:
            ContractRevert: If ``sender`` holds less than ``amount``.
        """
        to_uint(amount, "amount")
        with self._lock:
            sender, recipient = to_address(sender), to_address(recipient)
            available = self._balances.get(sender, 0)
            if available < amount:
                raise ContractRevert(f"insufficient native balance: {sender} has {available}, needs {amount}")
            self._balances[sender] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount

    # Time ----------------------------------------------------------------

    def advance_time(self, seconds: int) -> int:
        """Move the block timestamp forward and return the new value."""
        with self._lock:
            self.timestamp += to_uint(seconds, "seconds")
            return self.timestamp

    # Serialization and atomicity -----------------------------------------

    @contextmanager
    def serialized(self) -> Iterator["World"]:
        """Hold the world lock for the duration of the block."""
        with self._lock:
            yield self

    @contextmanager
    def atomic(self) -> Iterator["World"]:
        """Run a block all-or-nothing.

        If the block raises, every contract state, every native balance and
        the set of deployed contracts are restored to their values at entry,
        and the exception propagates. Nested blocks restore only their own
        scope.
        """
        with self._lock:
            snapshot = self._snapshot()
            deployed = dict(self._contracts)
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._contracts = deployed
                self._restore(snapshot)
                LOGGER.debug("Rolled back atomic section at depth %d", self._depth)
                raise
            finally:
                self._depth -= 1

    @property
    def in_atomic(self) -> bool:
        return self._depth > 0

    def _snapshot(self) -> Snapshot:
        return dict(self._balances), {addr: c.snapshot() for addr, c in self._contracts.items()}

    def _restore(self, snapshot: Snapshot) -> None:
        balances, states = snapshot
        self._balances = dict(balances)
        for address, state in states.items():
            self._contracts[address].restore(state)

    # Externally owned account entry point --------------------------------

    def call(self, sender: Address, call: CallSpec) -> Any:
        """Submit a call from an externally owned account."""
        with self._lock:
            return self.executor.execute(self, sender, call)
