"""The single effect-execution boundary.

Every external call made on behalf of an organization (single authorized
intents, relayed batch sub-calls, plain account calls) passes through
:meth:`Executor.execute`. It is the only place where arbitrary target code
runs, and the only place where target failures become ``ExecutionFailed``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence, Union

from quorumdao.chain.contract import CallContext
from quorumdao.errors import ExecutionFailed
from quorumdao.types import Address, CallSpec, to_address

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from quorumdao.chain.world import World

LOGGER = logging.getLogger(__name__)


class Executor:
    """Performs a call effect against the world atomically."""

    def execute(self, world: "World", sender: Address, call: Union[CallSpec, Sequence[Any]]) -> Any:
        """Transfer ``call.value`` and dispatch ``call.payload`` to ``call.target``.

        A target without a deployed contract is a plain account: the value is
        credited and the payload is ignored.

        Returns:
            Whatever the target's external function returns.

        Raises:
            ExecutionFailed: If the value transfer or the target call fails.
                All effects of the call are rolled back first.
        """
        call = CallSpec.coerce(call)
        sender = to_address(sender)
        LOGGER.debug("Executing %s -> %s value=%d payload=%d bytes", sender, call.target, call.value, len(call.payload))
        try:
            with world.atomic():
                if call.value:
                    world.transfer_value(sender, call.target, call.value)
                contract = world.contract_at(call.target)
                if contract is None:
                    return None
                return contract.dispatch(CallContext(world=world, sender=sender, value=call.value), call.payload)
        except ExecutionFailed:
            raise
        except Exception as exc:
            LOGGER.info("Call %s -> %s failed: %s", sender, call.target, exc)
            raise ExecutionFailed(f"call to {call.target} failed: {exc}", target=call.target) from exc
