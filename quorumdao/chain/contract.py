"""In-memory contract base class with selector-based dispatch."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, TypeVar

from quorumdao.chain.abi import decode_call, function_selector, split_call
from quorumdao.errors import ContractRevert
from quorumdao.types import Address, to_address

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from quorumdao.chain.world import World

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class CallContext:
    """Environment of one dispatched call (``msg.sender`` and ``msg.value``)."""

    world: "World"
    sender: Address
    value: int


def external(signature: str) -> Callable[[F], F]:
    """Expose a method to call data matching ``signature``.

    The decorated method receives the :class:`CallContext` followed by the
    decoded arguments.
    """

    def decorator(fn: F) -> F:
        fn.__external_signature__ = signature  # type: ignore[attr-defined]
        return fn

    return decorator


class Contract:
    """Base class for contracts deployed into a :class:`~quorumdao.chain.world.World`.

    All mutable contract data must live in ``self.state`` so that the world
    can snapshot and restore it around atomic sections.
    """

    _externals: Dict[bytes, Tuple[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        externals: Dict[bytes, Tuple[str, str]] = {}
        for klass in reversed(cls.__mro__):
            for name, member in vars(klass).items():
                signature = getattr(member, "__external_signature__", None)
                if signature is not None:
                    externals[function_selector(signature)] = (signature, name)
        cls._externals = externals

    def __init__(self, address: Address, state: Any = None) -> None:
        self.address = to_address(address)
        self.state = state
        self.world: Optional["World"] = None

    @classmethod
    def signatures(cls) -> Tuple[str, ...]:
        """Return the function signatures this contract answers to."""
        return tuple(sorted(signature for signature, _name in cls._externals.values()))

    def dispatch(self, ctx: CallContext, payload: bytes) -> Any:
        """Route call data to the matching external method."""
        if not payload:
            return self.receive(ctx)
        try:
            selector, _data = split_call(payload)
        except ValueError as exc:
            raise ContractRevert(str(exc)) from exc
        entry = self._externals.get(selector)
        if entry is None:
            raise ContractRevert(f"{type(self).__name__}: unknown selector 0x{selector.hex()}")
        signature, name = entry
        try:
            args = decode_call(signature, payload)
        except Exception as exc:
            raise ContractRevert(f"{type(self).__name__}: cannot decode {signature}: {exc}") from exc
        return getattr(self, name)(ctx, *args)

    def receive(self, ctx: CallContext) -> Any:
        """Handle a call without data. Contracts reject plain transfers unless overridden."""
        raise ContractRevert(f"{type(self).__name__} does not accept plain calls")

    def snapshot(self) -> Any:
        """Return a deep copy of the contract state."""
        return copy.deepcopy(self.state)

    def restore(self, snapshot: Any) -> None:
        """Replace the contract state with a previously taken snapshot."""
        self.state = snapshot
