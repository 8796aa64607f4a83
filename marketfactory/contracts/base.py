"""Contract base class and call-kind markers.

A contract is plain Python state plus methods marked ``@mutating`` or
``@view``.  Mutating methods only ever run inside ``Chain.transact``, which
supplies the caller identity through ``msg_sender`` and meters gas.  View
methods never write storage.

Every attribute named in ``storage_fields`` is snapshotted before a
transaction and restored if the call reverts, so a subclass must keep all
of its mutable state in those attributes.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

if TYPE_CHECKING:
    from marketfactory.core.chain import Chain

F = TypeVar("F", bound=Callable[..., Any])

MUTATING = "mutating"
VIEW = "view"

# Contract class name -> class, used to redeploy contracts on ledger replay.
CONTRACT_TYPES: dict[str, type[Contract]] = {}


def mutating(fn: F) -> F:
    """Mark a method as a state-changing entry point."""
    fn._call_kind = MUTATING  # type: ignore[attr-defined]
    return fn


def view(fn: F) -> F:
    """Mark a method as a read-only entry point."""
    fn._call_kind = VIEW  # type: ignore[attr-defined]
    return fn


class Contract:
    """Base for every contract deployed on a ``Chain``."""

    storage_fields: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        CONTRACT_TYPES[cls.__name__] = cls

    def __init__(self, chain: Chain, address: str) -> None:
        self._chain = chain
        self.address = address

    def constructor(self, *args: Any) -> None:
        """Initialize storage.  Runs once, inside the deploying transaction."""

    @classmethod
    def call_kind(cls, method: str) -> str | None:
        """Return ``"mutating"``, ``"view"``, or None for non-entry points."""
        return getattr(getattr(cls, method, None), "_call_kind", None)

    # -- Execution context --------------------------------------------------

    @property
    def msg_sender(self) -> str:
        return self._chain.context.sender

    def _charge_storage_writes(self, slots: int = 1) -> None:
        self._chain.context.meter.charge_storage(slots)

    def _create(self, contract_cls: type[Contract], *args: Any) -> str:
        """Deploy a child contract from this contract; returns its address."""
        return self._chain.create(self.address, contract_cls, list(args))

    # -- Snapshot / restore -------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self.storage_fields}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)
