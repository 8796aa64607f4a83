"""Per-call gas accounting.

Gas is reported on every receipt and never enforced: there is no gas
limit and no fee.  A reverted call pays only its intrinsic cost (base plus
calldata); execution charges are discarded along with its state changes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from marketfactory.config import MarketConfig
from marketfactory.core.hasher import canonical_json_bytes


class GasSchedule(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_base: int = 21000
    calldata_byte: int = 16
    storage_write: int = 20000
    create: int = 32000

    @classmethod
    def from_config(cls, config: MarketConfig) -> GasSchedule:
        return cls(
            tx_base=config.gas_tx_base,
            calldata_byte=config.gas_calldata_byte,
            storage_write=config.gas_storage_write,
            create=config.gas_create,
        )


class GasMeter:
    """Accumulates gas for one transaction."""

    def __init__(self, schedule: GasSchedule, calldata: Any) -> None:
        self._schedule = schedule
        self.intrinsic = schedule.tx_base + schedule.calldata_byte * len(
            canonical_json_bytes(calldata)
        )
        self.execution = 0

    @property
    def used(self) -> int:
        return self.intrinsic + self.execution

    def charge_storage(self, slots: int = 1) -> None:
        self.execution += self._schedule.storage_write * slots

    def charge_create(self) -> None:
        self.execution += self._schedule.create
