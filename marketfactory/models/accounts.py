"""Signer accounts — the caller identities available on a chain."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Signer(BaseModel):
    """A caller identity.  Key management is out of scope; a signer is
    just an address with a stable index."""

    model_config = ConfigDict(frozen=True)

    index: int
    address: str

    def __str__(self) -> str:
        return self.address
