"""Item model held by a Listing contract."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Item(BaseModel):
    """A single listed item.

    ``price`` is an integer in the smallest currency unit.  ``sold`` is
    stored and reported but nothing in the system writes it after creation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    price: int
    sold: bool = False

    def as_tuple(self) -> tuple[str, int, bool]:
        """Return ``(name, price, sold)``, the shape ``get_item`` answers with."""
        return (self.name, self.price, self.sold)
