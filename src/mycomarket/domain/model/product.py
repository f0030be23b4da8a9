"""Catalog product, as seen by the reservation engine.

The catalog itself is owned by another service; the engine only reads
the owning producer, the selling unit and the current price.
"""

from __future__ import annotations

from dataclasses import dataclass

from mycomarket.domain.exceptions import ValidationError
from mycomarket.domain.model.value_objects import Money


@dataclass
class CatalogProduct:
    """A product offered by a producer.

    Bookings and order items copy ``price`` at reservation time, so later
    price changes never affect existing orders.
    """

    id: str
    producer_id: str
    name: str
    price: Money
    unit: str = "kg"

    def __post_init__(self) -> None:
        if not self.producer_id:
            raise ValidationError(f"Product '{self.name}' has no producer")
