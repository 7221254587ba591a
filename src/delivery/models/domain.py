"""Domain models for drivers, open orders and their resolved locations."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True, frozen=True)
class Coordinates:
    """WGS84 position in decimal degrees."""

    latitude: float
    longitude: float


@dataclass(slots=True)
class Driver:
    """A delivery driver as read from the driver (or profile) table."""

    driver_id: str
    name: str = ""
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    raw: dict = field(default_factory=dict)

    @property
    def full_address(self) -> str:
        return ", ".join(part for part in (self.address, self.city) if part).strip()


@dataclass(slots=True)
class Order:
    """An open order awaiting a driver."""

    order_id: str
    order_number: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    raw: dict = field(default_factory=dict)

    @property
    def full_address(self) -> str:
        parts = (self.delivery_address, self.delivery_city, self.delivery_state)
        return ", ".join(part for part in parts if part).strip()
