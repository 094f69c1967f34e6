"""Vehicle (moto) model.

Vehicles are owned by the inventory collaborator; the financing engine
only reads the price and flips the stock status.
"""

from dataclasses import dataclass
from decimal import Decimal

from moto_finance.models.financing.enums import VehicleStatus


@dataclass
class Vehicle:
    """Motorcycle in the dealership inventory."""

    vehicle_id: str
    model: str
    manufacturer: str
    year: int
    price: Decimal
    status: VehicleStatus = VehicleStatus.IN_STOCK
    color: str = ""
    plate: str | None = None
    chassis: str | None = None
    mileage: int | None = None
