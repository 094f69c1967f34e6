"""Motorcycle inventory generator."""

import random
from datetime import date
from decimal import Decimal

from faker import Faker

from moto_finance.models.financing import Vehicle, VehicleStatus


class VehicleGenerator:
    """Generate synthetic in-stock motorcycles."""

    # Models and price range (BRL, in thousands) per manufacturer
    CATALOG = {
        "Honda": (["CG 160 Titan", "Biz 125", "XRE 300", "CB 500F", "PCX 160"], (12, 45)),
        "Yamaha": (["Fazer 250", "XTZ 250 Lander", "NMax 160", "MT-03"], (14, 40)),
        "Suzuki": (["V-Strom 650", "GSX-S750"], (45, 65)),
        "Kawasaki": (["Ninja 400", "Z900"], (35, 70)),
        "BMW": (["G 310 R", "F 850 GS"], (30, 90)),
        "Triumph": (["Street Triple", "Tiger 900"], (55, 95)),
        "Royal Enfield": (["Meteor 350", "Himalayan"], (22, 30)),
        "Harley-Davidson": (["Iron 883"], (60, 80)),
        "KTM": (["Duke 390"], (30, 38)),
        "Dafra": (["Apache 200"], (13, 17)),
        "Haojue": (["DK 150"], (11, 14)),
        "Shineray": (["Jet 50"], (7, 9)),
    }

    # Chassis numbers never use I, O or Q
    _VIN_LETTERS = "ABCDEFGHJKLMNPRSTUVWXYZ"

    def __init__(self, seed: int | None = None, locale: str = "pt_BR") -> None:
        """Initialize the generator.

        Parameters
        ----------
        seed : int | None
            Seeds both Faker and ``random`` so inventories are reproducible.
        locale : str
            Faker locale for colors and plates.
        """
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    def generate(self) -> Vehicle:
        """Generate an in-stock motorcycle.

        Returns
        -------
        Vehicle
            Generated vehicle.
        """
        manufacturer = random.choice(list(self.CATALOG))
        models, (low, high) = self.CATALOG[manufacturer]
        current_year = date.today().year
        is_new = random.random() < 0.5

        return Vehicle(
            vehicle_id=self.fake.uuid4(),
            model=random.choice(models),
            manufacturer=manufacturer,
            year=current_year if is_new else random.randint(current_year - 8, current_year - 1),
            price=Decimal(random.randint(low * 10, high * 10) * 100),
            status=VehicleStatus.IN_STOCK,
            color=self.fake.color_name(),
            plate=None if is_new else self.fake.license_plate(),
            chassis=self.fake.bothify("9C2??############", letters=self._VIN_LETTERS),
            mileage=0 if is_new else random.randint(1_000, 60_000),
        )
