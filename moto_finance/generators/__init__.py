"""Sample data generators."""

from moto_finance.generators.vehicle import VehicleGenerator

__all__ = ["VehicleGenerator"]
