"""Financing data store with referential integrity."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol

from moto_finance.exceptions import (
    ContractNotFoundError,
    ReferentialIntegrityError,
    VehicleInUseError,
    VehicleNotFoundError,
)
from moto_finance.models.financing import Contract, Vehicle


class FinancingRepository(Protocol):
    """Storage boundary the lifecycle manager reads and writes through."""

    def get_vehicle(self, vehicle_id: str) -> Vehicle: ...

    def list_vehicles(self) -> list[Vehicle]: ...

    def get_contract(self, contract_id: str) -> Contract: ...

    def list_contracts(self) -> list[Contract]: ...

    def contracts_for_vehicle(self, vehicle_id: str) -> list[Contract]: ...

    def save_contract(self, contract: Contract) -> None: ...

    def save_sale(self, contract: Contract, vehicles: list[Vehicle]) -> None: ...

    def remove_vehicle(self, vehicle_id: str) -> Vehicle: ...

    def next_contract_number(self) -> int: ...


@dataclass
class FinancingDataStore:
    """In-memory store for vehicles and contracts with relationship tracking."""

    vehicles: dict[str, Vehicle] = field(default_factory=dict)
    contracts: dict[str, Contract] = field(default_factory=dict)

    # Relationship index
    _vehicle_contracts: dict[str, list[str]] = field(default_factory=dict)

    def add_vehicle(self, vehicle: Vehicle) -> None:
        """Add a vehicle to the store."""
        self.vehicles[vehicle.vehicle_id] = vehicle
        self._vehicle_contracts.setdefault(vehicle.vehicle_id, [])

    def update_vehicle(self, vehicle: Vehicle) -> None:
        """Replace a known vehicle."""
        if vehicle.vehicle_id not in self.vehicles:
            raise VehicleNotFoundError(vehicle.vehicle_id)
        self.vehicles[vehicle.vehicle_id] = vehicle

    def remove_vehicle(self, vehicle_id: str) -> Vehicle:
        """Delete a vehicle no contract references."""
        if vehicle_id not in self.vehicles:
            raise VehicleNotFoundError(vehicle_id)
        contract_ids = self._vehicle_contracts.get(vehicle_id, [])
        if contract_ids:
            raise VehicleInUseError(vehicle_id, list(contract_ids))
        self._vehicle_contracts.pop(vehicle_id, None)
        return self.vehicles.pop(vehicle_id)

    def add_contract(self, contract: Contract) -> None:
        """Add or replace a contract.

        A contract without ``created_at`` is stored as a stamped copy; the
        caller's object is left untouched.
        """
        if contract.vehicle_id not in self.vehicles:
            raise ReferentialIntegrityError(f"Vehicle {contract.vehicle_id} not found")

        previous = self.contracts.get(contract.contract_id)
        if previous is not None and previous.vehicle_id != contract.vehicle_id:
            self._vehicle_contracts[previous.vehicle_id].remove(contract.contract_id)

        if contract.created_at is None:
            contract = replace(contract, created_at=datetime.now())
        self.contracts[contract.contract_id] = contract

        linked = self._vehicle_contracts.setdefault(contract.vehicle_id, [])
        if contract.contract_id not in linked:
            linked.append(contract.contract_id)

    def save_contract(self, contract: Contract) -> None:
        """Write one contract."""
        self.add_contract(contract)

    def save_sale(self, contract: Contract, vehicles: list[Vehicle]) -> None:
        """Write a contract together with the vehicles whose status it changed.

        Every reference is checked before anything is written.
        """
        incoming = {v.vehicle_id for v in vehicles}
        for vehicle in vehicles:
            if vehicle.vehicle_id not in self.vehicles:
                raise VehicleNotFoundError(vehicle.vehicle_id)
        if contract.vehicle_id not in self.vehicles and contract.vehicle_id not in incoming:
            raise ReferentialIntegrityError(f"Vehicle {contract.vehicle_id} not found")

        for vehicle in vehicles:
            self.vehicles[vehicle.vehicle_id] = vehicle
        self.add_contract(contract)

    # Query methods
    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        """Get a vehicle by ID."""
        try:
            return self.vehicles[vehicle_id]
        except KeyError:
            raise VehicleNotFoundError(vehicle_id) from None

    def list_vehicles(self) -> list[Vehicle]:
        """Get all vehicles."""
        return list(self.vehicles.values())

    def get_contract(self, contract_id: str) -> Contract:
        """Get a contract by ID."""
        try:
            return self.contracts[contract_id]
        except KeyError:
            raise ContractNotFoundError(contract_id) from None

    def list_contracts(self) -> list[Contract]:
        """Get all contracts."""
        return list(self.contracts.values())

    def contracts_for_vehicle(self, vehicle_id: str) -> list[Contract]:
        """Get all contracts referencing a vehicle, whatever their status."""
        contract_ids = self._vehicle_contracts.get(vehicle_id, [])
        return [self.contracts[cid] for cid in contract_ids]

    def next_contract_number(self) -> int:
        """Next sequential contract number (highest so far plus one)."""
        numbers = [c.contract_number for c in self.contracts.values() if c.contract_number]
        return max(numbers, default=0) + 1

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "vehicles": len(self.vehicles),
            "contracts": len(self.contracts),
            "installments": sum(len(c.installments) for c in self.contracts.values()),
        }
