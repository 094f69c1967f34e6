"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from moto_finance.engine.lifecycle import ContractManager
from moto_finance.models.events import Event
from moto_finance.models.financing import Contract, NewContract, Vehicle
from moto_finance.store import FinancingDataStore


class RecordingSink:
    """Event sink that keeps everything it receives."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.closed = False

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True

    def of_type(self, event_type: str) -> list[Event]:
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def contract_date() -> date:
    """Signing date of the reference contract."""
    return date(2024, 1, 15)


@pytest.fixture
def vehicle() -> Vehicle:
    """In-stock motorcycle priced at R$ 45.000,00."""
    return Vehicle(
        vehicle_id="moto-003",
        model="CB 500F",
        manufacturer="Honda",
        year=2023,
        price=Decimal("45000"),
    )


@pytest.fixture
def spare_vehicle() -> Vehicle:
    """Second in-stock motorcycle."""
    return Vehicle(
        vehicle_id="moto-004",
        model="Fazer 250",
        manufacturer="Yamaha",
        year=2022,
        price=Decimal("21000"),
    )


@pytest.fixture
def store(vehicle: Vehicle, spare_vehicle: Vehicle) -> FinancingDataStore:
    """Store with two vehicles in stock."""
    store = FinancingDataStore()
    store.add_vehicle(vehicle)
    store.add_vehicle(spare_vehicle)
    return store


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def manager(store: FinancingDataStore, sink: RecordingSink) -> ContractManager:
    return ContractManager(store, sinks=[sink])


@pytest.fixture
def sale_request(vehicle: Vehicle, contract_date: date) -> NewContract:
    """Entrada 15.000, 12 installments of 2.500, 2% a day, R$ 50 penalty."""
    return NewContract(
        customer_id="cli-001",
        vehicle_id=vehicle.vehicle_id,
        down_payment=Decimal("15000"),
        installment_count=12,
        late_interest_rate=Decimal("2"),
        late_fee=Decimal("50"),
        contract_date=contract_date,
        financing_rate=Decimal("0"),
    )


@pytest.fixture
def contract(manager: ContractManager, sale_request: NewContract) -> Contract:
    """The reference contract, freshly created."""
    return manager.create_contract(sale_request)
