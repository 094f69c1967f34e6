"""JSON file persistence for the financing snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from moto_finance.exceptions import StoreError
from moto_finance.models.financing import (
    Contract,
    ContractStatus,
    Installment,
    InstallmentStatus,
    Vehicle,
    VehicleStatus,
)
from moto_finance.sinks.serialization import to_dict
from moto_finance.store.financing import FinancingDataStore
from moto_finance.utils.dates import to_date

logger = logging.getLogger(__name__)


class JsonFileStore(FinancingDataStore):
    """Financing store persisted to a single JSON document.

    The whole snapshot is rewritten (write to a temp file, then replace)
    after every change; a change whose write fails is rolled back in memory
    too, so the store never holds state the file does not. Installment values that cannot be parsed are kept
    as raw strings so the penalty engine can flag them instead of the
    store refusing to load.
    """

    def __init__(self, path: str | Path, pretty: bool = False) -> None:
        """Initialize the store, loading the file if it exists.

        Parameters
        ----------
        path : str | Path
            Snapshot file.
        pretty : bool
            Pretty-print JSON output.
        """
        super().__init__()
        self.path = Path(path)
        self.pretty = pretty
        self._in_change = False
        if self.path.exists():
            self.load()

    def load(self) -> None:
        """Replace the in-memory state with the file contents."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read snapshot {self.path}: {exc}") from exc

        self.vehicles.clear()
        self.contracts.clear()
        self._vehicle_contracts.clear()

        try:
            for raw in data.get("vehicles", []):
                FinancingDataStore.add_vehicle(self, vehicle_from_dict(raw))
            for raw in data.get("contracts", []):
                FinancingDataStore.add_contract(self, contract_from_dict(raw))
        except (KeyError, ValueError, TypeError) as exc:
            raise StoreError(f"Malformed snapshot {self.path}: {exc}") from exc

        logger.info(
            "Loaded %d vehicles and %d contracts from %s",
            len(self.vehicles),
            len(self.contracts),
            self.path,
        )

    def flush(self) -> None:
        """Write the snapshot to disk atomically."""
        document = {
            "vehicles": [to_dict(v) for v in self.vehicles.values()],
            "contracts": [to_dict(c) for c in self.contracts.values()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(document, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Cannot write snapshot {self.path}: {exc}") from exc

    def _commit(self, mutate: Callable[..., Any], *args: Any) -> Any:
        """Apply a change in memory and flush it, or undo it if the write fails.

        Nested calls (``save_sale`` ends in ``add_contract``) join the
        outermost change so a sale is flushed once.
        """
        if self._in_change:
            return mutate(*args)

        vehicles = dict(self.vehicles)
        contracts = dict(self.contracts)
        index = {vid: list(cids) for vid, cids in self._vehicle_contracts.items()}
        self._in_change = True
        try:
            result = mutate(*args)
            self.flush()
        except Exception:
            self.vehicles = vehicles
            self.contracts = contracts
            self._vehicle_contracts = index
            raise
        finally:
            self._in_change = False
        return result

    def add_vehicle(self, vehicle: Vehicle) -> None:
        self._commit(super().add_vehicle, vehicle)

    def update_vehicle(self, vehicle: Vehicle) -> None:
        self._commit(super().update_vehicle, vehicle)

    def remove_vehicle(self, vehicle_id: str) -> Vehicle:
        return self._commit(super().remove_vehicle, vehicle_id)

    def add_contract(self, contract: Contract) -> None:
        self._commit(super().add_contract, contract)

    def save_sale(self, contract: Contract, vehicles: list[Vehicle]) -> None:
        self._commit(super().save_sale, contract, vehicles)


def vehicle_from_dict(data: dict[str, Any]) -> Vehicle:
    """Build a vehicle from its serialized form."""
    return Vehicle(
        vehicle_id=data["vehicle_id"],
        model=data["model"],
        manufacturer=data["manufacturer"],
        year=int(data["year"]),
        price=Decimal(data["price"]),
        status=VehicleStatus(data.get("status", VehicleStatus.IN_STOCK.value)),
        color=data.get("color", ""),
        plate=data.get("plate"),
        chassis=data.get("chassis"),
        mileage=data.get("mileage"),
    )


def installment_from_dict(data: dict[str, Any]) -> Installment:
    """Build an installment from its serialized form."""
    return Installment(
        number=int(data["number"]),
        due_date=_lenient_date(data["due_date"]),
        original_amount=_lenient_decimal(data["original_amount"]),
        interest_amount=_lenient_decimal(data.get("interest_amount", "0")),
        penalty_amount=_lenient_decimal(data.get("penalty_amount", "0")),
        total_amount=_lenient_decimal(data.get("total_amount", data["original_amount"])),
        status=InstallmentStatus(data.get("status", InstallmentStatus.PENDING.value)),
        paid_date=to_date(data["paid_date"]) if data.get("paid_date") else None,
    )


def contract_from_dict(data: dict[str, Any]) -> Contract:
    """Build a contract, with its installments, from its serialized form."""
    financing_rate = data.get("financing_rate")
    return Contract(
        contract_id=data["contract_id"],
        customer_id=data["customer_id"],
        vehicle_id=data["vehicle_id"],
        contract_date=to_date(data["contract_date"]),
        down_payment=Decimal(data["down_payment"]),
        financed_amount=Decimal(data["financed_amount"]),
        total_amount=Decimal(data["total_amount"]),
        installment_count=int(data["installment_count"]),
        late_interest_rate=Decimal(data["late_interest_rate"]),
        late_fee=Decimal(data["late_fee"]),
        status=ContractStatus(data["status"]),
        installments=[installment_from_dict(raw) for raw in data.get("installments", [])],
        financing_rate=Decimal(financing_rate) if financing_rate is not None else None,
        contract_number=data.get("contract_number"),
        notes=data.get("notes", ""),
        flagged_installments=list(data.get("flagged_installments", [])),
        created_at=_optional_datetime(data.get("created_at")),
        updated_at=_optional_datetime(data.get("updated_at")),
    )


def _lenient_date(value: Any) -> Any:
    try:
        return to_date(value)
    except (ValueError, TypeError, OverflowError):
        logger.warning("Keeping unparseable date %r as stored", value)
        return value


def _lenient_decimal(value: Any) -> Any:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Keeping unparseable amount %r as stored", value)
        return value


def _optional_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
