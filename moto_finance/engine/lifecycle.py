"""Contract lifecycle: sales, payments, renegotiation and penalty refresh.

Every mutation builds the new contract (and vehicle) objects first and
hands them to the store in a single write, so a failed call leaves the
snapshot exactly as it was. Nothing here is thread-safe on its own;
concurrent callers go through ``moto_finance.service.FinancingService``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from moto_finance.config import FinancingDefaults
from moto_finance.engine.penalties import RecalculationResult, derive_contract_status, recalculate
from moto_finance.engine.schedule import generate_schedule, quote_installment_value
from moto_finance.exceptions import (
    AlreadyPaidError,
    CorruptScheduleError,
    InstallmentNotFoundError,
    SinkError,
    ValidationError,
    VehicleUnavailableError,
)
from moto_finance.models.events import Event
from moto_finance.models.financing import (
    Contract,
    ContractEdit,
    Installment,
    InstallmentEdit,
    InstallmentStatus,
    NewContract,
    PaymentRegistration,
    Vehicle,
    VehicleStatus,
)
from moto_finance.sinks import EventSink
from moto_finance.sinks.serialization import to_dict
from moto_finance.store.financing import FinancingRepository
from moto_finance.utils.dates import to_date
from moto_finance.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

Request = NewContract | PaymentRegistration | InstallmentEdit | ContractEdit


class ContractManager:
    """Apply financing mutations against a store and announce the results."""

    SOURCE = "moto_finance.lifecycle"

    def __init__(
        self,
        store: FinancingRepository,
        sinks: list[EventSink] | None = None,
        defaults: FinancingDefaults | None = None,
    ) -> None:
        """Initialize the manager.

        Parameters
        ----------
        store : FinancingRepository
            Where vehicles and contracts are read and written.
        sinks : list[EventSink] | None
            Receivers of outbound events.
        defaults : FinancingDefaults | None
            Terms for sales that leave them unset, and the allowed
            installment count range.
        """
        self.store = store
        self.sinks = list(sinks or [])
        self.defaults = defaults or FinancingDefaults()

    # Read accessors
    def get_contract(self, contract_id: str) -> Contract:
        return self.store.get_contract(contract_id)

    def list_contracts(self) -> list[Contract]:
        return self.store.list_contracts()

    def apply(self, request: Request) -> Contract:
        """Dispatch a typed request to its operation."""
        if isinstance(request, NewContract):
            return self.create_contract(request)
        if isinstance(request, PaymentRegistration):
            return self.register_payment(
                request.contract_id,
                request.installment_number,
                request.payment_date,
                request.amount_paid,
            )
        if isinstance(request, InstallmentEdit):
            return self.edit_installment(
                request.contract_id,
                request.installment_number,
                request.new_original_value,
            )
        if isinstance(request, ContractEdit):
            return self.edit_contract(request)
        raise ValidationError(f"Unsupported request type: {type(request).__name__}")

    def create_contract(self, request: NewContract) -> Contract:
        """Sell an in-stock vehicle on installments.

        The installment value is the request's override when given,
        otherwise the principal split evenly with the financing markup.
        Count, rates and fee left unset on the request come from
        ``self.defaults``.

        Raises
        ------
        ValidationError
            If the request is malformed.
        VehicleNotFoundError
            If the vehicle does not exist.
        VehicleUnavailableError
            If the vehicle is not in stock.
        """
        _require(request.customer_id, "customer_id")
        _require(request.vehicle_id, "vehicle_id")
        defaults = self.defaults
        count = self._check_installment_count(
            _or_default(request.installment_count, defaults.installment_count)
        )
        down_payment = _non_negative(request.down_payment, "down_payment")
        late_interest_rate = _non_negative(
            _or_default(request.late_interest_rate, defaults.late_interest_rate),
            "late_interest_rate",
        )
        late_fee = _non_negative(_or_default(request.late_fee, defaults.late_fee), "late_fee")
        financing_rate = _non_negative(
            _or_default(request.financing_rate, defaults.financing_rate),
            "financing_rate",
        )
        installment_value = (
            _non_negative(request.installment_value, "installment_value")
            if request.installment_value is not None
            else None
        )
        contract_date = _as_date(request.contract_date, "contract_date")

        vehicle = self.store.get_vehicle(request.vehicle_id)
        if vehicle.status != VehicleStatus.IN_STOCK:
            raise VehicleUnavailableError(vehicle.vehicle_id, vehicle.status.value)

        principal = max(ZERO, vehicle.price - down_payment)
        if installment_value is None:
            installment_value = quote_installment_value(principal, count, financing_rate)

        installments = generate_schedule(contract_date, principal, count, installment_value)
        contract_id = str(uuid.uuid4())
        financed = _sum_original(contract_id, installments)

        contract = Contract(
            contract_id=contract_id,
            customer_id=request.customer_id,
            vehicle_id=vehicle.vehicle_id,
            contract_date=contract_date,
            down_payment=down_payment,
            financed_amount=financed,
            total_amount=down_payment + financed,
            installment_count=count,
            late_interest_rate=late_interest_rate,
            late_fee=late_fee,
            status=derive_contract_status(installments),
            installments=installments,
            financing_rate=financing_rate,
            contract_number=self.store.next_contract_number(),
            notes=request.notes,
            created_at=datetime.now(),
        )
        sold = replace(vehicle, status=VehicleStatus.SOLD)
        self.store.save_sale(contract, [sold])

        logger.info(
            "Created contract %s (#%s) for vehicle %s: %d x %s",
            contract.contract_id,
            contract.contract_number,
            vehicle.vehicle_id,
            count,
            installment_value,
        )
        self._emit("contract.created", contract.contract_id, to_dict(contract))
        return contract

    def register_payment(
        self,
        contract_id: str,
        installment_number: int,
        payment_date: date,
        amount_paid: Decimal,
    ) -> Contract:
        """Settle one installment with the amount actually collected.

        The collected amount becomes the installment's total and is never
        recomputed. The contract status is re-derived right away.

        Raises
        ------
        AlreadyPaidError
            If the installment was paid before; nothing changes.
        """
        amount = _non_negative(amount_paid, "amount_paid")
        paid_on = _as_date(payment_date, "payment_date")

        contract = self.store.get_contract(contract_id)
        installment = _find_installment(contract, installment_number)
        if installment.is_paid:
            logger.info(
                "Installment %d of contract %s is already paid; ignoring",
                installment_number,
                contract_id,
            )
            raise AlreadyPaidError(contract_id, installment_number)

        paid = replace(
            installment,
            status=InstallmentStatus.PAID,
            paid_date=paid_on,
            total_amount=amount,
        )
        installments = _swap(contract.installments, paid)
        updated = replace(
            contract,
            installments=installments,
            status=derive_contract_status(installments),
            updated_at=datetime.now(),
        )
        self.store.save_contract(updated)

        logger.info(
            "Registered payment of %s for installment %d of contract %s (status: %s)",
            amount,
            installment_number,
            contract_id,
            updated.status.value,
        )
        self._emit(
            "installment.paid",
            contract_id,
            to_dict(updated),
            {"installment_number": installment_number},
        )
        return updated

    def edit_installment(
        self,
        contract_id: str,
        installment_number: int,
        new_original_value: Decimal,
    ) -> Contract:
        """Renegotiate the original value of an unpaid installment.

        Charges already accrued are kept until the next recalculation;
        the contract's financed and total amounts follow the new sum.

        Raises
        ------
        AlreadyPaidError
            If the installment is paid.
        CorruptScheduleError
            If an amount the new totals depend on could not be read from
            storage; nothing is written.
        """
        value = _non_negative(new_original_value, "new_original_value")

        contract = self.store.get_contract(contract_id)
        installment = _find_installment(contract, installment_number)
        if installment.is_paid:
            raise AlreadyPaidError(contract_id, installment_number)

        interest = _stored_amount(contract_id, installment, "interest_amount")
        penalty = _stored_amount(contract_id, installment, "penalty_amount")
        edited = replace(installment, original_amount=value, total_amount=value + interest + penalty)
        installments = _swap(contract.installments, edited)
        financed = _sum_original(contract_id, installments)
        updated = replace(
            contract,
            installments=installments,
            financed_amount=financed,
            total_amount=contract.down_payment + financed,
            status=derive_contract_status(installments),
            updated_at=datetime.now(),
        )
        self.store.save_contract(updated)

        logger.info(
            "Installment %d of contract %s changed from %s to %s",
            installment_number,
            contract_id,
            installment.original_amount,
            value,
        )
        self._emit(
            "installment.edited",
            contract_id,
            to_dict(updated),
            {"installment_number": installment_number},
        )
        return updated

    def edit_contract(self, edit: ContractEdit) -> Contract:
        """Change customer, vehicle, late-charge policy or notes.

        Moving the contract to another vehicle returns the old one to
        stock and marks the new one sold in the same write. Rate changes
        take effect on the next recalculation.
        """
        contract_id = edit.contract_id
        contract = self.store.get_contract(contract_id)
        changes: dict[str, Any] = {}
        vehicles: list[Vehicle] = []

        if edit.customer_id is not None:
            changes["customer_id"] = _require(edit.customer_id, "customer_id")
        if edit.late_interest_rate is not None:
            changes["late_interest_rate"] = _non_negative(edit.late_interest_rate, "late_interest_rate")
        if edit.late_fee is not None:
            changes["late_fee"] = _non_negative(edit.late_fee, "late_fee")
        if edit.notes is not None:
            changes["notes"] = edit.notes

        if edit.vehicle_id is not None and edit.vehicle_id != contract.vehicle_id:
            new_vehicle = self.store.get_vehicle(_require(edit.vehicle_id, "vehicle_id"))
            if new_vehicle.status != VehicleStatus.IN_STOCK:
                raise VehicleUnavailableError(new_vehicle.vehicle_id, new_vehicle.status.value)
            old_vehicle = self.store.get_vehicle(contract.vehicle_id)
            vehicles = [
                replace(old_vehicle, status=VehicleStatus.IN_STOCK),
                replace(new_vehicle, status=VehicleStatus.SOLD),
            ]
            changes["vehicle_id"] = new_vehicle.vehicle_id

        if not changes:
            return contract

        updated = replace(contract, updated_at=datetime.now(), **changes)
        if vehicles:
            self.store.save_sale(updated, vehicles)
        else:
            self.store.save_contract(updated)

        logger.info("Updated contract %s: %s", contract_id, ", ".join(sorted(changes)))
        self._emit(
            "contract.updated",
            contract_id,
            to_dict(updated),
            {"changed_fields": sorted(changes)},
        )
        return updated

    def delete_vehicle(self, vehicle_id: str) -> Vehicle:
        """Remove a vehicle from inventory.

        Raises
        ------
        VehicleInUseError
            If any contract references the vehicle, whatever its status.
        """
        vehicle = self.store.remove_vehicle(vehicle_id)
        logger.info("Deleted vehicle %s", vehicle_id)
        self._emit("vehicle.deleted", vehicle_id, to_dict(vehicle))
        return vehicle

    def recalculate(self, today: date | datetime) -> RecalculationResult:
        """Refresh late charges and statuses across the whole portfolio.

        Only contracts whose figures changed are written back. Corrupt
        installments are reported in the result, never raised.
        """
        snapshot = self.store.list_contracts()
        result = recalculate(snapshot, today)

        written = 0
        for before, after in zip(snapshot, result.contracts):
            if after != before:
                self.store.save_contract(after)
                written += 1

        for change in result.status_changes:
            self._emit(
                "contract.status_changed",
                change.contract_id,
                to_dict(self.store.get_contract(change.contract_id)),
                {"previous": change.previous.value, "current": change.current.value},
            )
        self._emit("portfolio.recalculated", "portfolio", result.summary())

        logger.info(
            "Penalty refresh for %s: %d contracts updated, %d status changes, %d newly overdue",
            result.today.isoformat(),
            written,
            len(result.status_changes),
            result.newly_overdue,
        )
        if result.errors:
            logger.warning(
                "%d corrupt installments in contracts %s",
                len(result.errors),
                ", ".join(result.flagged_contract_ids),
            )
        return result

    def _check_installment_count(self, count: int) -> int:
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError(f"installment_count must be an integer, got {count!r}")
        low, high = self.defaults.min_installments, self.defaults.max_installments
        if not low <= count <= high:
            raise ValidationError(f"installment_count must be between {low} and {high}, got {count}")
        return count

    def _emit(
        self,
        event_type: str,
        subject: str,
        data: dict,
        metadata: dict | None = None,
    ) -> None:
        """Send an event to every sink.

        The mutation is already stored at this point, so a failing sink
        is logged and the remaining sinks still receive the event.
        """
        event = Event.new(event_type, subject, data, self.SOURCE, metadata)
        for sink in self.sinks:
            try:
                sink.emit(event)
            except SinkError:
                logger.exception("Sink %s failed on %s", type(sink).__name__, event_type)


def _require(value: str | None, name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return value


def _non_negative(value: Decimal | int | float | str, name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number, got {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{name} cannot be negative, got {value!r}")
    return amount


def _as_date(value: date | datetime | str, name: str) -> date:
    try:
        return to_date(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValidationError(f"{name} is not a valid date: {value!r}") from exc


def _find_installment(contract: Contract, number: int) -> Installment:
    installment = contract.get_installment(number)
    if installment is None:
        raise InstallmentNotFoundError(contract.contract_id, number)
    return installment


def _swap(installments: list[Installment], replacement: Installment) -> list[Installment]:
    return [replacement if i.number == replacement.number else i for i in installments]


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def _stored_amount(contract_id: str, installment: Installment, name: str) -> Decimal:
    # The JSON store keeps unparseable amounts as raw strings
    value = getattr(installment, name)
    if not isinstance(value, Decimal) or not value.is_finite():
        raise CorruptScheduleError(
            contract_id,
            installment.number,
            f"unreadable {name.replace('_', ' ')} {value!r}",
        )
    return value


def _sum_original(contract_id: str, installments: list[Installment]) -> Decimal:
    return sum((_stored_amount(contract_id, i, "original_amount") for i in installments), ZERO)
