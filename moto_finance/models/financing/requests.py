"""Typed mutation requests accepted by the contract lifecycle manager.

Each request lists only the fields its operation may change. Derived
values (totals, statuses) are never part of a request.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class NewContract:
    """Sale of an in-stock vehicle on installments.

    Terms left as ``None`` come from the manager's financing defaults.
    """

    customer_id: str
    vehicle_id: str
    down_payment: Decimal
    contract_date: date
    installment_count: int | None = None
    late_interest_rate: Decimal | None = None
    late_fee: Decimal | None = None
    financing_rate: Decimal | None = None
    installment_value: Decimal | None = None  # Manual override of the quoted value
    notes: str = ""


@dataclass(frozen=True)
class PaymentRegistration:
    """Settlement of one installment."""

    contract_id: str
    installment_number: int
    payment_date: date
    amount_paid: Decimal


@dataclass(frozen=True)
class InstallmentEdit:
    """Renegotiation of one unpaid installment's original value."""

    contract_id: str
    installment_number: int
    new_original_value: Decimal


@dataclass(frozen=True)
class ContractEdit:
    """Contract-level changes. ``None`` leaves a field as it is."""

    contract_id: str
    customer_id: str | None = None
    vehicle_id: str | None = None
    late_interest_rate: Decimal | None = None
    late_fee: Decimal | None = None
    notes: str | None = None
