"""Read-side projections for dashboards and reports.

All helpers are pure and accept any iterable; empty input gives zeros.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from moto_finance.models.financing import (
    Contract,
    ContractStatus,
    Installment,
    InstallmentStatus,
    Vehicle,
    VehicleStatus,
)
from moto_finance.utils.dates import month_bounds, to_date
from moto_finance.utils.money import ZERO, format_contract_id


@dataclass
class ContractBalance:
    """What has been collected on a contract and what is still open."""

    paid: Decimal  # Down payment plus settled installment totals
    pending: Decimal  # Current totals of unpaid installments, charges included
    paid_installments: int
    open_installments: int
    skipped_installments: int = 0  # Flagged or unreadable, left out of both sums


@dataclass
class DashboardSummary:
    """Headline figures for the back-office dashboard."""

    vehicles_in_stock: int
    active_contracts: int
    overdue_installments: int
    overdue_amount: Decimal
    sales_this_month: int


def count_vehicles_by_status(vehicles: Iterable[Vehicle]) -> dict[VehicleStatus, int]:
    counts = Counter(v.status for v in vehicles)
    return {status: counts.get(status, 0) for status in VehicleStatus}


def count_contracts_by_status(contracts: Iterable[Contract]) -> dict[ContractStatus, int]:
    counts = Counter(c.status for c in contracts)
    return {status: counts.get(status, 0) for status in ContractStatus}


def overdue_installment_count(contracts: Iterable[Contract]) -> int:
    """Number of installments currently marked overdue."""
    return sum(
        1
        for contract in contracts
        for installment in contract.installments
        if installment.status == InstallmentStatus.OVERDUE
    )


def overdue_amount(contracts: Iterable[Contract]) -> Decimal:
    """Sum of current totals (original plus charges) of overdue installments.

    Installments flagged as corrupt by the last recalculation, or whose
    stored total is unreadable, are left out.
    """
    total = ZERO
    for contract in contracts:
        for installment in _readable(contract):
            if installment.status == InstallmentStatus.OVERDUE:
                total += installment.total_amount
    return total


def contracts_between(contracts: Iterable[Contract], start: date, end: date) -> list[Contract]:
    """Contracts signed between ``start`` and ``end``, both inclusive."""
    start, end = to_date(start), to_date(end)
    return [c for c in contracts if start <= c.contract_date <= end]


def sales_in_month(contracts: Iterable[Contract], year: int, month: int) -> int:
    """Number of contracts signed in the given month."""
    first, last = month_bounds(year, month)
    return len(contracts_between(contracts, first, last))


def contract_balance(contract: Contract) -> ContractBalance:
    """Collected versus outstanding amounts for one contract.

    Installment counts cover the whole schedule; flagged or unreadable
    installments are counted but not summed.
    """
    readable = _readable(contract)
    return ContractBalance(
        paid=contract.down_payment + sum((i.total_amount for i in readable if i.is_paid), ZERO),
        pending=sum((i.total_amount for i in readable if not i.is_paid), ZERO),
        paid_installments=sum(1 for i in contract.installments if i.is_paid),
        open_installments=sum(1 for i in contract.installments if not i.is_paid),
        skipped_installments=len(contract.installments) - len(readable),
    )


def _readable(contract: Contract) -> list[Installment]:
    flagged = set(contract.flagged_installments)
    return [
        i
        for i in contract.installments
        if i.number not in flagged and isinstance(i.total_amount, Decimal) and i.total_amount.is_finite()
    ]


def filter_contracts(
    contracts: Iterable[Contract],
    status: ContractStatus | None = None,
    query: str | None = None,
) -> list[Contract]:
    """Contracts matching a status and a free-text query.

    The query is matched case-insensitively against the contract id, the
    formatted contract number, the customer id and the vehicle id.
    """
    needle = (query or "").strip().lower()
    result = []
    for contract in contracts:
        if status is not None and contract.status != status:
            continue
        if needle:
            haystack = (
                contract.contract_id,
                format_contract_id(contract.contract_number),
                contract.customer_id,
                contract.vehicle_id,
            )
            if not any(needle in value.lower() for value in haystack):
                continue
        result.append(contract)
    return result


def dashboard_summary(
    vehicles: Iterable[Vehicle],
    contracts: Iterable[Contract],
    today: date,
) -> DashboardSummary:
    """Headline figures as of ``today``."""
    contracts = list(contracts)
    today = to_date(today)
    return DashboardSummary(
        vehicles_in_stock=count_vehicles_by_status(vehicles)[VehicleStatus.IN_STOCK],
        active_contracts=count_contracts_by_status(contracts)[ContractStatus.ACTIVE],
        overdue_installments=overdue_installment_count(contracts),
        overdue_amount=overdue_amount(contracts),
        sales_this_month=sales_in_month(contracts, today.year, today.month),
    )
