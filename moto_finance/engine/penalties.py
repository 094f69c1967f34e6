"""Late interest and penalty recalculation.

``recalculate`` is a pure function of the contract snapshot and the
reference day: it never reads the clock, never mutates its input and
never looks at the derived figures a previous pass left behind, so it can
be called any number of times with the same day and return the same
result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from moto_finance.exceptions import CorruptScheduleError
from moto_finance.models.financing import (
    Contract,
    ContractStatus,
    Installment,
    InstallmentStatus,
)
from moto_finance.utils.dates import days_between, start_of_day, to_date
from moto_finance.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    """Contract status transition observed during a pass."""

    contract_id: str
    previous: ContractStatus
    current: ContractStatus


@dataclass
class RecalculationResult:
    """Outcome of one recalculation sweep."""

    today: date
    contracts: list[Contract]
    status_changes: list[StatusChange] = field(default_factory=list)
    newly_overdue: int = 0
    total_interest: Decimal = ZERO
    total_penalties: Decimal = ZERO
    errors: list[CorruptScheduleError] = field(default_factory=list)

    @property
    def changed_contracts(self) -> list[Contract]:
        """Contracts whose status differs from the input snapshot."""
        changed_ids = {change.contract_id for change in self.status_changes}
        return [c for c in self.contracts if c.contract_id in changed_ids]

    @property
    def flagged_contract_ids(self) -> list[str]:
        return [c.contract_id for c in self.contracts if c.flagged_installments]

    def summary(self) -> dict[str, Any]:
        """Return summary figures for logging and notifications."""
        return {
            "today": self.today.isoformat(),
            "contracts": len(self.contracts),
            "status_changes": len(self.status_changes),
            "newly_overdue": self.newly_overdue,
            "total_interest": str(self.total_interest),
            "total_penalties": str(self.total_penalties),
            "errors": [str(error) for error in self.errors],
        }


def derive_contract_status(installments: Iterable[Installment]) -> ContractStatus:
    """Contract status implied by its installments."""
    statuses = [installment.status for installment in installments]
    if all(status == InstallmentStatus.PAID for status in statuses):
        return ContractStatus.PAID_OFF
    if any(status == InstallmentStatus.OVERDUE for status in statuses):
        return ContractStatus.DELINQUENT
    return ContractStatus.ACTIVE


def assess_installment(contract: Contract, installment: Installment, today: date) -> Installment:
    """Return the installment as it stands on ``today``.

    Paid installments come back unchanged. Otherwise interest and penalty
    are derived from scratch: an installment due on ``today`` is not late.

    Raises
    ------
    CorruptScheduleError
        If the due date is unreadable or a derived amount is negative.
    """
    if installment.is_paid:
        return installment

    try:
        due_date = to_date(installment.due_date)
    except (ValueError, TypeError, OverflowError) as exc:
        raise CorruptScheduleError(
            contract.contract_id,
            installment.number,
            f"unparseable due date {installment.due_date!r}",
        ) from exc

    try:
        original = to_decimal(installment.original_amount)
    except ValueError as exc:
        raise CorruptScheduleError(
            contract.contract_id,
            installment.number,
            f"unreadable original amount {installment.original_amount!r}",
        ) from exc
    if original < 0:
        raise CorruptScheduleError(
            contract.contract_id, installment.number, f"negative original amount {original}"
        )

    today = start_of_day(today)
    if today <= due_date:
        return replace(
            installment,
            due_date=due_date,
            original_amount=original,
            interest_amount=ZERO,
            penalty_amount=ZERO,
            total_amount=original,
            status=InstallmentStatus.PENDING,
        )

    days_overdue = days_between(today, due_date)
    # Kept exact; amounts are rounded only when quoted or displayed
    interest = original * contract.late_interest_rate / 100 * days_overdue
    penalty = contract.late_fee
    if interest < 0 or penalty < 0:
        raise CorruptScheduleError(
            contract.contract_id,
            installment.number,
            f"negative late charges (interest {interest}, penalty {penalty})",
        )

    return replace(
        installment,
        due_date=due_date,
        original_amount=original,
        interest_amount=interest,
        penalty_amount=penalty,
        total_amount=original + interest + penalty,
        status=InstallmentStatus.OVERDUE,
    )


def recalculate(contracts: Iterable[Contract], today: date | datetime) -> RecalculationResult:
    """Re-derive late interest, penalties and statuses for every contract.

    Parameters
    ----------
    contracts : Iterable[Contract]
        Current snapshot. Not modified.
    today : date | datetime
        Reference day; a datetime is truncated to its day.

    Returns
    -------
    RecalculationResult
        New contract objects plus status changes, aggregate charges and
        the corrupt installments found. A corrupt installment is kept as
        stored, left out of the aggregates, and its number is recorded in
        the contract's ``flagged_installments``.
    """
    today = start_of_day(today)
    result = RecalculationResult(today=today, contracts=[])

    for contract in contracts:
        installments: list[Installment] = []
        flagged: list[int] = []

        for installment in contract.installments:
            try:
                updated = assess_installment(contract, installment, today)
            except CorruptScheduleError as exc:
                logger.warning("Skipping corrupt installment: %s", exc)
                result.errors.append(exc)
                flagged.append(installment.number)
                installments.append(installment)
                continue

            if updated.status == InstallmentStatus.OVERDUE:
                result.total_interest += updated.interest_amount
                result.total_penalties += updated.penalty_amount
                if installment.status == InstallmentStatus.PENDING:
                    result.newly_overdue += 1
            installments.append(updated)

        status = derive_contract_status(installments)
        if status != contract.status:
            result.status_changes.append(StatusChange(contract.contract_id, contract.status, status))

        result.contracts.append(
            replace(
                contract,
                installments=installments,
                status=status,
                flagged_installments=flagged,
            )
        )

    logger.debug(
        "Recalculated %d contracts for %s: %d status changes, %d newly overdue, %d errors",
        len(result.contracts),
        today.isoformat(),
        len(result.status_changes),
        result.newly_overdue,
        len(result.errors),
    )
    return result
