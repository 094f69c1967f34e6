"""Installment schedule generation."""

from datetime import date
from decimal import Decimal

from moto_finance.exceptions import InvalidScheduleError
from moto_finance.models.financing import Installment, InstallmentStatus
from moto_finance.utils.dates import add_months, to_date
from moto_finance.utils.money import ZERO, round_money


def even_installment_value(principal: Decimal, installment_count: int) -> Decimal:
    """Principal split evenly across installments, rounded to cents."""
    if installment_count < 1:
        raise InvalidScheduleError(f"Installment count must be at least 1, got {installment_count}")
    return round_money(principal / installment_count)


def quote_installment_value(
    principal: Decimal,
    installment_count: int,
    financing_rate: Decimal | None = None,
) -> Decimal:
    """Installment value with the financing markup applied.

    ``(principal / count) * (1 + financing_rate / 100)``, rounded to cents.
    """
    if installment_count < 1:
        raise InvalidScheduleError(f"Installment count must be at least 1, got {installment_count}")
    if principal < 0:
        raise InvalidScheduleError(f"Principal cannot be negative, got {principal}")
    rate = financing_rate or ZERO
    return round_money(principal / installment_count * (1 + rate / 100))


def generate_schedule(
    contract_date: date,
    principal: Decimal,
    installment_count: int,
    installment_value: Decimal | None = None,
) -> list[Installment]:
    """Build the ordered installment list for a contract.

    Parameters
    ----------
    contract_date : date
        Signing date; installment ``i`` falls due ``i`` months later.
    principal : Decimal
        Financed amount (vehicle price minus down payment).
    installment_count : int
        Number of installments, at least 1.
    installment_value : Decimal | None
        Value of every installment. Defaults to an even split of the principal.

    Returns
    -------
    list[Installment]
        Installments numbered 1..N, all pending with no interest or penalty.

    Raises
    ------
    InvalidScheduleError
        If the count is below 1 or an amount is negative.
    """
    if installment_count < 1:
        raise InvalidScheduleError(f"Installment count must be at least 1, got {installment_count}")
    if principal < 0:
        raise InvalidScheduleError(f"Principal cannot be negative, got {principal}")

    if installment_value is None:
        installment_value = even_installment_value(principal, installment_count)
    elif installment_value < 0:
        raise InvalidScheduleError(f"Installment value cannot be negative, got {installment_value}")

    start = to_date(contract_date)
    return [
        Installment(
            number=number,
            due_date=add_months(start, number),
            original_amount=installment_value,
            interest_amount=ZERO,
            penalty_amount=ZERO,
            total_amount=installment_value,
            status=InstallmentStatus.PENDING,
        )
        for number in range(1, installment_count + 1)
    ]
