"""Financing contract models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from moto_finance.models.financing.enums import ContractStatus, InstallmentStatus


@dataclass
class Installment:
    """Contract installment (parcela).

    ``total_amount`` is ``original + interest + penalty`` until the
    installment is paid; afterwards it holds the amount actually collected.
    """

    number: int  # 1, 2, 3, ...
    due_date: date  # A raw string only when a stored value could not be parsed
    original_amount: Decimal
    interest_amount: Decimal
    penalty_amount: Decimal
    total_amount: Decimal
    status: InstallmentStatus
    paid_date: date | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class Contract:
    """Vehicle financing contract (financiamento)."""

    contract_id: str
    customer_id: str
    vehicle_id: str
    contract_date: date
    down_payment: Decimal  # entrada
    financed_amount: Decimal  # sum of installment original amounts
    total_amount: Decimal  # down_payment + financed_amount
    installment_count: int
    late_interest_rate: Decimal  # Daily % on the original installment value
    late_fee: Decimal  # Flat penalty per overdue installment
    status: ContractStatus
    installments: list[Installment] = field(default_factory=list)
    financing_rate: Decimal | None = None  # Markup % used only when quoting
    contract_number: int | None = None  # Sequential, display only
    notes: str = ""
    flagged_installments: list[int] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def get_installment(self, number: int) -> Installment | None:
        """Return the installment with the given number, if any."""
        for installment in self.installments:
            if installment.number == number:
                return installment
        return None

    @property
    def is_flagged(self) -> bool:
        """Whether the last recalculation found corrupt installments."""
        return bool(self.flagged_installments)
