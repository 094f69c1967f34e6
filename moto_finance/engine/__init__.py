"""Financing engine: schedules, late charges, lifecycle and projections."""

from moto_finance.engine.lifecycle import ContractManager
from moto_finance.engine.penalties import (
    RecalculationResult,
    StatusChange,
    assess_installment,
    derive_contract_status,
    recalculate,
)
from moto_finance.engine.schedule import (
    even_installment_value,
    generate_schedule,
    quote_installment_value,
)

__all__ = [
    "ContractManager",
    "RecalculationResult",
    "StatusChange",
    "assess_installment",
    "derive_contract_status",
    "even_installment_value",
    "generate_schedule",
    "quote_installment_value",
    "recalculate",
]
