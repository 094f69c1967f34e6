"""Financing domain models."""

from moto_finance.models.financing.contract import Contract, Installment
from moto_finance.models.financing.enums import (
    ContractStatus,
    InstallmentStatus,
    VehicleStatus,
)
from moto_finance.models.financing.requests import (
    ContractEdit,
    InstallmentEdit,
    NewContract,
    PaymentRegistration,
)
from moto_finance.models.financing.vehicle import Vehicle

__all__ = [
    "Contract",
    "ContractEdit",
    "ContractStatus",
    "Installment",
    "InstallmentEdit",
    "InstallmentStatus",
    "NewContract",
    "PaymentRegistration",
    "Vehicle",
    "VehicleStatus",
]
