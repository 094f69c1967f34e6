"""Enumeration types for financing domain entities.

Values are the persisted (Portuguese) labels used by the dealership system.
"""

from enum import Enum


class VehicleStatus(str, Enum):
    IN_STOCK = "estoque"
    SOLD = "vendida"


class ContractStatus(str, Enum):
    ACTIVE = "ativo"
    PAID_OFF = "quitado"
    DELINQUENT = "inadimplente"


class InstallmentStatus(str, Enum):
    PENDING = "pendente"
    PAID = "paga"
    OVERDUE = "atrasada"
