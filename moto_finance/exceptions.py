"""Custom exception hierarchy for moto-finance."""


class MotoFinanceError(Exception):
    """Base exception for all moto-finance errors."""


class ValidationError(MotoFinanceError):
    """Raised when a request carries invalid input; no state is touched."""


class InvalidScheduleError(ValidationError):
    """Raised when an installment schedule cannot be generated."""


class EntityNotFoundError(MotoFinanceError):
    """Raised when a referenced entity does not exist."""


class ContractNotFoundError(EntityNotFoundError):
    """Raised when a financing contract cannot be found."""

    def __init__(self, contract_id: str) -> None:
        super().__init__(f"Contract {contract_id} not found")
        self.contract_id = contract_id


class InstallmentNotFoundError(EntityNotFoundError):
    """Raised when an installment number does not exist in a contract."""

    def __init__(self, contract_id: str, installment_number: int) -> None:
        super().__init__(f"Installment {installment_number} not found in contract {contract_id}")
        self.contract_id = contract_id
        self.installment_number = installment_number


class VehicleNotFoundError(EntityNotFoundError):
    """Raised when a vehicle cannot be found."""

    def __init__(self, vehicle_id: str) -> None:
        super().__init__(f"Vehicle {vehicle_id} not found")
        self.vehicle_id = vehicle_id


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class VehicleUnavailableError(MotoFinanceError):
    """Raised when a vehicle is not in stock for a sale."""

    def __init__(self, vehicle_id: str, status: str) -> None:
        super().__init__(f"Vehicle {vehicle_id} is not available for sale (status: {status})")
        self.vehicle_id = vehicle_id
        self.status = status


class VehicleInUseError(MotoFinanceError):
    """Raised when deleting a vehicle that a contract still references."""

    def __init__(self, vehicle_id: str, contract_ids: list[str]) -> None:
        super().__init__(
            f"Vehicle {vehicle_id} is referenced by contract(s): {', '.join(contract_ids)}"
        )
        self.vehicle_id = vehicle_id
        self.contract_ids = contract_ids


class AlreadyPaidError(MotoFinanceError):
    """Raised when a paid installment is paid or edited again."""

    def __init__(self, contract_id: str, installment_number: int) -> None:
        super().__init__(f"Installment {installment_number} of contract {contract_id} is already paid")
        self.contract_id = contract_id
        self.installment_number = installment_number


class CorruptScheduleError(MotoFinanceError):
    """Raised when a stored installment cannot be evaluated.

    Collected per installment during a recalculation sweep instead of
    aborting it.
    """

    def __init__(self, contract_id: str, installment_number: int, reason: str) -> None:
        super().__init__(f"Contract {contract_id}, installment {installment_number}: {reason}")
        self.contract_id = contract_id
        self.installment_number = installment_number
        self.reason = reason


class ConfigurationError(MotoFinanceError):
    """Raised when configuration is invalid or missing."""


class StoreError(MotoFinanceError):
    """Raised when the snapshot store cannot be read or written."""


class SinkError(MotoFinanceError):
    """Raised when an event sink operation fails."""
