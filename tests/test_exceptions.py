"""Tests for custom exception hierarchy."""

from moto_finance.exceptions import (
    AlreadyPaidError,
    ConfigurationError,
    ContractNotFoundError,
    CorruptScheduleError,
    EntityNotFoundError,
    InstallmentNotFoundError,
    InvalidScheduleError,
    MotoFinanceError,
    ReferentialIntegrityError,
    SinkError,
    StoreError,
    ValidationError,
    VehicleInUseError,
    VehicleNotFoundError,
    VehicleUnavailableError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_base_is_exception(self) -> None:
        assert isinstance(MotoFinanceError("test"), Exception)

    def test_invalid_schedule_is_validation_error(self) -> None:
        err = InvalidScheduleError("test")
        assert isinstance(err, ValidationError)
        assert isinstance(err, MotoFinanceError)

    def test_not_found_errors(self) -> None:
        assert isinstance(ContractNotFoundError("c1"), EntityNotFoundError)
        assert isinstance(InstallmentNotFoundError("c1", 3), EntityNotFoundError)
        assert isinstance(VehicleNotFoundError("m1"), EntityNotFoundError)
        assert isinstance(ReferentialIntegrityError("test"), EntityNotFoundError)

    def test_business_rule_errors(self) -> None:
        assert isinstance(VehicleUnavailableError("m1", "vendida"), MotoFinanceError)
        assert isinstance(VehicleInUseError("m1", ["c1"]), MotoFinanceError)
        assert isinstance(AlreadyPaidError("c1", 1), MotoFinanceError)

    def test_infrastructure_errors(self) -> None:
        assert isinstance(ConfigurationError("test"), MotoFinanceError)
        assert isinstance(StoreError("test"), MotoFinanceError)
        assert isinstance(SinkError("test"), MotoFinanceError)


class TestExceptionDetails:
    """Test messages and attributes."""

    def test_already_paid_message(self) -> None:
        err = AlreadyPaidError("c1", 4)
        assert str(err) == "Installment 4 of contract c1 is already paid"
        assert err.contract_id == "c1"
        assert err.installment_number == 4

    def test_vehicle_in_use_lists_contracts(self) -> None:
        err = VehicleInUseError("moto-1", ["c1", "c2"])
        assert err.contract_ids == ["c1", "c2"]
        assert "c1, c2" in str(err)

    def test_corrupt_schedule_carries_location(self) -> None:
        err = CorruptScheduleError("c9", 2, "unparseable due date 'x'")
        assert err.contract_id == "c9"
        assert err.installment_number == 2
        assert str(err) == "Contract c9, installment 2: unparseable due date 'x'"
