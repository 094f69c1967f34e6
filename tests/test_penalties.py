"""Tests for late interest and penalty recalculation."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from moto_finance.engine.penalties import (
    assess_installment,
    derive_contract_status,
    recalculate,
)
from moto_finance.engine.schedule import generate_schedule
from moto_finance.exceptions import CorruptScheduleError
from moto_finance.models.financing import (
    Contract,
    ContractStatus,
    Installment,
    InstallmentStatus,
)


def make_contract(contract_id: str = "c-1", **overrides) -> Contract:
    """Entrada 15.000 and 12 x 2.500 signed on 2024-01-15."""
    installments = generate_schedule(date(2024, 1, 15), Decimal("30000"), 12, Decimal("2500"))
    values = dict(
        contract_id=contract_id,
        customer_id="cli-001",
        vehicle_id="moto-003",
        contract_date=date(2024, 1, 15),
        down_payment=Decimal("15000"),
        financed_amount=Decimal("30000"),
        total_amount=Decimal("45000"),
        installment_count=12,
        late_interest_rate=Decimal("2"),
        late_fee=Decimal("50"),
        status=ContractStatus.ACTIVE,
        installments=installments,
    )
    values.update(overrides)
    return Contract(**values)


def pay(contract: Contract, number: int, amount: Decimal, on: date) -> Contract:
    installments = [
        replace(i, status=InstallmentStatus.PAID, paid_date=on, total_amount=amount)
        if i.number == number
        else i
        for i in contract.installments
    ]
    return replace(contract, installments=installments, status=derive_contract_status(installments))


class TestRecalculateScenarios:
    """The reference contract on different days."""

    def test_contract_day_nothing_overdue(self) -> None:
        result = recalculate([make_contract()], date(2024, 1, 15))
        contract = result.contracts[0]

        assert all(i.status == InstallmentStatus.PENDING for i in contract.installments)
        assert all(i.total_amount == Decimal("2500") for i in contract.installments)
        assert contract.status == ContractStatus.ACTIVE
        assert result.status_changes == []
        assert result.newly_overdue == 0

    def test_two_installments_overdue(self) -> None:
        result = recalculate([make_contract()], date(2024, 3, 20))
        contract = result.contracts[0]
        first, second, third = contract.installments[:3]

        assert first.status == InstallmentStatus.OVERDUE
        assert first.interest_amount == Decimal("1700")
        assert first.penalty_amount == Decimal("50")
        assert first.total_amount == Decimal("4250")

        assert second.status == InstallmentStatus.OVERDUE
        assert second.interest_amount == Decimal("250")
        assert second.total_amount == Decimal("2800")

        assert third.status == InstallmentStatus.PENDING
        assert third.total_amount == Decimal("2500")

        assert contract.status == ContractStatus.DELINQUENT
        assert result.newly_overdue == 2
        assert result.total_interest == Decimal("1950")
        assert result.total_penalties == Decimal("100")

    def test_status_change_reported(self) -> None:
        result = recalculate([make_contract()], date(2024, 3, 20))

        assert len(result.status_changes) == 1
        change = result.status_changes[0]
        assert change.contract_id == "c-1"
        assert change.previous == ContractStatus.ACTIVE
        assert change.current == ContractStatus.DELINQUENT
        assert [c.contract_id for c in result.changed_contracts] == ["c-1"]

    def test_paid_installment_is_never_touched(self) -> None:
        contract = pay(make_contract(), 1, Decimal("4250"), date(2024, 3, 21))

        for today in (date(2024, 3, 21), date(2024, 6, 1), date(2030, 1, 1)):
            first = recalculate([contract], today).contracts[0].installments[0]
            assert first.status == InstallmentStatus.PAID
            assert first.total_amount == Decimal("4250")
            assert first.interest_amount == Decimal("0")
            assert first.paid_date == date(2024, 3, 21)

    def test_fully_paid_contract_is_paid_off_whatever_the_day(self) -> None:
        contract = make_contract()
        for number in range(1, 13):
            contract = pay(contract, number, Decimal("2500"), date(2024, 1, 20))

        for today in (date(2024, 1, 20), date(2026, 1, 1)):
            result = recalculate([contract], today)
            assert result.contracts[0].status == ContractStatus.PAID_OFF
            assert result.total_interest == Decimal("0")

    def test_stale_paid_off_status_is_rederived(self) -> None:
        contract = make_contract()
        for number in range(1, 13):
            contract = pay(contract, number, Decimal("2500"), date(2024, 1, 20))
        stale = replace(contract, status=ContractStatus.ACTIVE)

        result = recalculate([stale], date(2024, 2, 1))

        assert result.contracts[0].status == ContractStatus.PAID_OFF
        assert result.status_changes[0].current == ContractStatus.PAID_OFF


class TestRecalculateProperties:
    """Properties that hold for any snapshot."""

    def test_idempotent_for_same_day(self) -> None:
        first = recalculate([make_contract()], date(2024, 3, 20))
        second = recalculate(first.contracts, date(2024, 3, 20))

        assert second.contracts == first.contracts
        assert second.status_changes == []
        assert second.newly_overdue == 0
        assert second.total_interest == first.total_interest

    def test_does_not_mutate_input(self) -> None:
        contract = make_contract()
        before = replace(contract, installments=list(contract.installments))

        recalculate([contract], date(2024, 3, 20))

        assert contract == before
        assert contract.installments[0].status == InstallmentStatus.PENDING

    def test_interest_grows_with_days(self) -> None:
        earlier = recalculate([make_contract()], date(2024, 3, 20)).contracts[0]
        later = recalculate([make_contract()], date(2024, 3, 25)).contracts[0]

        assert later.installments[0].interest_amount > earlier.installments[0].interest_amount
        # 39 days
        assert later.installments[0].interest_amount == Decimal("1950")

    def test_due_date_itself_is_not_late(self) -> None:
        contract = recalculate([make_contract()], date(2024, 2, 15)).contracts[0]

        assert contract.installments[0].status == InstallmentStatus.PENDING
        assert contract.status == ContractStatus.ACTIVE

    def test_time_of_day_is_ignored(self) -> None:
        by_date = recalculate([make_contract()], date(2024, 3, 20))
        by_datetime = recalculate([make_contract()], datetime(2024, 3, 20, 23, 59))

        assert by_date.contracts == by_datetime.contracts

    def test_moving_back_in_time_reverts_lateness(self) -> None:
        late = recalculate([make_contract()], date(2024, 3, 20)).contracts[0]
        back = recalculate([late], date(2024, 2, 1)).contracts[0]

        assert back.installments[0].status == InstallmentStatus.PENDING
        assert back.installments[0].total_amount == Decimal("2500")
        assert back.status == ContractStatus.ACTIVE

    def test_status_invariant(self) -> None:
        contracts = [
            make_contract("a"),
            pay(make_contract("b"), 1, Decimal("2500"), date(2024, 2, 15)),
        ]
        for contract in recalculate(contracts, date(2024, 4, 1)).contracts:
            assert contract.status == derive_contract_status(contract.installments)

    def test_empty_snapshot(self) -> None:
        result = recalculate([], date(2024, 3, 20))

        assert result.contracts == []
        assert result.summary()["contracts"] == 0


class TestCorruptInstallments:
    """Corrupt installments are isolated, never raised."""

    def _corrupt(self, contract: Contract, number: int, **changes) -> Contract:
        installments = [
            replace(i, **changes) if i.number == number else i for i in contract.installments
        ]
        return replace(contract, installments=installments)

    def test_unparseable_due_date_is_flagged(self) -> None:
        broken = self._corrupt(make_contract("bad"), 2, due_date="not-a-date")
        healthy = make_contract("good")

        result = recalculate([broken, healthy], date(2024, 3, 20))
        bad, good = result.contracts

        assert len(result.errors) == 1
        assert isinstance(result.errors[0], CorruptScheduleError)
        assert result.errors[0].installment_number == 2
        assert bad.flagged_installments == [2]
        assert bad.is_flagged
        assert bad.installments[1].due_date == "not-a-date"
        assert bad.installments[0].status == InstallmentStatus.OVERDUE
        assert good.flagged_installments == []
        assert good.installments[1].total_amount == Decimal("2800")
        assert result.flagged_contract_ids == ["bad"]

    def test_flagged_installment_left_out_of_totals(self) -> None:
        broken = self._corrupt(make_contract(), 2, due_date="31/02/2024")

        result = recalculate([broken], date(2024, 3, 20))

        assert result.total_interest == Decimal("1700")
        assert result.total_penalties == Decimal("50")

    def test_negative_original_amount_is_flagged(self) -> None:
        broken = self._corrupt(make_contract(), 3, original_amount=Decimal("-10"))

        result = recalculate([broken], date(2024, 3, 20))

        assert result.contracts[0].flagged_installments == [3]
        assert "negative original amount" in str(result.errors[0])

    def test_flag_cleared_once_repaired(self) -> None:
        broken = self._corrupt(make_contract(), 2, due_date="not-a-date")
        flagged = recalculate([broken], date(2024, 3, 20)).contracts[0]
        repaired = self._corrupt(flagged, 2, due_date=date(2024, 3, 15))

        assert recalculate([repaired], date(2024, 3, 20)).contracts[0].flagged_installments == []

    def test_errors_in_summary(self) -> None:
        broken = self._corrupt(make_contract(), 2, due_date="not-a-date")

        summary = recalculate([broken], date(2024, 3, 20)).summary()

        assert summary["today"] == "2024-03-20"
        assert Decimal(summary["total_interest"]) == Decimal("1700")
        assert len(summary["errors"]) == 1


class TestAssessInstallment:
    """Tests for assess_installment."""

    def test_pending_before_due(self) -> None:
        contract = make_contract()
        result = assess_installment(contract, contract.installments[0], date(2024, 2, 1))

        assert result.status == InstallmentStatus.PENDING
        assert result.total_amount == Decimal("2500")

    def test_rates_come_from_contract(self) -> None:
        contract = make_contract(late_interest_rate=Decimal("0.5"), late_fee=Decimal("10"))
        result = assess_installment(contract, contract.installments[0], date(2024, 2, 25))

        # 2500 * 0.5% * 10 days
        assert result.interest_amount == Decimal("125")
        assert result.penalty_amount == Decimal("10")
        assert result.total_amount == Decimal("2635")

    def test_interest_kept_exact(self) -> None:
        contract = make_contract(late_interest_rate=Decimal("0.333"))
        installment = Installment(
            number=1,
            due_date=date(2024, 2, 15),
            original_amount=Decimal("1000.01"),
            interest_amount=Decimal("0"),
            penalty_amount=Decimal("0"),
            total_amount=Decimal("1000.01"),
            status=InstallmentStatus.PENDING,
        )

        result = assess_installment(contract, installment, date(2024, 2, 16))

        assert result.interest_amount == Decimal("3.33003330")

    def test_interest_grows_every_day_on_small_amounts(self) -> None:
        contract = make_contract(late_interest_rate=Decimal("2"), late_fee=Decimal("0"))
        installment = replace(contract.installments[0], original_amount=Decimal("0.10"), total_amount=Decimal("0.10"))

        totals = [
            assess_installment(contract, installment, date(2024, 2, 15 + days)).total_amount for days in range(1, 5)
        ]

        # 2% of 0.10 is a fifth of a cent per day
        assert totals == [Decimal("0.102"), Decimal("0.104"), Decimal("0.106"), Decimal("0.108")]
        assert all(earlier < later for earlier, later in zip(totals, totals[1:]))

    def test_unreadable_amount_raises(self) -> None:
        contract = make_contract()
        installment = replace(contract.installments[0], original_amount="abc")

        with pytest.raises(CorruptScheduleError):
            assess_installment(contract, installment, date(2024, 3, 20))


class TestDeriveContractStatus:
    """Tests for derive_contract_status."""

    def _installment(self, status: InstallmentStatus) -> Installment:
        return Installment(
            number=1,
            due_date=date(2024, 2, 15),
            original_amount=Decimal("100"),
            interest_amount=Decimal("0"),
            penalty_amount=Decimal("0"),
            total_amount=Decimal("100"),
            status=status,
        )

    def test_all_paid(self) -> None:
        paid = self._installment(InstallmentStatus.PAID)
        assert derive_contract_status([paid, paid]) == ContractStatus.PAID_OFF

    def test_any_overdue(self) -> None:
        statuses = [InstallmentStatus.PAID, InstallmentStatus.OVERDUE, InstallmentStatus.PENDING]
        installments = [self._installment(s) for s in statuses]
        assert derive_contract_status(installments) == ContractStatus.DELINQUENT

    def test_otherwise_active(self) -> None:
        installments = [self._installment(InstallmentStatus.PAID), self._installment(InstallmentStatus.PENDING)]
        assert derive_contract_status(installments) == ContractStatus.ACTIVE
