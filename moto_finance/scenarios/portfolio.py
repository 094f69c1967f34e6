"""Dealership portfolio scenario: inventory, financed sales and payment behavior."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta

from moto_finance.config import FinancingDefaults
from moto_finance.engine import queries
from moto_finance.engine.lifecycle import ContractManager
from moto_finance.engine.penalties import RecalculationResult, assess_installment
from moto_finance.generators import VehicleGenerator
from moto_finance.models.financing import Contract, NewContract
from moto_finance.sinks import EventSink
from moto_finance.store import FinancingDataStore
from moto_finance.utils.money import round_money

logger = logging.getLogger(__name__)


class DealershipPortfolioScenario:
    """Generate a realistic financing portfolio.

    This scenario creates:
    - An inventory of motorcycles
    - Financed sales for a share of them, signed over the last two years
    - Payment histories driven by a behavior drawn per contract:
        - On-time payers
        - Occasional late payers (1-20 days)
        - Defaulters who stop paying after a few installments
    - A final penalty refresh as of the reference date
    """

    INSTALLMENT_COUNTS = [6, 12, 18, 24, 36, 48]
    FINANCING_RATES = [Decimal("0"), Decimal("1.99"), Decimal("2.49"), Decimal("3.5")]

    def __init__(
        self,
        num_vehicles: int = 50,
        sale_rate: float = 0.60,
        on_time_rate: float = 0.80,
        late_rate: float = 0.15,
        default_rate: float = 0.05,
        reference_date: date | None = None,
        seed: int | None = None,
        *,
        store: FinancingDataStore | None = None,
        defaults: FinancingDefaults | None = None,
        sinks: list[EventSink] | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        num_vehicles : int
            Number of motorcycles to put in stock.
        sale_rate : float
            Share of vehicles sold on installments (0.0 to 1.0).
        on_time_rate : float
            Weight of contracts paid on time.
        late_rate : float
            Weight of contracts with occasional late payments.
        default_rate : float
            Weight of contracts that stop paying.
        reference_date : date | None
            "Today" for payments and the final refresh (default: today).
        seed : int | None
            Random seed for reproducibility.
        store : FinancingDataStore | None
            Store to fill (default: a fresh in-memory store).
        defaults : FinancingDefaults | None
            Late-charge policy for the generated contracts.
        sinks : list[EventSink] | None
            Event sinks handed to the contract manager.
        """
        self.num_vehicles = num_vehicles
        self.sale_rate = sale_rate
        self.on_time_rate = on_time_rate
        self.late_rate = late_rate
        self.default_rate = default_rate
        self.reference_date = reference_date or date.today()
        self.seed = seed

        if seed is not None:
            random.seed(seed)

        self.defaults = defaults or FinancingDefaults()
        self.store = store if store is not None else FinancingDataStore()
        self.manager = ContractManager(self.store, sinks=sinks, defaults=self.defaults)
        self._vehicle_gen = VehicleGenerator(seed=seed)
        self.last_result: RecalculationResult | None = None

    def generate(self) -> FinancingDataStore:
        """Generate all data for the scenario.

        Returns
        -------
        FinancingDataStore
            Store containing vehicles and contracts.
        """
        logger.info(
            "Starting dealership portfolio scenario: %d vehicles, %.0f%% financed",
            self.num_vehicles,
            self.sale_rate * 100,
        )

        for _ in range(self.num_vehicles):
            self.store.add_vehicle(self._vehicle_gen.generate())

        vehicles = self.store.list_vehicles()
        to_sell = random.sample(vehicles, int(len(vehicles) * self.sale_rate))

        for vehicle in to_sell:
            contract = self.manager.create_contract(self._sale_request(vehicle.vehicle_id, vehicle.price))
            self._apply_payment_behavior(contract)

        self.last_result = self.manager.recalculate(self.reference_date)

        logger.info(
            "Generated %d contracts with %d installments",
            len(self.store.contracts),
            self.store.summary()["installments"],
        )
        return self.store

    def _sale_request(self, vehicle_id: str, price: Decimal) -> NewContract:
        months_ago = random.randint(0, 24)
        contract_date = self.reference_date - relativedelta(months=months_ago, days=random.randint(0, 27))
        down_share = Decimal(str(round(random.uniform(0.10, 0.40), 2)))
        down_payment = (price * down_share / 100).quantize(Decimal("1")) * 100

        return NewContract(
            customer_id=str(uuid.UUID(int=random.getrandbits(128), version=4)),
            vehicle_id=vehicle_id,
            down_payment=down_payment,
            installment_count=random.choice(self.INSTALLMENT_COUNTS),
            late_interest_rate=self.defaults.late_interest_rate,
            late_fee=self.defaults.late_fee,
            contract_date=contract_date,
            financing_rate=random.choice(self.FINANCING_RATES),
        )

    def _apply_payment_behavior(self, contract: Contract) -> None:
        """Pay the installments already due according to a drawn behavior."""
        behavior = random.choices(
            ["good", "occasional_late", "defaulter"],
            weights=[self.on_time_rate, self.late_rate, self.default_rate],
            k=1,
        )[0]
        stop_after = random.randint(1, 4) if behavior == "defaulter" else None

        for installment in contract.installments:
            if installment.due_date > self.reference_date:
                break
            if stop_after is not None and installment.number > stop_after:
                break

            delay = 0
            if behavior == "occasional_late" and random.random() < 0.3:
                delay = random.randint(1, 20)
            paid_on = min(installment.due_date + timedelta(days=delay), self.reference_date)

            # Collect what the contract charged on the payment day, in cents
            owed = round_money(assess_installment(contract, installment, paid_on).total_amount)
            contract = self.manager.register_payment(
                contract.contract_id, installment.number, paid_on, owed
            )

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics for the portfolio.

        Returns
        -------
        dict[str, Any]
            Portfolio summary statistics.
        """
        contracts = self.store.list_contracts()
        if not contracts:
            return {}

        dashboard = queries.dashboard_summary(self.store.list_vehicles(), contracts, self.reference_date)
        return {
            "total_contracts": len(contracts),
            "total_financed": float(sum(c.financed_amount for c in contracts)),
            "contract_status_distribution": {
                status.value: count
                for status, count in queries.count_contracts_by_status(contracts).items()
            },
            "vehicle_status_distribution": {
                status.value: count
                for status, count in queries.count_vehicles_by_status(self.store.list_vehicles()).items()
            },
            "overdue_installments": dashboard.overdue_installments,
            "overdue_amount": float(dashboard.overdue_amount),
            "sales_this_month": dashboard.sales_this_month,
        }
