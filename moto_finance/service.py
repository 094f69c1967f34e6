"""Single-writer host for the financing engine.

All mutations and penalty refreshes are queued and run one at a time on a
dedicated worker thread, in submission order. A timer thread only
*submits* refreshes; it never touches the snapshot itself, so a refresh
can never interleave with a payment being registered.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, TypeVar

from moto_finance.config import MotoFinanceConfig, RefreshConfig
from moto_finance.engine.lifecycle import ContractManager, Request
from moto_finance.engine.penalties import RecalculationResult
from moto_finance.models.financing import ContractEdit, NewContract
from moto_finance.sinks import ConsoleSink, EventSink, JsonLinesSink
from moto_finance.store import FinancingDataStore, FinancingRepository, JsonFileStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SENTINEL = object()


class FinancingService:
    """Serialize access to a ``ContractManager`` and refresh it periodically."""

    def __init__(
        self,
        manager: ContractManager,
        refresh: RefreshConfig | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the service.

        Parameters
        ----------
        manager : ContractManager
            Engine whose state this service owns.
        refresh : RefreshConfig | None
            Refresh interval and whether to refresh on start.
        clock : Callable[[], date]
            Source of "today" for scheduled refreshes.
        """
        self.manager = manager
        self.refresh_config = refresh or RefreshConfig()
        self.clock = clock
        self._jobs: queue.Queue = queue.Queue()
        # Guards _accepting so no job can be queued behind the stop sentinel
        self._lock = threading.Lock()
        self._accepting = False
        self._stop = threading.Event()
        self._worker: threading.Thread | None = None
        self._timer: threading.Thread | None = None
        self.last_result: RecalculationResult | None = None

    @classmethod
    def from_config(cls, config: MotoFinanceConfig, clock: Callable[[], date] = date.today) -> "FinancingService":
        """Build store, sinks and manager from configuration."""
        store: FinancingRepository
        if config.store.path is not None:
            store = JsonFileStore(config.store.path, pretty=config.store.pretty)
        else:
            store = FinancingDataStore()

        sinks: list[EventSink] = []
        if config.events.output_dir is not None:
            sinks.append(JsonLinesSink(config.events.output_dir))
        if config.events.console:
            sinks.append(ConsoleSink(pretty=False))

        manager = ContractManager(store, sinks=sinks, defaults=config.financing)
        return cls(manager, refresh=config.refresh, clock=clock)

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """Start the worker and the refresh timer."""
        if self.running:
            return
        self._stop.clear()
        self._worker = threading.Thread(target=self._work, name="financing-writer", daemon=True)
        self._worker.start()
        with self._lock:
            self._accepting = True

        if self.refresh_config.run_on_start:
            self.refresh()

        self._timer = threading.Thread(target=self._tick, name="financing-refresh", daemon=True)
        self._timer.start()
        logger.info(
            "Financing service started (refresh every %.0fs)",
            self.refresh_config.interval_seconds,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer, let queued jobs finish, then stop the worker.

        New submissions are refused from the moment this is called, so every
        accepted job sits ahead of the stop sentinel and runs. Sinks
        are closed once; stopping a stopped service does nothing.
        """
        with self._lock:
            if not self._accepting:
                return
            self._accepting = False

        self._stop.set()
        if self._timer is not None:
            self._timer.join(timeout)
            self._timer = None
        if self._worker is not None:
            self._jobs.put(_SENTINEL)
            self._worker.join(timeout)
            self._worker = None
        for sink in self.manager.sinks:
            sink.close()
        logger.info("Financing service stopped")

    def __enter__(self) -> "FinancingService":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future:
        """Queue a job; its result or exception arrives through the future."""
        future: Future = Future()
        with self._lock:
            if not self._accepting:
                raise RuntimeError("FinancingService is not running")
            self._jobs.put((future, fn, args, kwargs))
        return future

    # Inbound operations, all serialized through the queue
    def apply(self, request: Request) -> Future:
        return self.submit(self.manager.apply, request)

    def create_contract(self, request: NewContract) -> Future:
        return self.submit(self.manager.create_contract, request)

    def register_payment(
        self,
        contract_id: str,
        installment_number: int,
        payment_date: date,
        amount_paid: Decimal,
    ) -> Future:
        return self.submit(
            self.manager.register_payment,
            contract_id,
            installment_number,
            payment_date,
            amount_paid,
        )

    def edit_installment(self, contract_id: str, installment_number: int, new_original_value: Decimal) -> Future:
        return self.submit(self.manager.edit_installment, contract_id, installment_number, new_original_value)

    def edit_contract(self, edit: ContractEdit) -> Future:
        return self.submit(self.manager.edit_contract, edit)

    def delete_vehicle(self, vehicle_id: str) -> Future:
        return self.submit(self.manager.delete_vehicle, vehicle_id)

    def get_contract(self, contract_id: str) -> Future:
        return self.submit(self.manager.get_contract, contract_id)

    def list_contracts(self) -> Future:
        return self.submit(self.manager.list_contracts)

    def list_vehicles(self) -> Future:
        return self.submit(self.manager.store.list_vehicles)

    def refresh(self, today: date | datetime | None = None) -> Future:
        """Queue a penalty refresh for ``today`` (the clock's day by default)."""
        return self.submit(self._refresh, today)

    def _refresh(self, today: date | datetime | None) -> RecalculationResult:
        result = self.manager.recalculate(today if today is not None else self.clock())
        self.last_result = result
        return result

    def _work(self) -> None:
        """Worker loop: run queued jobs one at a time until the sentinel."""
        while True:
            item = self._jobs.get()
            if item is _SENTINEL:
                break
            future, fn, args, kwargs = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as exc:
                future.set_exception(exc)

    def _tick(self) -> None:
        """Timer loop: submit a refresh every interval until stopped."""
        while not self._stop.wait(self.refresh_config.interval_seconds):
            try:
                self.refresh()
            except RuntimeError:
                break
