#!/usr/bin/env python3
"""Run penalty refresh passes over a JSON snapshot store.

A single pass is the cron-style use; ``--watch`` keeps the single-writer
service running and refreshes on the configured interval until Ctrl+C.

Usage:
    python scripts/refresh_penalties.py --store local/portfolio.json
    python scripts/refresh_penalties.py --store local/portfolio.json --today 2024-03-20
    python scripts/refresh_penalties.py --store local/portfolio.json --watch --interval 60
"""

import argparse
import json
import signal
import sys
import threading
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from moto_finance.config import MotoFinanceConfig
from moto_finance.engine import queries
from moto_finance.exceptions import MotoFinanceError
from moto_finance.logging import get_logger, setup_logging
from moto_finance.service import FinancingService
from moto_finance.utils.dates import to_date
from moto_finance.utils.money import format_brl

logger = get_logger(__name__)


def main() -> None:
    """Refresh late charges and print the dashboard figures."""
    config = MotoFinanceConfig.from_env()

    parser = argparse.ArgumentParser(description="Refresh late interest and penalties")
    parser.add_argument(
        "--store", type=Path, default=config.store.path, required=config.store.path is None,
        help="Snapshot file (default: $MOTOFIN_STORE_PATH)",
    )
    parser.add_argument("--today", type=str, default=None, help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--events-dir", type=Path, default=config.events.output_dir, help="Write events here")
    parser.add_argument("--watch", action="store_true", help="Keep refreshing until interrupted")
    parser.add_argument(
        "--interval", type=float, default=config.refresh.interval_seconds,
        help="Seconds between refreshes with --watch (default: 60)",
    )
    parser.add_argument("--log-level", type=str, default=config.log_level, help="Log level")
    args = parser.parse_args()

    setup_logging(args.log_level, config.log_format)

    if not args.store.exists():
        logger.error("Snapshot %s does not exist", args.store)
        sys.exit(1)

    config.store.path = args.store
    config.events.output_dir = args.events_dir
    config.refresh.interval_seconds = args.interval
    config.refresh.run_on_start = False

    fixed_day = to_date(args.today) if args.today else None
    service = FinancingService.from_config(config, clock=lambda: fixed_day or date.today())

    try:
        service.start()
        result = service.refresh().result()
        print(json.dumps(result.summary(), indent=2, ensure_ascii=False))

        if args.watch:
            stop = threading.Event()
            signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
            logger.info("Watching %s; press Ctrl+C to stop", args.store)
            stop.wait()

        vehicles = service.list_vehicles().result()
        contracts = service.list_contracts().result()
    except MotoFinanceError as exc:
        logger.error("Refresh failed: %s", exc)
        sys.exit(1)
    finally:
        service.stop()

    dashboard = queries.dashboard_summary(vehicles, contracts, fixed_day or date.today())
    print(f"Vehicles in stock:    {dashboard.vehicles_in_stock}")
    print(f"Active contracts:     {dashboard.active_contracts}")
    print(f"Overdue installments: {dashboard.overdue_installments}")
    print(f"Overdue amount:       {format_brl(dashboard.overdue_amount)}")
    print(f"Sales this month:     {dashboard.sales_this_month}")


if __name__ == "__main__":
    main()
