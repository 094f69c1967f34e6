#!/usr/bin/env python3
"""Seed a JSON snapshot store with a sample dealership portfolio.

Usage:
    python scripts/generate_sample_portfolio.py --output local/portfolio.json
    python scripts/generate_sample_portfolio.py --vehicles 200 --seed 7 --today 2024-06-30
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from moto_finance.config import MotoFinanceConfig
from moto_finance.logging import get_logger, setup_logging
from moto_finance.scenarios import DealershipPortfolioScenario
from moto_finance.store import JsonFileStore
from moto_finance.utils.dates import to_date

logger = get_logger(__name__)


def main() -> None:
    """Generate the portfolio and write it to the snapshot file."""
    config = MotoFinanceConfig.from_env()

    parser = argparse.ArgumentParser(description="Generate a sample financing portfolio")
    parser.add_argument(
        "--output", type=Path, default=Path("local/portfolio.json"), help="Snapshot file to create"
    )
    parser.add_argument("--vehicles", type=int, default=50, help="Vehicles in stock (default: 50)")
    parser.add_argument(
        "--sale-rate", type=float, default=0.6, help="Share of vehicles financed (default: 0.6)"
    )
    parser.add_argument("--seed", type=int, default=config.seed or 42, help="Random seed (default: 42)")
    parser.add_argument("--today", type=str, default=None, help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--log-level", type=str, default=config.log_level, help="Log level")
    args = parser.parse_args()

    setup_logging(args.log_level, config.log_format)

    if args.output.exists():
        logger.error("Refusing to overwrite existing snapshot %s", args.output)
        sys.exit(1)

    reference_date = to_date(args.today) if args.today else date.today()
    store = JsonFileStore(args.output, pretty=True)

    scenario = DealershipPortfolioScenario(
        num_vehicles=args.vehicles,
        sale_rate=args.sale_rate,
        reference_date=reference_date,
        seed=args.seed,
        store=store,
        defaults=config.financing,
    )
    scenario.generate()

    print("=" * 60)
    print(f"Portfolio written to {args.output}")
    print("=" * 60)
    print(json.dumps(scenario.get_portfolio_summary(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
