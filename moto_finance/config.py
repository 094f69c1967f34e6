"""Configuration management for moto-finance."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, TypeVar

from moto_finance.exceptions import ConfigurationError

T = TypeVar("T")


@dataclass
class FinancingDefaults:
    """Policy defaults applied when a sale does not override them."""

    late_interest_rate: Decimal = Decimal("2")  # daily %, on the original value
    late_fee: Decimal = Decimal("50")  # flat multa per overdue installment
    installment_count: int = 12
    min_installments: int = 1
    max_installments: int = 60
    financing_rate: Decimal = Decimal("0")


@dataclass
class RefreshConfig:
    """Penalty refresh scheduling."""

    interval_seconds: float = 60.0
    run_on_start: bool = True


@dataclass
class StoreConfig:
    """Snapshot store configuration. ``path=None`` keeps everything in memory."""

    path: Path | None = None
    pretty: bool = False


@dataclass
class EventConfig:
    """Outbound event sinks."""

    output_dir: Path | None = None
    console: bool = False


@dataclass
class MotoFinanceConfig:
    """Main configuration for moto-finance."""

    financing: FinancingDefaults = field(default_factory=FinancingDefaults)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    events: EventConfig = field(default_factory=EventConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "MotoFinanceConfig":
        """Create config from ``MOTOFIN_*`` environment variables."""
        import os

        financing = FinancingDefaults(
            late_interest_rate=_env("MOTOFIN_LATE_INTEREST_RATE", Decimal, Decimal("2")),
            late_fee=_env("MOTOFIN_LATE_FEE", Decimal, Decimal("50")),
            installment_count=_env("MOTOFIN_INSTALLMENT_COUNT", int, 12),
            max_installments=_env("MOTOFIN_MAX_INSTALLMENTS", int, 60),
            financing_rate=_env("MOTOFIN_FINANCING_RATE", Decimal, Decimal("0")),
        )
        if not financing.min_installments <= financing.installment_count <= financing.max_installments:
            raise ConfigurationError(
                f"MOTOFIN_INSTALLMENT_COUNT must be between {financing.min_installments} "
                f"and {financing.max_installments}"
            )

        refresh = RefreshConfig(
            interval_seconds=_env("MOTOFIN_REFRESH_INTERVAL", float, 60.0),
            run_on_start=os.getenv("MOTOFIN_REFRESH_ON_START", "true").lower() == "true",
        )
        if refresh.interval_seconds <= 0:
            raise ConfigurationError("MOTOFIN_REFRESH_INTERVAL must be positive")

        store_path = os.getenv("MOTOFIN_STORE_PATH")
        store = StoreConfig(
            path=Path(store_path) if store_path else None,
            pretty=os.getenv("MOTOFIN_STORE_PRETTY", "false").lower() == "true",
        )

        events_dir = os.getenv("MOTOFIN_EVENTS_DIR")
        events = EventConfig(
            output_dir=Path(events_dir) if events_dir else None,
            console=os.getenv("MOTOFIN_EVENTS_CONSOLE", "false").lower() == "true",
        )

        return cls(
            financing=financing,
            refresh=refresh,
            store=store,
            events=events,
            seed=_env("MOTOFIN_SEED", int, None),
            log_level=os.getenv("MOTOFIN_LOG_LEVEL", "INFO"),
            log_format=os.getenv("MOTOFIN_LOG_FORMAT", "standard"),
        )


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    """Read and parse one environment variable."""
    import os

    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except (ValueError, InvalidOperation) as exc:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from exc
