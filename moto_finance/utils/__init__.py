"""Money and date utilities."""

from moto_finance.utils.dates import add_months, days_between, month_bounds, start_of_day, to_date
from moto_finance.utils.money import (
    format_brl,
    format_contract_id,
    parse_brl,
    round_money,
    to_decimal,
)

__all__ = [
    "add_months",
    "days_between",
    "format_brl",
    "format_contract_id",
    "month_bounds",
    "parse_brl",
    "round_money",
    "start_of_day",
    "to_date",
    "to_decimal",
]
