"""Currency helpers (BRL)."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
ZERO = Decimal("0")

_NON_NUMERIC = re.compile(r"[^0-9,-]+")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric input to ``Decimal``.

    Floats go through ``str`` so that ``0.1`` stays ``Decimal("0.1")``.

    Raises
    ------
    ValueError
        If the value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary value: {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary value: {value!r}") from exc


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_brl(value: str | None) -> Decimal:
    """Parse a user-typed BRL amount such as ``"R$ 1.234,56"``.

    Everything except digits, comma and minus is dropped and the first
    comma becomes the decimal point. Empty or unparseable input is zero.
    """
    if not value:
        return ZERO
    cleaned = _NON_NUMERIC.sub("", value).replace(",", ".", 1)
    if not cleaned:
        return ZERO
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return ZERO


def format_brl(value: Decimal | int | float) -> str:
    """Format an amount as ``R$ 1.234,56``."""
    amount = round_money(to_decimal(value))
    sign = "-" if amount < 0 else ""
    # 1,234.56 -> 1.234,56
    body = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {body}"


def format_contract_id(value: int | str | None) -> str:
    """Display form of a contract number: zero-padded to 6 digits.

    Non-numeric identifiers (UUIDs) fall back to their first 8 characters.
    """
    if isinstance(value, int):
        return str(value).zfill(6)
    if not value:
        return "000000"
    if value.isdigit():
        return value.zfill(6)
    return value[:8].upper()
