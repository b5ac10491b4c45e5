"""Shared formatting utilities for MVPfin reports."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Mapping

import pandas as pd

from .models import DayType

CURRENCY_SYMBOL = "R$"
CENTS = Decimal("0.01")


class FormatError(ValueError):
    """Raised when a value cannot be rendered for display."""


def ensure_dataframe(records: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Ensure the input payload is normalised to a :class:`pandas.DataFrame`."""

    if isinstance(records, pd.DataFrame):
        return records.copy()

    return pd.DataFrame(list(records))


def to_amount(value: Decimal | float | int | str | None) -> Decimal:
    """Return ``value`` as a Decimal rounded to cents."""

    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1 instead of 0.1000000000000000055
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise FormatError(f"Not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise FormatError(f"Not a finite amount: {value!r}")
    return quantize_cents(amount)


def quantize_cents(amount: Decimal) -> Decimal:
    """Round ``amount`` half-up to cents, however many digits it has."""

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal | float | int) -> str:
    """Return ``value`` with pt-BR separators and no currency symbol."""

    amount = to_amount(value)
    if amount == 0:
        amount = amount.copy_abs()
    # Render with en-US separators first, then swap them
    text = f"{amount.copy_abs():,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{text}" if amount < 0 else text


def format_currency(value: Decimal | float | int) -> str:
    """Return a human-readable BRL string, e.g. ``R$ 1.234,50``."""

    text = format_amount(value)
    if text.startswith("-"):
        return f"-{CURRENCY_SYMBOL} {text[1:]}"
    return f"{CURRENCY_SYMBOL} {text}"


def format_date(value: str | date) -> str:
    """Reshape an ISO ``YYYY-MM-DD`` date into ``DD/MM/YYYY``.

    No calendar validation is done; ``2024-02-31`` is reshuffled as is.
    """

    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if not value:
        return ""

    parts = value.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise FormatError(f"Expected a YYYY-MM-DD date, got {value!r}")
    year, month, day = parts
    return f"{day}/{month}/{year}"


def get_day_label(day_type: DayType | str, other_description: str = "") -> str:
    """Return the label shown for the service day."""

    day_type = DayType(day_type)
    if day_type is DayType.OTHER:
        return other_description or DayType.OTHER.value
    return day_type.value
