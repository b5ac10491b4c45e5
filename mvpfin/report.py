"""Report form state transitions.

Every helper returns a new :class:`ReportState`; the Streamlit session keeps
the latest one.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from decimal import Decimal

from . import utils
from .markers import MarkerRegistry
from .models import DayType, EntryMarker, ReportState

WEEKDAY_NAMES = (
    "Domingo",
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
)

_NON_DIGITS = re.compile(r"\D")


class UnknownMarkerError(KeyError):
    """Raised when a report is asked to change a key the registry doesn't know."""


def weekday_index(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""

    return (day.weekday() + 1) % 7


def infer_day_type(day: date | str) -> tuple[DayType, str]:
    """Return the day type and free-text description implied by ``day``."""

    if isinstance(day, str):
        day = date.fromisoformat(day)

    index = weekday_index(day)
    if index == 0:
        return DayType.SUNDAY, ""
    if index == 3:
        return DayType.WEDNESDAY, ""
    return DayType.OTHER, WEEKDAY_NAMES[index]


def new_report(today: date | None = None, responsible: str = "") -> ReportState:
    today = today or date.today()
    day_type, description = infer_day_type(today)
    return ReportState(
        date=today,
        day_type=day_type,
        other_day_description=description,
        responsible=responsible,
    )


def change_date(report: ReportState, new_date: date | str | None) -> ReportState:
    """Move the report to ``new_date`` and re-infer its day type."""

    if not new_date:
        return report
    if isinstance(new_date, str):
        new_date = date.fromisoformat(new_date)
    day_type, description = infer_day_type(new_date)
    return replace(
        report,
        date=new_date,
        day_type=day_type,
        other_day_description=description,
    )


def ensure_entries(report: ReportState, markers: Iterable[EntryMarker]) -> ReportState:
    """Give every registry key an entry flag and a value, keeping existing ones."""

    entries = dict(report.entries)
    values = dict(report.values)
    for marker in markers:
        entries.setdefault(marker.key, False)
        values.setdefault(marker.key, Decimal("0.00"))
    return replace(report, entries=entries, values=values)


def _require_key(markers: MarkerRegistry | Iterable[EntryMarker], key: str) -> None:
    keys = markers.keys() if isinstance(markers, MarkerRegistry) else [m.key for m in markers]
    if key not in keys:
        raise UnknownMarkerError(key)


def toggle_entry(
    report: ReportState,
    markers: MarkerRegistry | Iterable[EntryMarker],
    key: str,
) -> ReportState:
    _require_key(markers, key)
    entries = dict(report.entries)
    entries[key] = not entries.get(key, False)
    return replace(report, entries=entries)


def update_value(
    report: ReportState,
    markers: MarkerRegistry | Iterable[EntryMarker],
    key: str,
    amount: Decimal | float | int | str,
) -> ReportState:
    _require_key(markers, key)
    values = dict(report.values)
    values[key] = utils.to_amount(amount)
    return replace(report, values=values)


def parse_currency_input(raw: str | None) -> Decimal:
    """Read typed text as cents: every digit counts, everything else is dropped.

    ``"1.234,56"`` and ``"123456"`` both give ``Decimal("1234.56")``.
    """

    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        return Decimal("0.00")
    return utils.quantize_cents(Decimal(f"{digits}E-2"))
