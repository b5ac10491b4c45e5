"""Aggregation helpers for report entries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, localcontext
from typing import TypedDict

from . import utils
from .models import EntryMarker


class ShareEntry(TypedDict):
    key: str
    label: str
    amount: Decimal
    share: float


def _enabled_markers(
    entries: Mapping[str, bool],
    markers: Iterable[EntryMarker],
) -> list[EntryMarker]:
    return [marker for marker in markers if entries.get(marker.key)]


def compute_total(
    entries: Mapping[str, bool],
    values: Mapping[str, Decimal | float | int],
    markers: Iterable[EntryMarker],
) -> Decimal:
    """Sum the values of every enabled marker known to the registry."""

    amounts = [utils.to_amount(values.get(marker.key)) for marker in _enabled_markers(entries, markers)]
    total = Decimal("0.00")
    with localcontext() as ctx:
        # sums stay exact past the default 28 digits
        ctx.prec = max([ctx.prec] + [amount.adjusted() + 6 for amount in amounts])
        for amount in amounts:
            total += amount
    return total


def compute_share(marker_value: Decimal | float | int, total: Decimal | float | int) -> float:
    """Return ``marker_value`` as a percentage of ``total`` (0 when total is 0)."""

    total_amount = utils.to_amount(total)
    if total_amount <= 0:
        return 0.0
    return float(utils.to_amount(marker_value) / total_amount * 100)


def entry_breakdown(
    entries: Mapping[str, bool],
    values: Mapping[str, Decimal | float | int],
    markers: Iterable[EntryMarker],
) -> list[ShareEntry]:
    """Per-marker amounts and shares for the enabled markers, in registry order."""

    markers = list(markers)
    total = compute_total(entries, values, markers)
    breakdown: list[ShareEntry] = []
    for marker in _enabled_markers(entries, markers):
        amount = utils.to_amount(values.get(marker.key))
        breakdown.append(
            {
                "key": marker.key,
                "label": marker.label,
                "amount": amount,
                "share": compute_share(amount, total),
            }
        )
    return breakdown
