"""Share-message rendering for MVPfin reports.

The message is pasted verbatim into a chat app, so the output is a pure
function of the report and the marker registry: same input, same bytes.
"""

from __future__ import annotations

from collections.abc import Iterable

from . import insights, markers, utils
from .models import EntryMarker, ReportState

CALENDAR_ICON = "📆"
CELEBRATION_ICON = "🙌"
RECEIPT_ICON = "🧾"
PERSON_ICON = "👤"

DEFAULT_SERVICE_NAME = "Culto"


def render_message(report: ReportState, entry_markers: Iterable[EntryMarker]) -> str:
    """Render the WhatsApp-ready summary of ``report``."""

    entry_markers = list(entry_markers)
    day_label = utils.get_day_label(report.day_type, report.other_day_description)

    lines = [
        f"{CALENDAR_ICON} *Relatório Financeiro – {utils.format_date(report.date)} ({day_label})*",
        f"{CELEBRATION_ICON} *{report.service_name or DEFAULT_SERVICE_NAME}*",
        "",
    ]

    for marker in entry_markers:
        if not report.entries.get(marker.key):
            continue
        value = utils.format_currency(utils.to_amount(report.values.get(marker.key)))
        lines.append(f"{markers.message_icon(marker)} *{marker.label}:* {value}")

    total = insights.compute_total(report.entries, report.values, entry_markers)
    lines.append("")
    lines.append(f"{RECEIPT_ICON} *Total Geral: {utils.format_currency(total)}*")

    if report.responsible:
        lines.append("")
        lines.append(f"{PERSON_ICON} *Responsável:* {report.responsible}")

    return "\n".join(lines)
