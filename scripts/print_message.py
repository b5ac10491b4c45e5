"""Utility script to print the share message for a sample report."""

from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal

from mvpfin import insights, markers, report, summarize, utils
from mvpfin.models import ReportState


def build_sample_report(day: date) -> tuple[ReportState, markers.MarkerRegistry]:
    registry = markers.MarkerRegistry.loaded(markers.default_markers())
    draft = report.ensure_entries(report.new_report(day, responsible="Ana"), registry)
    draft = report.toggle_entry(draft, registry, "pix")
    draft = report.update_value(draft, registry, "pix", Decimal("150.00"))
    draft = report.toggle_entry(draft, registry, "oferta")
    draft = report.update_value(draft, registry, "oferta", report.parse_currency_input("87,35"))
    return draft, registry


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--date", type=date.fromisoformat, default=date.today(), help="Service date (YYYY-MM-DD)")
    args = parser.parse_args()

    draft, registry = build_sample_report(args.date)
    print(summarize.render_message(draft, registry))
    print()
    for entry in insights.entry_breakdown(draft.entries, draft.values, registry):
        print(f"{entry['label']:<10} {utils.format_currency(entry['amount']):>14} {entry['share']:6.1f}%")


if __name__ == "__main__":
    main()
