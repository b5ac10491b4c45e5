"""Tests for the marker registry, aggregation, form state and share message."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from mvpfin import insights, markers, report, summarize
from mvpfin.models import DayType, EntryMarker, ReportState

PIX = EntryMarker(key="pix", label="Pix", order=1)
DIZIMO = EntryMarker(key="dizimo", label="Dízimo", order=2)


def _report(**overrides) -> ReportState:
    fields = dict(
        date=date(2024, 3, 10),
        day_type=DayType.SUNDAY,
        service_name="",
        responsible="",
        entries={},
        values={},
    )
    fields.update(overrides)
    return ReportState(**fields)


def test_registry_orders_markers_and_tracks_load_state() -> None:
    pending = markers.MarkerRegistry()
    assert pending.status is markers.LoadState.NOT_LOADED
    assert not pending.is_empty

    empty = markers.MarkerRegistry.loaded([])
    assert empty.is_loaded and empty.is_empty

    registry = markers.MarkerRegistry.from_records(
        [
            {"key": "oferta", "label": "Oferta", "icon": "", "order": 4},
            {"key": "pix", "label": "Pix", "icon": None, "order": 1},
        ]
    )
    assert registry.keys() == ["pix", "oferta"]
    assert registry.get("oferta").icon is None
    assert "pix" in registry and "cartao" not in registry


def test_registry_rejects_duplicate_and_invalid_keys() -> None:
    with pytest.raises(ValueError):
        markers.MarkerRegistry.loaded([PIX, EntryMarker(key="pix", label="Outro Pix", order=5)])
    with pytest.raises(ValueError):
        markers.MarkerRegistry.loaded([EntryMarker(key="Pix Key", label="Pix")])


def test_marker_icon_fallbacks() -> None:
    assert markers.message_icon(PIX) == "💠"
    assert markers.message_icon(DIZIMO) == "•"
    assert markers.message_icon(EntryMarker(key="oferta", label="Oferta", icon="🎁")) == "🎁"
    assert markers.input_icon(DIZIMO) == "💰"


def test_compute_total_only_counts_enabled_registry_markers() -> None:
    entries = {"pix": True, "dizimo": False, "legacy": True}
    values = {"pix": Decimal("150.00"), "dizimo": Decimal("80.00"), "legacy": Decimal("999.00")}

    assert insights.compute_total(entries, values, [PIX, DIZIMO]) == Decimal("150.00")
    assert insights.compute_total(entries, values, []) == 0
    assert insights.compute_total({"pix": False}, values, [PIX, DIZIMO]) == 0
    # missing value counts as zero
    assert insights.compute_total({"pix": True, "dizimo": True}, {"dizimo": 10}, [PIX, DIZIMO]) == Decimal("10.00")


def test_compute_total_is_order_independent() -> None:
    entries = {"pix": True, "dizimo": True}
    values = {"pix": 0.1, "dizimo": 0.2}
    assert insights.compute_total(entries, values, [PIX, DIZIMO]) == insights.compute_total(
        entries, values, [DIZIMO, PIX]
    )
    assert insights.compute_total(entries, values, [PIX, DIZIMO]) == Decimal("0.30")


def test_compute_share() -> None:
    assert insights.compute_share(50, 0) == 0
    assert insights.compute_share(Decimal("150.00"), Decimal("150.00")) == 100
    assert insights.compute_share(25, 100) == pytest.approx(25.0)


def test_entry_breakdown_follows_registry_order() -> None:
    entries = {"pix": True, "dizimo": True}
    values = {"pix": Decimal("75.00"), "dizimo": Decimal("25.00")}
    breakdown = insights.entry_breakdown(entries, values, [DIZIMO, PIX])

    assert [entry["key"] for entry in breakdown] == ["dizimo", "pix"]
    assert breakdown[1]["share"] == pytest.approx(75.0)
    assert sum(entry["share"] for entry in breakdown) == pytest.approx(100.0)


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2024, 3, 10), (DayType.SUNDAY, "")),
        (date(2024, 3, 13), (DayType.WEDNESDAY, "")),
        (date(2024, 3, 15), (DayType.OTHER, "Sexta-feira")),
        (date(2024, 3, 16), (DayType.OTHER, "Sábado")),
        (date(2024, 3, 11), (DayType.OTHER, "Segunda-feira")),
    ],
)
def test_infer_day_type(day: date, expected: tuple[DayType, str]) -> None:
    assert report.infer_day_type(day) == expected
    assert report.infer_day_type(day.isoformat()) == expected


def test_new_report_and_change_date() -> None:
    draft = report.new_report(date(2024, 3, 15), responsible="Ana")
    assert draft.day_type is DayType.OTHER
    assert draft.other_day_description == "Sexta-feira"
    assert draft.responsible == "Ana"

    moved = report.change_date(draft, "2024-03-17")
    assert moved.date == date(2024, 3, 17)
    assert moved.day_type is DayType.SUNDAY
    assert moved.other_day_description == ""
    assert report.change_date(moved, "") is moved


def test_ensure_entries_fills_defaults_without_overwriting() -> None:
    draft = _report(entries={"pix": True}, values={"pix": Decimal("10.00")})
    filled = report.ensure_entries(draft, [PIX, DIZIMO])

    assert filled.entries == {"pix": True, "dizimo": False}
    assert filled.values == {"pix": Decimal("10.00"), "dizimo": Decimal("0.00")}
    assert draft.entries == {"pix": True}


def test_toggle_and_update_validate_keys() -> None:
    registry = markers.MarkerRegistry.loaded([PIX, DIZIMO])
    draft = report.ensure_entries(_report(), registry)

    toggled = report.toggle_entry(draft, registry, "pix")
    assert toggled.entries["pix"] is True
    assert report.toggle_entry(toggled, registry, "pix").entries["pix"] is False

    updated = report.update_value(toggled, registry, "pix", "150")
    assert updated.values["pix"] == Decimal("150.00")

    with pytest.raises(report.UnknownMarkerError):
        report.toggle_entry(draft, registry, "cartao")
    with pytest.raises(KeyError):
        report.update_value(draft, [PIX], "dizimo", 1)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15000", Decimal("150.00")),
        ("1.234,56", Decimal("1234.56")),
        ("R$ 0,5", Decimal("0.05")),
        ("", Decimal("0.00")),
        (None, Decimal("0.00")),
        ("abc", Decimal("0.00")),
    ],
)
def test_parse_currency_input(raw: str | None, expected: Decimal) -> None:
    assert report.parse_currency_input(raw) == expected


def test_render_message_end_to_end() -> None:
    draft = _report(
        entries={"pix": True, "dizimo": False},
        values={"pix": Decimal("150.00"), "dizimo": Decimal("0")},
        responsible="Ana",
    )

    assert insights.compute_total(draft.entries, draft.values, [PIX, DIZIMO]) == Decimal("150.00")

    message = summarize.render_message(draft, [PIX, DIZIMO])
    assert message == "\n".join(
        [
            "📆 *Relatório Financeiro – 10/03/2024 (Domingo)*",
            "🙌 *Culto*",
            "",
            "💠 *Pix:* R$ 150,00",
            "",
            "🧾 *Total Geral: R$ 150,00*",
            "",
            "👤 *Responsável:* Ana",
        ]
    )
    assert "Dízimo" not in message


def test_render_message_omits_responsible_block_and_unknown_markers() -> None:
    oferta = EntryMarker(key="oferta", label="Oferta", icon="🎁", order=3)
    draft = _report(
        date=date(2024, 3, 15),
        day_type=DayType.OTHER,
        other_day_description="Vigília",
        service_name="Culto de Celebração",
        entries={"oferta": True, "pix": True, "ghost": True},
        values={"oferta": Decimal("1234.5"), "pix": Decimal("10"), "ghost": Decimal("50")},
    )

    message = summarize.render_message(draft, [PIX, oferta])
    lines = message.split("\n")

    assert lines[0] == "📆 *Relatório Financeiro – 15/03/2024 (Vigília)*"
    assert lines[1] == "🙌 *Culto de Celebração*"
    assert lines[3:5] == ["💠 *Pix:* R$ 10,00", "🎁 *Oferta:* R$ 1.234,50"]
    assert lines[-1] == "🧾 *Total Geral: R$ 1.244,50*"
    assert "Responsável" not in message
    assert not message.endswith("\n")
    assert summarize.render_message(draft, [PIX, oferta]) == message


def test_render_message_with_nothing_enabled() -> None:
    message = summarize.render_message(_report(day_type=DayType.KINGDOM_SCHOOL), [PIX, DIZIMO])
    assert message.split("\n") == [
        "📆 *Relatório Financeiro – 10/03/2024 (Escola do Reino)*",
        "🙌 *Culto*",
        "",
        "",
        "🧾 *Total Geral: R$ 0,00*",
    ]


def test_large_amounts_are_not_rounded_away() -> None:
    huge = Decimal("9" * 35 + ".99")
    entries = {"pix": True, "dizimo": True}

    assert report.parse_currency_input("9" * 40) == Decimal("9" * 38 + ".99")
    assert insights.compute_total(entries, {"pix": huge, "dizimo": huge}, [PIX, DIZIMO]) == Decimal(
        "1" + "9" * 34 + "8.98"
    )

    draft = _report(entries={"pix": True}, values={"pix": Decimal("1E+27")})
    message = summarize.render_message(draft, [PIX])
    assert "💠 *Pix:* R$ 1" + ".000" * 9 + ",00" in message
    assert message.split("\n")[-1] == "🧾 *Total Geral: R$ 1" + ".000" * 9 + ",00*"
