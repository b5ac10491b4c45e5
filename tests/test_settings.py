"""Tests for configuration, preferences, logging and charts."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import plotly.graph_objects as go
import pytest
from mvpfin import insights, settings, viz
from mvpfin.logging_config import setup_logging
from mvpfin.models import EntryMarker


def test_load_config_reads_environment() -> None:
    config = settings.load_config({"MVPFIN_DB_PATH": "/tmp/x.db", "LOG_LEVEL": "debug"})
    assert config.db_path == Path("/tmp/x.db")
    assert config.preferences_path == Path("data/preferences.json")
    assert config.log_level == "DEBUG"


def test_theme_defaults_to_light_and_persists(tmp_path) -> None:
    prefs = settings.Preferences(tmp_path / "nested" / "prefs.json")
    assert prefs.theme == "light"

    prefs.theme = "dark"
    assert settings.Preferences(tmp_path / "nested" / "prefs.json").theme == "dark"

    with pytest.raises(ValueError):
        prefs.theme = "blue"  # type: ignore[assignment]


def test_corrupt_preferences_are_ignored(tmp_path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    prefs = settings.Preferences(path)
    assert prefs.theme == "light"

    path.write_text('{"theme": "sepia"}', encoding="utf-8")
    assert prefs.theme == "light"


def test_unwritable_preferences_do_not_raise(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    prefs = settings.Preferences(blocker / "prefs.json")
    prefs.theme = "dark"
    assert prefs.theme == "light"


def test_toggle_theme() -> None:
    assert settings.toggle_theme("light") == "dark"
    assert settings.toggle_theme("dark") == "light"


def test_setup_logging_is_idempotent(tmp_path) -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging("mvpfin-test", tmp_path)
        added = len(root.handlers) - len(before)
        setup_logging("mvpfin-test", tmp_path)
        assert len(root.handlers) - len(before) == added == 3
        assert (tmp_path / "mvpfin-test.log").exists()
        assert (tmp_path / "mvpfin-test-error.log").exists()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()


def test_plot_entry_shares_returns_fig() -> None:
    markers_ = [EntryMarker(key="pix", label="Pix", order=1), EntryMarker(key="oferta", label="Oferta", order=2)]
    breakdown = insights.entry_breakdown(
        {"pix": True, "oferta": True},
        {"pix": Decimal("30"), "oferta": Decimal("70")},
        markers_,
    )
    figure = viz.plot_entry_shares(breakdown)
    assert isinstance(figure, go.Figure)
    assert figure.data, "Chart should plot at least one trace"

    empty = viz.plot_entry_shares([])
    assert isinstance(empty, go.Figure)
    assert not empty.data


@pytest.mark.parametrize(
    ("requested", "default", "expected"),
    [
        ("dark", "light", "dark"),
        ("light", "dark", "light"),
        (None, "dark", "dark"),
        ("sepia", "dark", "dark"),
        ("", "light", "light"),
    ],
)
def test_resolve_theme_prefers_url_value(requested: str | None, default: str, expected: str) -> None:
    assert settings.resolve_theme(requested, default) == expected  # type: ignore[arg-type]


def test_breakdown_rows_escape_labels() -> None:
    rows = viz.breakdown_rows_html(
        [
            {"key": "x", "label": '<img src=x onerror="alert(1)">', "amount": Decimal("10"), "share": 100.0},
            {"key": "pix", "label": "Pix & Cia", "amount": Decimal("1234.5"), "share": 0.0},
        ]
    )

    assert "<img" not in rows
    assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in rows
    assert "<span>Pix &amp; Cia</span><strong>R$ 1.234,50</strong>" in rows
    assert viz.breakdown_rows_html([]) == ""
