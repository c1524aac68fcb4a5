"""Tests for the focus-time chart."""

import datetime

from matplotlib.figure import Figure

from BackEnd.core.models import TimerMode
from BackEnd.repos.statistics_repo import StatisticsLedger
from BackEnd.services.chart_service import build_focus_chart, period_days, period_label, save_focus_chart


class TestPeriods:

    def test_week_starts_on_monday(self):
        days, labels, xlabel = period_days("week", 0, datetime.date(2026, 3, 11))
        assert days[0] == datetime.date(2026, 3, 9)
        assert days[-1] == datetime.date(2026, 3, 15)
        assert labels[0] == "Mon"
        assert xlabel == "Day of Week"

    def test_week_offset(self):
        days, _, _ = period_days("week", 2, datetime.date(2026, 3, 11))
        assert days[0] == datetime.date(2026, 2, 23)

    def test_month_offset_wraps_the_year(self):
        days, labels, xlabel = period_days("month", 3, datetime.date(2026, 2, 15))
        assert days[0] == datetime.date(2025, 11, 1)
        assert len(days) == 30
        assert labels[-1] == "30"
        assert xlabel == "Day of Month"

    def test_period_label(self):
        first = datetime.date(2026, 1, 1)
        assert period_label("week", 0, first) == "This Week"
        assert period_label("month", 1, first) == "Last Month"
        assert period_label("month", 2, first) == "January 2026"


class TestChart:

    def test_one_bar_per_day(self, store):
        ledger = StatisticsLedger(store)
        ledger.record(TimerMode.FOCUS, 90, today="2026-03-10")
        figure = build_focus_chart(ledger, "week", 0, datetime.date(2026, 3, 11))
        assert isinstance(figure, Figure)
        ax = figure.axes[0]
        heights = [bar.get_height() for bar in ax.patches]
        assert len(heights) == 7
        assert heights[1] == 1.5
        assert [t.get_text() for t in ax.texts] == ["1.5h"]

    def test_save_png(self, store, tmp_path):
        ledger = StatisticsLedger(store)
        path = tmp_path / "focus.png"
        save_focus_chart(ledger, path, "month", 0, datetime.date(2026, 3, 11))
        assert path.exists()
        assert path.stat().st_size > 0
