"""Unit tests for statement window resolution."""

from __future__ import annotations

import datetime as dt

import pytest

from chronodesk.statements.window import StatementWindow, resolve_window


class TestResolveWindow:
    """Tests for ``resolve_window``."""

    def test_continues_from_last_dispatched_day(self) -> None:
        """A recorded marker starts the window on that day a month back."""
        window = resolve_window(
            dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=15
        )
        assert window == StatementWindow(
            start=dt.date(2024, 2, 15), end=dt.date(2024, 3, 19)
        )

    def test_first_run_starts_after_dispatch_day(self) -> None:
        """Without a marker the window starts the day after the dispatch day."""
        window = resolve_window(
            dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=None
        )
        assert window == StatementWindow(
            start=dt.date(2024, 2, 21), end=dt.date(2024, 3, 19)
        )

    def test_consecutive_cycles_are_contiguous(self) -> None:
        """Persisting today's day makes the next window continue the last one."""
        first = resolve_window(
            dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=None
        )
        second = resolve_window(
            dt.date(2024, 4, 20), dispatch_day=20, last_dispatched_day=20
        )
        assert second.start == first.end + dt.timedelta(days=1)

    def test_end_is_yesterday_across_year_boundary(self) -> None:
        """The window ends the day before ``today``, even on January 1st."""
        window = resolve_window(
            dt.date(2025, 1, 1), dispatch_day=1, last_dispatched_day=1
        )
        assert window.start == dt.date(2024, 12, 1)
        assert window.end == dt.date(2024, 12, 31)

    def test_clamps_marker_day_to_short_month(self) -> None:
        """A marker of 31 clamps to the last day of February."""
        window = resolve_window(
            dt.date(2024, 3, 31), dispatch_day=31, last_dispatched_day=31
        )
        assert window.start == dt.date(2024, 2, 29)
        assert window.end == dt.date(2024, 3, 30)

    def test_clamps_dispatch_day_on_first_run(self) -> None:
        """First-run starts clamp the dispatch day before adding one day."""
        window = resolve_window(
            dt.date(2023, 3, 30), dispatch_day=30, last_dispatched_day=None
        )
        assert window.start == dt.date(2023, 3, 1)
        assert window.end == dt.date(2023, 3, 29)

    def test_rejects_inverted_window(self) -> None:
        """A start after the end is rejected."""
        with pytest.raises(ValueError, match="window start"):
            resolve_window(
                dt.date(2024, 3, 1), dispatch_day=31, last_dispatched_day=None
            )

    def test_rejects_out_of_range_marker(self) -> None:
        """Days outside 1..31 are rejected."""
        with pytest.raises(ValueError, match="day-of-month"):
            resolve_window(
                dt.date(2024, 3, 20), dispatch_day=20, last_dispatched_day=32
            )


class TestStatementWindow:
    """Tests for the ``StatementWindow`` value."""

    def test_days_counts_both_ends(self) -> None:
        """A window from the 1st to the 3rd covers three days."""
        window = StatementWindow(start=dt.date(2024, 5, 1), end=dt.date(2024, 5, 3))
        assert window.days == 3

    def test_single_day_window_is_valid(self) -> None:
        """Start and end may coincide."""
        window = StatementWindow(start=dt.date(2024, 5, 1), end=dt.date(2024, 5, 1))
        assert window.days == 1
