"""Tests for history.py — snapshots and the bounded ledger."""
from __future__ import annotations

from datetime import date, timedelta

import pytest

from custom_components.habit_loop.dates import key_of
from custom_components.habit_loop.history import (
    completion_percent,
    is_perfect_day,
    prune,
    summarize,
    upsert,
)
from custom_components.habit_loop.models import DaySummary, Habit


def _ledger(days: int, start: date = date(2024, 1, 1)) -> dict[str, DaySummary]:
    return {
        key_of(start + timedelta(days=offset)): DaySummary(total=1, done=1)
        for offset in range(days)
    }


class TestSummarize:
    def test_counts_and_ids(self):
        habits = [
            Habit(id=1, name="A", done=True),
            Habit(id=2, name="B", done=False),
            Habit(id=5, name="C", done=True),
        ]
        assert summarize(habits) == DaySummary(total=3, done=2, done_ids=(1, 5))

    def test_empty(self):
        assert summarize([]) == DaySummary(total=0, done=0, done_ids=())

    def test_keeps_list_order(self):
        habits = [Habit(id=9, name="Z", done=True), Habit(id=3, name="A", done=True)]
        assert summarize(habits).done_ids == (9, 3)


class TestUpsert:
    def test_inserts(self):
        result = upsert({}, "2024/01/01", DaySummary(total=1, done=0))
        assert result == {"2024/01/01": DaySummary(total=1, done=0)}

    def test_replaces(self):
        ledger = {"2024/01/01": DaySummary(total=1, done=0)}
        result = upsert(ledger, "2024/01/01", DaySummary(total=1, done=1))
        assert result["2024/01/01"].done == 1

    def test_does_not_mutate_input(self):
        ledger = {"2024/01/01": DaySummary(total=1, done=0)}
        upsert(ledger, "2024/01/02", DaySummary(total=1, done=1))
        assert list(ledger) == ["2024/01/01"]


class TestPrune:
    def test_keeps_90_most_recent(self):
        ledger = _ledger(120)
        result = prune(ledger, 90)
        assert len(result) == 90
        assert set(result) == set(sorted(ledger)[-90:])

    def test_default_bound_is_90(self):
        assert len(prune(_ledger(100))) == 90

    def test_idempotent(self):
        once = prune(_ledger(120), 90)
        assert prune(once, 90) == once

    def test_small_ledger_untouched(self):
        ledger = _ledger(5)
        assert prune(ledger, 90) == ledger

    def test_unordered_input(self):
        ledger = {
            "2024/03/01": DaySummary(total=1, done=1),
            "2023/12/31": DaySummary(total=1, done=1),
            "2024/01/15": DaySummary(total=1, done=1),
        }
        assert set(prune(ledger, 2)) == {"2024/03/01", "2024/01/15"}


class TestPerfectDay:
    def test_all_done(self):
        assert is_perfect_day(DaySummary(total=2, done=2)) is True

    def test_partial(self):
        assert is_perfect_day(DaySummary(total=2, done=1)) is False

    def test_empty_day_never_perfect(self):
        assert is_perfect_day(DaySummary(total=0, done=0)) is False

    def test_missing(self):
        assert is_perfect_day(None) is False

    def test_done_above_total(self):
        assert is_perfect_day(DaySummary(total=2, done=3)) is True


class TestCompletionPercent:
    @pytest.mark.parametrize(
        ("done", "total", "expected"),
        [
            (0, 0, 0),
            (3, 4, 75),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),
            (4, 4, 100),
        ],
    )
    def test_rounding(self, done, total, expected):
        assert completion_percent(done, total) == expected
