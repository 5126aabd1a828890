from __future__ import annotations

import datetime as dt

import pytest

from git_effort.analysis_days import day_bounds, parse_when

TODAY = dt.date(2025, 3, 10)


def test_parse_when_day_count() -> None:
    assert parse_when("1", today=TODAY) == [TODAY]
    assert parse_when("3", today=TODAY) == [dt.date(2025, 3, 10), dt.date(2025, 3, 9), dt.date(2025, 3, 8)]
    assert parse_when(2, today=TODAY) == [dt.date(2025, 3, 10), dt.date(2025, 3, 9)]


def test_parse_when_dates() -> None:
    assert parse_when("2025-01-31", today=TODAY) == [dt.date(2025, 1, 31)]
    assert parse_when("today", today=TODAY) == [TODAY]
    assert parse_when("Yesterday", today=TODAY) == [dt.date(2025, 3, 9)]
    assert parse_when("", today=TODAY) == [TODAY]


@pytest.mark.parametrize("when", ["0", "-1", "abc", "2025-13-01", "3 days"])
def test_parse_when_invalid(when: str) -> None:
    with pytest.raises(ValueError):
        parse_when(when, today=TODAY)


def test_day_bounds() -> None:
    assert day_bounds(dt.date(2025, 3, 10)) == ("2025-03-10 00:00", "2025-03-10 23:59")
