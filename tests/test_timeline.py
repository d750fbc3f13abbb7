from datetime import date, datetime

import pytest

from pjtboard.domain import ScheduleItem
from pjtboard.timeline import (
    DEFAULT_MONTHS,
    add_months,
    build_timeline,
    default_timeline,
    layout_bars,
    month_headers,
    parse_date,
    position,
    today_position,
    width,
)


def _item(start, end, name="task"):
    return ScheduleItem(id=name, name=name, start_date=start, end_date=end)


@pytest.fixture
def q1_timeline():
    return build_timeline([_item("2024-01-15", "2024-03-20")])


# ── month arithmetic ─────────────────────────────────────────────────────


@pytest.mark.parametrize("year, month, delta, expected", [
    (2024, 3, 0, (2024, 3)),
    (2024, 1, -2, (2023, 11)),
    (2024, 1, -13, (2022, 12)),
    (2024, 11, 2, (2025, 1)),
    (2024, 12, 1, (2025, 1)),
    (2024, 6, -6, (2023, 12)),
    (2024, 7, -6, (2024, 1)),
])
def test_add_months(year, month, delta, expected):
    assert add_months(year, month, delta) == expected


@pytest.mark.parametrize("value, expected", [
    ("2024-01-15", date(2024, 1, 15)),
    ("2024.01.15", date(2024, 1, 15)),
    ("2024/01/15", date(2024, 1, 15)),
    ("2024-01-15T09:30:00", date(2024, 1, 15)),
    (date(2024, 1, 15), date(2024, 1, 15)),
    (datetime(2024, 1, 15, 10), date(2024, 1, 15)),
    ("", None),
    (None, None),
    ("next tuesday", None),
    ("2024-02-30", None),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


# ── default window ───────────────────────────────────────────────────────


def test_empty_items_give_thirteen_months_around_today():
    tl = build_timeline([], today=date(2026, 10, 19))
    assert tl.is_default
    assert tl.start_date == date(2026, 4, 1)
    assert tl.end_date == date(2027, 4, 30)
    assert tl.month_count == DEFAULT_MONTHS == 13
    assert tl.total_days == 13 * 30
    assert tl.year_groups == {2026: [4, 5, 6, 7, 8, 9, 10, 11, 12], 2027: [1, 2, 3, 4]}


def test_default_window_crosses_year_boundary_backwards():
    tl = default_timeline(today=date(2024, 2, 10))
    assert tl.start_date == date(2023, 8, 1)
    assert tl.year_groups == {2023: [8, 9, 10, 11, 12], 2024: [1, 2, 3, 4, 5, 6, 7, 8]}


def test_items_without_parseable_dates_fall_back_to_default():
    items = [_item("", ""), _item("soon", "later")]
    tl = build_timeline(items, today=date(2024, 7, 1))
    assert tl.is_default
    assert tl.start_date == date(2024, 1, 1)


def test_build_timeline_without_today_uses_current_month():
    tl = build_timeline(None)
    today = date.today()
    y, m = add_months(today.year, today.month, -6)
    assert tl.start_date == date(y, m, 1)


# ── data window ──────────────────────────────────────────────────────────


def test_window_has_two_month_margin(q1_timeline):
    tl = q1_timeline
    assert not tl.is_default
    assert tl.start_date == date(2023, 11, 1)
    assert tl.end_date == date(2024, 5, 31)
    assert tl.year_groups == {2023: [11, 12], 2024: [1, 2, 3, 4, 5]}
    assert tl.total_days == 213
    assert tl.window_days == 213


def test_window_spans_all_items_and_accepts_dicts():
    items = [
        {"startDate": "2024-05-10", "endDate": "2024-06-01"},
        {"startDate": "2023-12-01", "endDate": ""},
        {"start_date": "", "end_date": "2025-01-20"},
    ]
    tl = build_timeline(items)
    assert tl.start_date == date(2023, 10, 1)
    assert tl.end_date == date(2025, 3, 31)
    assert tl.year_groups[2024] == list(range(1, 13))
    assert tl.year_groups[2023] == [10, 11, 12]
    assert tl.year_groups[2025] == [1, 2, 3]
    assert month_headers(tl)[0] == (2023, 10)
    assert month_headers(tl)[-1] == (2025, 3)


# ── position / width ─────────────────────────────────────────────────────


def test_position_maps_days_to_percent(q1_timeline):
    assert position("2023-11-01", q1_timeline) == 0
    assert position("2024-01-15", q1_timeline) == pytest.approx(75 / 213 * 100)


def test_position_is_clamped(q1_timeline):
    assert position("2020-01-01", q1_timeline) == 0
    assert position("2024-06-01", q1_timeline) == 99
    assert position("2030-01-01", q1_timeline) == 99


def test_position_is_monotonic(q1_timeline):
    dates = ["2023-01-01", "2023-11-01", "2023-12-24", "2024-02-29", "2024-05-30", "2024-05-31", "2025-01-01"]
    positions = [position(d, q1_timeline) for d in dates]
    assert positions == sorted(positions)
    assert all(0 <= p <= 99 for p in positions)


def test_position_of_missing_date_is_zero(q1_timeline):
    assert position(None, q1_timeline) == 0
    assert position("garbage", q1_timeline) == 0


def test_width_is_proportional(q1_timeline):
    assert width("2024-01-15", "2024-03-20", q1_timeline) == pytest.approx(65 / 213 * 100)


def test_width_floor_for_same_day_and_inverted(q1_timeline):
    assert width("2024-02-01", "2024-02-01", q1_timeline) == 1
    assert width("2024-03-01", "2024-02-01", q1_timeline) == 1


def test_width_ceiling(q1_timeline):
    assert width("2023-11-01", "2024-06-01", q1_timeline) == 100
    assert width("2000-01-01", "2099-01-01", q1_timeline) == 100


def test_width_without_complete_range_is_zero(q1_timeline):
    assert width("", "2024-02-01", q1_timeline) == 0
    assert width("2024-02-01", None, q1_timeline) == 0


def test_today_position(q1_timeline):
    assert today_position(q1_timeline, today=date(2024, 1, 15)) == pytest.approx(75 / 213 * 100)
    assert today_position(q1_timeline, today=date(2030, 1, 1)) == 99


def test_default_window_today_marker_is_near_middle():
    today = date(2026, 10, 19)
    tl = build_timeline([], today=today)
    assert 45 < today_position(tl, today=today) < 55


# ── bars ─────────────────────────────────────────────────────────────────


def test_layout_bars_skip_items_without_range():
    items = [_item("2024-01-15", "2024-03-20", "design"), _item("2024-02-01", "", "open")]
    tl = build_timeline(items)
    bars = layout_bars(items, tl)
    assert [b["id"] for b in bars] == ["design", "open"]
    assert bars[0]["left"] == pytest.approx(position("2024-01-15", tl))
    assert bars[0]["width"] == pytest.approx(width("2024-01-15", "2024-03-20", tl))
    assert bars[1]["left"] is None
    assert bars[1]["width"] is None


def test_timeline_to_dict():
    d = build_timeline([_item("2024-01-15", "2024-03-20")]).to_dict()
    assert d["startDate"] == "2023-11-01"
    assert d["endDate"] == "2024-05-31"
    assert d["yearGroups"] == {"2023": [11, 12], "2024": [1, 2, 3, 4, 5]}
    assert d["monthCount"] == 7
    assert d["windowDays"] == 213
    assert d["totalDays"] == 213


def test_default_window_reports_both_day_counts():
    d = default_timeline(today=date(2026, 10, 19)).to_dict()
    assert d["totalDays"] == 13 * 30
    # 2026-04-01 .. 2027-04-30
    assert d["windowDays"] == 395
