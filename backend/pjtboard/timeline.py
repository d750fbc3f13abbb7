"""
Gantt timeline layout.

A timeline is a contiguous run of whole months. Dates inside (or near) the
window are mapped to horizontal percentages of a fixed-width track:

    tl = build_timeline(project.schedule_items)
    left = position("2024-02-01", tl)              # 0..99
    span = width("2024-02-01", "2024-03-15", tl)   # 1..100

Every function here is pure and tolerant of missing or malformed dates.
"""

from dataclasses import dataclass
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

PAST_MONTHS = 6
FUTURE_MONTHS = 6
DEFAULT_MONTHS = PAST_MONTHS + FUTURE_MONTHS + 1
DEFAULT_DAYS_PER_MONTH = 30
MARGIN_MONTHS = 2

POSITION_CEIL = 99.0
WIDTH_FLOOR = 1.0
WIDTH_CEIL = 100.0

DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d")


@dataclass
class Timeline:
    """
    Month-snapped chart window. total_days is informational (the default
    window reports 13 x 30); bars are laid out against window_days, the real
    calendar length of the span.
    """

    year_groups: dict[int, list[int]]
    start_date: date
    end_date: date
    total_days: int
    is_default: bool = False

    @property
    def month_count(self) -> int:
        return sum(len(months) for months in self.year_groups.values())

    @property
    def window_days(self) -> int:
        """Calendar length of the whole month span, the denominator for position math."""
        return (self.start_date + relativedelta(months=self.month_count) - self.start_date).days

    def to_dict(self) -> dict:
        return {
            "yearGroups": {str(y): list(m) for y, m in self.year_groups.items()},
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalDays": self.total_days,
            "windowDays": self.window_days,
            "monthCount": self.month_count,
            "isDefault": self.is_default,
        }


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """(year, month) shifted by `delta` months; month is 1-based, delta may be negative."""
    y, m = divmod(year * 12 + (month - 1) + delta, 12)
    return y, m + 1


def parse_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    # tolerate full ISO timestamps ("2024-01-15T09:00:00")
    s = s.split("T", 1)[0].split(" ", 1)[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def month_iter(start: date, end: date):
    cur = date(start.year, start.month, 1)
    while cur <= end:
        yield cur.year, cur.month
        cur += relativedelta(months=1)


def _group_by_year(start: date, end: date) -> dict[int, list[int]]:
    groups: dict[int, list[int]] = {}
    for year, month in month_iter(start, end):
        groups.setdefault(year, []).append(month)
    return groups


def _item_field(item, camel: str, snake: str):
    if isinstance(item, dict):
        return item.get(camel, item.get(snake))
    return getattr(item, snake, None)


def item_dates(item) -> tuple[date | None, date | None]:
    return (
        parse_date(_item_field(item, "startDate", "start_date")),
        parse_date(_item_field(item, "endDate", "end_date")),
    )


def _month_bounds(first: tuple[int, int], last: tuple[int, int]) -> tuple[date, date]:
    start = date(first[0], first[1], 1)
    end = date(last[0], last[1], 1) + relativedelta(day=31)
    return start, end


def default_timeline(today: date | None = None) -> Timeline:
    """13 months: six before the current month through six after it."""
    today = today or date.today()
    start, end = _month_bounds(
        add_months(today.year, today.month, -PAST_MONTHS),
        add_months(today.year, today.month, FUTURE_MONTHS),
    )
    return Timeline(
        year_groups=_group_by_year(start, end),
        start_date=start,
        end_date=end,
        total_days=DEFAULT_MONTHS * DEFAULT_DAYS_PER_MONTH,
        is_default=True,
    )


def build_timeline(items, today: date | None = None) -> Timeline:
    """
    Window covering every parseable start/end date across `items`, widened by
    MARGIN_MONTHS on both sides and snapped to whole months. Falls back to the
    13-month default around `today` when there is nothing to scan.
    """
    dates = []
    for item in items or []:
        dates.extend(d for d in item_dates(item) if d is not None)
    if not dates:
        return default_timeline(today)

    min_date, max_date = min(dates), max(dates)
    start, end = _month_bounds(
        add_months(min_date.year, min_date.month, -MARGIN_MONTHS),
        add_months(max_date.year, max_date.month, MARGIN_MONTHS),
    )
    return Timeline(
        year_groups=_group_by_year(start, end),
        start_date=start,
        end_date=end,
        total_days=(end - start).days + 1,
    )


def _percent(days: int, timeline: Timeline) -> float:
    return days / timeline.window_days * 100


def position(value, timeline: Timeline) -> float:
    d = parse_date(value)
    if d is None:
        return 0.0
    pct = _percent((d - timeline.start_date).days, timeline)
    return max(0.0, min(POSITION_CEIL, pct))


def width(start_value, end_value, timeline: Timeline) -> float:
    """Bar width in percent; an inverted range gets the floor. Missing date -> 0 (no bar)."""
    start, end = parse_date(start_value), parse_date(end_value)
    if start is None or end is None:
        return 0.0
    if end < start:
        return WIDTH_FLOOR
    pct = _percent((end - start).days, timeline)
    return max(WIDTH_FLOOR, min(WIDTH_CEIL, pct))


def today_position(timeline: Timeline, today: date | None = None) -> float:
    return position(today or date.today(), timeline)


def month_headers(timeline: Timeline) -> list[tuple[int, int]]:
    return [(year, month) for year, months in timeline.year_groups.items() for month in months]


def layout_bars(items, timeline: Timeline) -> list[dict]:
    """One row per item; `left`/`width` are None when the item has no complete date range."""
    rows = []
    for item in items or []:
        start, end = item_dates(item)
        has_bar = start is not None and end is not None
        rows.append({
            "id": _item_field(item, "id", "id"),
            "name": _item_field(item, "name", "name"),
            "progress": _item_field(item, "progress", "progress") or 0,
            "left": position(start, timeline) if has_bar else None,
            "width": width(start, end, timeline) if has_bar else None,
        })
    return rows
