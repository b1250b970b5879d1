"""
Record selection by type and inclusive start-date range, text search and
listing order, plus the preset date ranges offered to callers
(day / week / month / year).
"""

import calendar
import math
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Sequence, Tuple, Union

from models import Granularity, HealthRecord, RecordSort
from timeutil import localize, to_local


def filter_records(
    records: Sequence[HealthRecord],
    record_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[HealthRecord]:
    """Return the records matching `record_type` whose `start_date` lies in [start, end].

    Type matching is exact. A missing bound means no restriction on that
    side. Naive bounds are read as local time. The input order is kept and
    the input sequence is never modified.
    """

    if start is not None:
        start = localize(start, tz)
    if end is not None:
        end = localize(end, tz)

    return [
        r for r in records
        if (not record_type or r.record_type == record_type)
        and (start is None or r.start_date >= start)
        and (end is None or r.start_date <= end)
    ]


def _value_text(value: Optional[float]) -> str:
    if value is None:
        return "null"
    if math.isnan(value):
        return "NaN"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def search_records(records: Sequence[HealthRecord], term: Optional[str]) -> list[HealthRecord]:
    """Keep records whose "value unit source" text contains `term`, ignoring case."""

    if not term:
        return list(records)
    term = term.lower()
    return [
        r for r in records
        if term in f"{_value_text(r.value)} {r.unit} {r.source_name}".lower()
    ]


def _sort_value(record: HealthRecord) -> float:
    # missing and NaN values sort as 0
    if record.value is None or math.isnan(record.value):
        return 0.0
    return record.value


def sort_records(
    records: Sequence[HealthRecord],
    order: Union[RecordSort, str] = RecordSort.DATE_DESC,
) -> list[HealthRecord]:
    """Stable sort by start date or by value, in either direction."""

    order = RecordSort(order)
    if order is RecordSort.DATE_DESC:
        return sorted(records, key=lambda r: r.start_date, reverse=True)
    if order is RecordSort.DATE_ASC:
        return sorted(records, key=lambda r: r.start_date)
    if order is RecordSort.VALUE_DESC:
        return sorted(records, key=_sort_value, reverse=True)
    return sorted(records, key=_sort_value)


def _months_back(d: date, months: int) -> date:
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def period_range(
    period: Union[Granularity, str],
    anchor: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[datetime, datetime]:
    """Preset range ending on `anchor` (default: today, local time).

    The end is the last instant of the anchor day. The start is local
    midnight of the anchor day (day), 7 days before (week), one calendar
    month before (month) or one year before (year).
    """

    period = Granularity(period)
    if anchor is None:
        anchor = to_local(datetime.now().astimezone(), tz).date()

    if period is Granularity.DAY:
        first = anchor
    elif period is Granularity.WEEK:
        first = anchor - timedelta(days=7)
    elif period is Granularity.MONTH:
        first = _months_back(anchor, 1)
    else:
        first = _months_back(anchor, 12)

    start = localize(datetime.combine(first, time.min), tz)
    end = localize(datetime.combine(anchor, time.max), tz)
    return start, end
