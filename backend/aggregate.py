"""
Calendar bucketing of records.

Bucket keys:
- day:   `YYYY-MM-DD` of the start instant in UTC
- week:  `YYYY-MM-DD` of the Sunday on or before the local calendar date
- month: `YYYY-MM` local calendar
- year:  `YYYY` local calendar

Day keys use UTC while the others use local time, so a record close to
midnight can land on different calendar days depending on granularity.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Optional, Sequence, Union

from models import AggregateBucket, Granularity, HealthRecord
from settings import settings
from timeutil import to_local


def bucket_key(moment: datetime, granularity: Union[Granularity, str], tz: Optional[tzinfo] = None) -> str:
    """Bucket key of one aware timestamp."""

    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return moment.astimezone(timezone.utc).date().isoformat()

    local = to_local(moment, tz)
    if granularity is Granularity.WEEK:
        # isoweekday: Monday=1 .. Sunday=7
        sunday = local.date() - timedelta(days=local.isoweekday() % 7)
        return sunday.isoformat()
    if granularity is Granularity.MONTH:
        return f"{local.year:04d}-{local.month:02d}"
    return f"{local.year:04d}"


def aggregate_by_period(
    records: Sequence[HealthRecord],
    granularity: Union[Granularity, str] = Granularity.DAY,
    tz: Optional[tzinfo] = None,
) -> list[AggregateBucket]:
    """Group `records` into calendar buckets, sorted ascending by key.

    A bucket exists as soon as any record maps to it. Only records with a
    value add to `count` and `sum`; `average` is 0 for buckets without one.
    """

    granularity = Granularity(granularity)
    if tz is None:
        tz = settings.local_tz()

    totals: Dict[str, list] = {}
    for record in records:
        key = bucket_key(record.start_date, granularity, tz)
        bucket = totals.setdefault(key, [0, 0.0])
        if record.value is not None:
            bucket[0] += 1
            bucket[1] += record.value

    return [
        AggregateBucket(
            bucket_key=key,
            count=count,
            sum=total,
            average=total / count if count > 0 else 0.0,
        )
        for key, (count, total) in sorted(totals.items())
    ]
