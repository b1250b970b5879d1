"""
Descriptive statistics over a record set.

`count` always covers every record passed in. The numeric fields only use
records that carry a value; NaN values are kept on purpose so a single
unparseable measurement makes the sum, average and extremes NaN too.
"""

import math
from typing import Sequence

from models import HealthRecord, Statistics


def _extreme(values: list[float], pick) -> float:
    # builtin min/max ignore NaN depending on position; make it contagious
    if any(math.isnan(v) for v in values):
        return math.nan
    return pick(values)


def compute_statistics(records: Sequence[HealthRecord]) -> Statistics:
    """Return count/sum/avg/min/max/unit for `records`.

    The unit comes from the first record, whether or not it has a value.
    Summation follows the input order.
    """

    if not records:
        return Statistics()

    unit = records[0].unit or ""
    values = [r.value for r in records if r.value is not None]
    if not values:
        return Statistics(count=len(records), unit=unit)

    total = 0.0
    for v in values:
        total += v

    return Statistics(
        count=len(records),
        sum=total,
        avg=total / len(values),
        min=_extreme(values, min),
        max=_extreme(values, max),
        unit=unit,
    )
