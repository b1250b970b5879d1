import math
from datetime import datetime, timezone

from extractor import RecordExtractor
from models import HealthRecord, Statistics
from query import filter_records
from stats import compute_statistics

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record(value, unit="bpm"):
    return HealthRecord(record_type="HR", value=value, unit=unit, start_date=START, end_date=START)


def test_empty_input_is_all_zero():
    assert compute_statistics([]) == Statistics(count=0, sum=0, avg=0, min=0, max=0, unit="")


def test_scenario_statistics(scenario_xml):
    records = RecordExtractor().extract(scenario_xml).records
    stats = compute_statistics(filter_records(records, "HR"))

    assert stats == Statistics(count=2, sum=152, avg=76, min=72, max=80, unit="bpm")


def test_count_includes_records_without_value():
    stats = compute_statistics([_record(10), _record(None), _record(20)])

    assert stats.count == 3
    assert stats.sum == 30
    assert stats.avg == 15
    assert stats.min == 10
    assert stats.max == 20


def test_no_values_gives_zeros_but_full_count():
    stats = compute_statistics([_record(None, unit="count"), _record(None)])

    assert stats == Statistics(count=2, sum=0, avg=0, min=0, max=0, unit="count")


def test_unit_comes_from_first_record_even_without_value():
    stats = compute_statistics([_record(None, unit="ms"), _record(5, unit="bpm")])

    assert stats.unit == "ms"


def test_nan_poisons_every_aggregate():
    for values in ([1.0, math.nan, 3.0], [math.nan, 1.0], [1.0, math.nan]):
        stats = compute_statistics([_record(v) for v in values])

        assert stats.count == len(values)
        assert math.isnan(stats.sum)
        assert math.isnan(stats.avg)
        assert math.isnan(stats.min)
        assert math.isnan(stats.max)
