from datetime import timedelta, timezone
from xml.sax.saxutils import quoteattr

import pytest

from settings import settings

EST = timezone(timedelta(hours=-5))

HR = "HKQuantityTypeIdentifierHeartRate"
STEPS = "HKQuantityTypeIdentifierStepCount"


def _element(tag: str, attrs: dict) -> str:
    rendered = " ".join(f"{k}={quoteattr(str(v))}" for k, v in attrs.items() if v is not None)
    return f"<{tag} {rendered}/>"


def make_export(records=(), workouts=()) -> str:
    """Build a minimal Apple Health export document."""
    body = "\n".join(
        [_element("Record", r) for r in records] + [_element("Workout", w) for w in workouts]
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<HealthData locale="en_US">\n'
        '<ExportDate value="2024-02-01 09:00:00 -0500"/>\n'
        f"{body}\n"
        "</HealthData>\n"
    )


@pytest.fixture
def scenario_xml() -> str:
    return make_export(
        records=[
            {"type": "HR", "value": "72", "unit": "bpm", "startDate": "2024-01-01"},
            {"type": "HR", "value": "80", "unit": "bpm", "startDate": "2024-01-02"},
        ],
        workouts=[
            {"workoutActivityType": "Running", "duration": "30", "startDate": "2024-01-01"},
        ],
    )


@pytest.fixture
def keep_empty_exports(monkeypatch):
    monkeypatch.setattr(settings, "reject_empty_export", False)
