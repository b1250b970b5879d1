import runpy
from pathlib import Path

from conftest import make_export

SCRIPT = Path(__file__).resolve().parents[1] / "backend" / "scripts" / "describe_export.py"


def _main():
    return runpy.run_path(str(SCRIPT), run_name="describe_export")["main"]


def test_prints_summary(tmp_path, capsys):
    path = tmp_path / "export.xml"
    path.write_text(make_export(
        records=[
            {"type": "HKQuantityTypeIdentifierHeartRate", "value": "60", "unit": "count/min",
             "startDate": "2024-01-01 08:00:00 +0000", "sourceName": "Watch"},
            {"type": "HKQuantityTypeIdentifierHeartRate", "value": "70", "unit": "count/min",
             "startDate": "2024-01-02 08:00:00 +0000", "sourceName": "Watch"},
        ],
        workouts=[{"workoutActivityType": "HKWorkoutActivityTypeYoga", "duration": "20",
                   "startDate": "2024-01-03 08:00:00 +0000"}],
    ), encoding="utf-8")

    assert _main()(str(path)) == 0
    out = capsys.readouterr().out
    assert "Records kept: 3" in out
    assert "Heart Rate" in out
    assert "Workout: Yoga" in out
    assert "[100.0%] Done" in out


def test_reports_errors(tmp_path, capsys):
    path = tmp_path / "export.xml"
    path.write_text("<HealthData><Record></HealthData>", encoding="utf-8")

    assert _main()(str(path)) == 1
    assert "Error:" in capsys.readouterr().out
