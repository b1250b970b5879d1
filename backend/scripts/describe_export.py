from collections import Counter
import os
import sys

from catalog import display_name
from errors import HealthDataError
from loader import load_export_file
from service_session import HealthSession

EXPORT = sys.argv[1] if len(sys.argv) > 1 else "export.xml"


def print_progress(pct: float, message: str) -> None:
    print(f"  [{pct:5.1f}%] {message}")


def main(export_path: str) -> int:
    print('File:', export_path)
    print('Size (MB):', round(os.path.getsize(export_path) / (1024 * 1024), 2))

    session = HealthSession()
    try:
        text = load_export_file(export_path)
        result = session.load(text, on_progress=print_progress)
    except HealthDataError as e:
        print(f'\nError: {e}')
        return 1

    records = session.records
    type_counts = Counter(r.record_type for r in records)
    source_counts = Counter(r.source_name for r in records)

    print('\nTotals:')
    print('  Records kept:', session.record_count)
    print('  Elements dropped:', result.dropped)
    print('  Unique record types:', len(session.catalog))

    if not session.loaded:
        print('\nNo records found.')
        return 0

    # records are newest-first
    print('\nDate range (startDate):')
    print('  earliest:', records[-1].start_date.isoformat())
    print('  latest:  ', records[0].start_date.isoformat())

    print('\nTop 10 sources:')
    for s, c in source_counts.most_common(10):
        print(f'  {c:8d}  {s}')

    print('\nPer-type statistics:')
    for t in session.types():
        stats = session.statistics(t)
        print(f'  {type_counts[t]:8d}  {display_name(t):<40s} '
              f'avg={stats.avg:.2f} min={stats.min:.2f} max={stats.max:.2f} {stats.unit}')
    return 0


if __name__ == "__main__":
    sys.exit(main(EXPORT))
