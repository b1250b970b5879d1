"""
Record extraction from an Apple Health `export.xml` document.

The document is parsed once, then `<Record>` and `<Workout>` elements are
converted to `HealthRecord` values in fixed-size batches. Between batches
the work is suspended so an interactive host can stay responsive:

- `extract()` drives the batches synchronously and ignores the pauses.
- `extract_async()` awaits `asyncio.sleep(0)` at every pause.

Progress is reported through an optional `(percent, message)` callback:
parsing owns 0-30%, record conversion 30-90%, finalization the rest, and the
last call is always exactly 100.
"""

import asyncio
import logging
import math
import re
import xml.etree.ElementTree as ET
from datetime import tzinfo
from typing import Callable, Generator, List, Optional, Protocol, Set

from errors import ExtractionCancelled, ParseError
from models import WORKOUT_PREFIX, ExtractionResult, HealthRecord, WorkoutMetadata
from settings import settings
from timeutil import parse_health_date

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]

PARSE_START_PCT = 10.0
EXTRACT_START_PCT = 30.0
EXTRACT_SPAN_PCT = 60.0
FINALIZE_PCT = 95.0
DONE_PCT = 100.0

DEFAULT_WORKOUT_UNIT = "min"
DEFAULT_WORKOUT_SOURCE = "Workout"
DEFAULT_SOURCE = "Unknown"


# Leading numeric prefix, the way JavaScript's parseFloat reads it
_NUMBER_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class CancelFlag(Protocol):
    def is_set(self) -> bool: ...


def parse_number(text: str) -> float:
    """Read the leading number of `text`, e.g. "72 bpm" -> 72.0; NaN if there is none."""
    match = _NUMBER_PREFIX.match(text.strip())
    if match is None:
        return math.nan
    number = match.group()
    if number.endswith("Infinity"):
        return -math.inf if number.startswith("-") else math.inf
    return float(number)


def parse_value(raw: Optional[str]) -> Optional[float]:
    """Missing or empty text means no value; anything unparseable is NaN."""
    if not raw:
        return None
    return parse_number(raw)


def parse_duration(raw: Optional[str]) -> float:
    """Workout duration; missing or unparseable text counts as zero."""
    if not raw:
        return 0.0
    duration = parse_number(raw)
    return 0.0 if math.isnan(duration) else duration


def record_from_element(elem: ET.Element, tz: Optional[tzinfo] = None) -> Optional[HealthRecord]:
    """Build a point record, or None when `type` or `startDate` is missing."""
    record_type = elem.get("type")
    start = parse_health_date(elem.get("startDate"), tz)
    # A startDate that is present but not a timestamp is dropped too, not
    # just a missing one: the dataset is sorted and bucketed by it.
    if not record_type or start is None:
        return None
    end = parse_health_date(elem.get("endDate"), tz) or start
    return HealthRecord(
        record_type=record_type,
        value=parse_value(elem.get("value")),
        unit=elem.get("unit") or "",
        start_date=start,
        end_date=end,
        source_name=elem.get("sourceName") or DEFAULT_SOURCE,
        source_version=elem.get("sourceVersion") or "",
        device=elem.get("device") or "",
    )


def workout_from_element(elem: ET.Element, tz: Optional[tzinfo] = None) -> Optional[HealthRecord]:
    """Build a `Workout_<activity>` record whose value is the duration."""
    activity = elem.get("workoutActivityType")
    start = parse_health_date(elem.get("startDate"), tz)
    # same rule as point records: an unreadable startDate counts as missing
    if not activity or start is None:
        return None
    end = parse_health_date(elem.get("endDate"), tz) or start
    return HealthRecord(
        record_type=f"{WORKOUT_PREFIX}{activity}",
        value=parse_duration(elem.get("duration")),
        unit=elem.get("durationUnit") or DEFAULT_WORKOUT_UNIT,
        start_date=start,
        end_date=end,
        source_name=elem.get("sourceName") or DEFAULT_WORKOUT_SOURCE,
        metadata=WorkoutMetadata(
            total_distance=elem.get("totalDistance"),
            total_distance_unit=elem.get("totalDistanceUnit"),
            total_energy_burned=elem.get("totalEnergyBurned"),
            total_energy_burned_unit=elem.get("totalEnergyBurnedUnit"),
        ),
    )


class RecordExtractor:
    """Turns export text into a sorted record list plus its type catalog.

    Example usage:
        extractor = RecordExtractor()
        result = extractor.extract(xml_text, on_progress=print)
    """

    def __init__(self, batch_size: Optional[int] = None, tz: Optional[tzinfo] = None):
        self.batch_size = batch_size or settings.batch_size
        self.tz = tz

    def steps(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelFlag] = None,
    ) -> Generator[None, None, ExtractionResult]:
        """Run the extraction, yielding once after every batch.

        The generator's return value is the `ExtractionResult`.

        Raises:
        - `ParseError` if the document is not well-formed XML
        - `ExtractionCancelled` if `cancel.is_set()` at a batch boundary
        """

        last_pct = 0.0

        def report(pct: float, message: str) -> None:
            nonlocal last_pct
            last_pct = max(last_pct, min(pct, DONE_PCT))
            if on_progress is not None:
                on_progress(last_pct, message)

        logger.info("Parsing export document (%.2f MB)", len(text) / (1024 * 1024))
        report(PARSE_START_PCT, "Parsing XML document...")
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            logger.error("Export document is not well-formed: %s", e)
            raise ParseError(f"Could not parse XML document: {e}") from e

        report(EXTRACT_START_PCT, "Extracting records...")

        points = list(root.iter("Record"))
        workouts = list(root.iter("Workout"))
        elements = [(elem, False) for elem in points] + [(elem, True) for elem in workouts]
        total = len(elements)
        logger.info("Found %d Record and %d Workout elements", len(points), len(workouts))

        records: List[HealthRecord] = []
        types: Set[str] = set()
        dropped = 0

        for start in range(0, total, self.batch_size):
            if cancel is not None and cancel.is_set():
                logger.info("Extraction cancelled after %d of %d elements", start, total)
                raise ExtractionCancelled(f"Extraction cancelled after {start} of {total} elements")

            for elem, is_workout in elements[start:start + self.batch_size]:
                if is_workout:
                    record = workout_from_element(elem, self.tz)
                else:
                    record = record_from_element(elem, self.tz)
                if record is None:
                    dropped += 1
                    continue
                records.append(record)
                types.add(record.record_type)

            processed = min(start + self.batch_size, total)
            report(
                EXTRACT_START_PCT + processed / total * EXTRACT_SPAN_PCT,
                f"Processed {processed:,} / {total:,} elements...",
            )
            yield

        report(FINALIZE_PCT, "Finalizing...")
        records.sort(key=lambda r: r.start_date, reverse=True)

        if dropped:
            logger.debug("Dropped %d elements missing a type or start date", dropped)
        logger.info("Extraction complete: %d records, %d types", len(records), len(types))
        report(DONE_PCT, "Done")

        return ExtractionResult(records=records, types=sorted(types), dropped=dropped)

    def extract(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelFlag] = None,
    ) -> ExtractionResult:
        """Synchronous driver: runs every batch back to back."""

        gen = self.steps(text, on_progress, cancel)
        while True:
            try:
                next(gen)
            except StopIteration as stop:
                return stop.value

    async def extract_async(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelFlag] = None,
    ) -> ExtractionResult:
        """Event-loop driver: hands control back to the loop between batches."""

        gen = self.steps(text, on_progress, cancel)
        while True:
            try:
                next(gen)
            except StopIteration as stop:
                return stop.value
            await asyncio.sleep(0)
