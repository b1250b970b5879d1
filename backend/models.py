"""
Pydantic models used across the backend.

Only value shapes belong here. Records are produced by the extractor and
consumed (never mutated) by the filter, statistics and bucketing layers.

Guidelines:
- Keep models minimal and stable. `HealthRecord` is frozen: once the
    extractor builds one it is shared by every query result.
- `value` is optional on purpose. A record without a value still counts
    towards `count`, but never towards numeric aggregates. A value that was
    present but not numeric is stored as NaN and is allowed to propagate.
"""

from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


WORKOUT_PREFIX = "Workout_"


class Granularity(str, Enum):
    """Calendar bucket sizes supported by the aggregator."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class RecordSort(str, Enum):
    """Orderings offered for record listings."""

    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    VALUE_DESC = "value-desc"
    VALUE_ASC = "value-asc"


class WorkoutMetadata(BaseModel):
    """Raw workout totals, kept as the strings found in the export."""

    model_config = ConfigDict(frozen=True)

    total_distance: Optional[str] = None
    total_distance_unit: Optional[str] = None
    total_energy_burned: Optional[str] = None
    total_energy_burned_unit: Optional[str] = None


class HealthRecord(BaseModel):
    """One point measurement or one workout session.

    Fields:
    - `record_type`: source type identifier, or `Workout_<activity>` for workouts.
    - `value`: float, NaN for unparseable text, None when not supplied.
    - `start_date` / `end_date`: timezone-aware timestamps.
    - `metadata`: only set for workout-derived records.
    """

    model_config = ConfigDict(frozen=True)

    record_type: str
    value: Optional[float] = None
    unit: str = ""
    start_date: datetime
    end_date: datetime
    source_name: str = "Unknown"
    source_version: str = ""
    device: str = ""
    metadata: Optional[WorkoutMetadata] = None

    @property
    def is_workout(self) -> bool:
        return self.record_type.startswith(WORKOUT_PREFIX)


class Statistics(BaseModel):
    """Descriptive statistics over a record set."""

    count: int = 0
    sum: float = 0.0
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    unit: str = ""


class AggregateBucket(BaseModel):
    """Per-bucket totals. `count` only includes records carrying a value."""

    bucket_key: str
    count: int = 0
    sum: float = 0.0
    average: float = 0.0


class ExtractionResult(BaseModel):
    """Output of one extraction pass.

    `records` is sorted newest-first; `types` is the sorted catalog of
    distinct `record_type` values among kept records.
    """

    records: List[HealthRecord] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)
    dropped: int = 0
