"""
Session / facade layer.

A `HealthSession` owns the dataset and type catalog produced by the most
recent extraction. Every query goes through it so callers never touch
module-level state, and several sessions can coexist (e.g. in tests).

Key responsibilities:
- run the extractor and swap in its result (no merge with earlier loads)
- apply the empty-export policy (`settings.reject_empty_export`)
- resolve the local timezone once for every calendar-based operation
- cap listing sizes (`settings.max_records_limit`)
"""

import logging
from datetime import date, datetime, tzinfo
from typing import List, Optional, Sequence, Tuple

from aggregate import aggregate_by_period
from catalog import TypeCatalog, display_name
from errors import EmptyResultError
from extractor import CancelFlag, ProgressCallback, RecordExtractor
from models import AggregateBucket, ExtractionResult, Granularity, HealthRecord, RecordSort, Statistics
from query import filter_records, period_range, search_records, sort_records
from settings import settings
from stats import compute_statistics

logger = logging.getLogger(__name__)


class HealthSession:
    """Dataset + catalog for one loaded export.

    Example usage:
        session = HealthSession()
        session.load(xml_text)
        stats = session.statistics("HKQuantityTypeIdentifierHeartRate")
    """

    def __init__(self, extractor: Optional[RecordExtractor] = None, tz: Optional[tzinfo] = None):
        self.tz = tz if tz is not None else settings.local_tz()
        self.extractor = extractor or RecordExtractor(tz=self.tz)
        self._records: Tuple[HealthRecord, ...] = ()
        self._catalog = TypeCatalog()

    @property
    def loaded(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> Sequence[HealthRecord]:
        return self._records

    @property
    def record_count(self) -> int:
        return len(self._records)

    @property
    def catalog(self) -> TypeCatalog:
        return self._catalog

    def reset(self) -> None:
        """Forget the current dataset."""

        self._records = ()
        self._catalog = TypeCatalog()

    def load(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelFlag] = None,
    ) -> ExtractionResult:
        """Extract `text` and replace the current dataset with the result.

        Raises:
        - `ParseError` for malformed XML (the session is left empty)
        - `EmptyResultError` when nothing was kept and the policy rejects it
        """

        self.reset()
        result = self.extractor.extract(text, on_progress, cancel)
        return self._install(result)

    async def load_async(
        self,
        text: str,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelFlag] = None,
    ) -> ExtractionResult:
        """Same as `load`, but yields to the event loop between batches."""

        self.reset()
        result = await self.extractor.extract_async(text, on_progress, cancel)
        return self._install(result)

    def _install(self, result: ExtractionResult) -> ExtractionResult:
        if not result.records and settings.reject_empty_export:
            raise EmptyResultError("No health records found in the export")
        self._records = tuple(result.records)
        self._catalog = TypeCatalog(result.types)
        logger.info("Session loaded %d records across %d types", len(self._records), len(self._catalog))
        return result

    def types(self) -> List[str]:
        return self._catalog.identifiers()

    def display_name(self, record_type: str) -> str:
        return display_name(record_type)

    def filter(
        self,
        record_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[HealthRecord]:
        return filter_records(self._records, record_type, start, end, tz=self.tz)

    def recent(
        self,
        record_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 200,
        offset: int = 0,
        sort: RecordSort = RecordSort.DATE_DESC,
        search: Optional[str] = None,
    ) -> List[HealthRecord]:
        """One page of matching records.

        `limit` is clamped to [1, settings.max_records_limit]; a negative
        `offset` counts as 0. Without `sort` the dataset order (newest
        first) is kept.
        """

        limit = max(1, min(limit, settings.max_records_limit))
        offset = max(0, offset)
        selected = search_records(self.filter(record_type, start, end), search)
        if RecordSort(sort) is not RecordSort.DATE_DESC:
            selected = sort_records(selected, sort)
        return selected[offset:offset + limit]

    def statistics(
        self,
        record_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Statistics:
        return compute_statistics(self.filter(record_type, start, end))

    def aggregate(
        self,
        record_type: Optional[str] = None,
        granularity: Granularity = Granularity.DAY,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[AggregateBucket]:
        return aggregate_by_period(self.filter(record_type, start, end), granularity, tz=self.tz)

    def period_range(self, period: Granularity, anchor: Optional[date] = None) -> Tuple[datetime, datetime]:
        return period_range(period, anchor, tz=self.tz)
