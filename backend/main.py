import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response
from pydantic import TypeAdapter

from errors import EmptyResultError, ExtractionCancelled, InvalidExportError, ParseError
from loader import read_export_bytes
from models import AggregateBucket, Granularity, HealthRecord, RecordSort
from service_session import HealthSession
from settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Health Export Explorer")

# One session per process; routes stay thin and tests can swap it out.
session = HealthSession()

_records_json = TypeAdapter(List[HealthRecord])
_buckets_json = TypeAdapter(List[AggregateBucket])


def _json(payload) -> Response:
    # pydantic writes NaN as null; the stdlib encoder would reject it
    return Response(content=payload, media_type="application/json")


def _require_loaded() -> None:
    if not session.loaded:
        raise HTTPException(status_code=409, detail="No export loaded; POST one to /load first")


@app.get("/health")
def health():
    return {"ok": True, "loaded": session.loaded, "records": session.record_count}


@app.post("/load")
async def load(request: Request, filename: str = Query("export.xml")):
    max_bytes = settings.max_upload_mb * 1024 * 1024
    too_large = HTTPException(status_code=413, detail=f"Upload larger than {settings.max_upload_mb} MB")

    # refuse before buffering when the client declares the size
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise too_large

    data = await request.body()
    if len(data) > max_bytes:
        raise too_large

    try:
        text = read_export_bytes(data, filename)
        result = await session.load_async(text)
    except (InvalidExportError, ParseError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmptyResultError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ExtractionCancelled as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"records": len(result.records), "types": len(result.types), "dropped": result.dropped}


@app.get("/types")
def types():
    _require_loaded()
    return session.catalog.entries()


@app.get("/records")
def records(
    type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    q: Optional[str] = None,
    sort: RecordSort = RecordSort.DATE_DESC,
    offset: int = Query(0, ge=0),
    limit: int = 200,
):
    _require_loaded()
    page = session.recent(type, start, end, limit=limit, offset=offset, sort=sort, search=q)
    return _json(_records_json.dump_json(page))


@app.get("/statistics")
def statistics(
    type: str = Query(...),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    _require_loaded()
    return _json(session.statistics(type, start, end).model_dump_json())


@app.get("/aggregate")
def aggregate(
    type: str = Query(...),
    period: Granularity = Granularity.DAY,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    _require_loaded()
    return _json(_buckets_json.dump_json(session.aggregate(type, period, start, end)))


@app.get("/range")
def date_range(period: Granularity = Granularity.WEEK, anchor: Optional[date] = None):
    start, end = session.period_range(period, anchor)
    return {"period": period.value, "start": start.isoformat(), "end": end.isoformat()}
