"""
Centralized runtime configuration for the health export engine.

This module uses `python-dotenv` to read a local `.env` file during
development and exposes a Pydantic `Settings` model named `settings`.

Why this exists:
- Keeps configuration in one place so other modules import `settings`.
- Provides typed fields with defaults and simple validation.

Environment variables used:
- `EXTRACT_BATCH_SIZE` - number of XML elements processed per batch.
- `LOCAL_TZ` - IANA zone for "local calendar" fields (empty = host time).
- `REJECT_EMPTY_EXPORT` - whether a session refuses exports with no records.
- `MAX_RECORDS_LIMIT` - maximum `limit` allowed for record listings.
- `MAX_UPLOAD_MB` - size guard for uploads on the HTTP surface.
- `LOG_LEVEL` - logging level applied by `main.py`.

Example `.env`:
LOCAL_TZ=Europe/Paris
EXTRACT_BATCH_SIZE=1000

"""

from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field
import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Typed settings container.

    All downstream code should import `settings` from this module. Use
    these attributes (not os.getenv) so tests can monkeypatch `settings`.
    """

    batch_size: int = Field(default=int(os.getenv("EXTRACT_BATCH_SIZE", "1000")), ge=1)
    local_timezone: str = os.getenv("LOCAL_TZ", "")
    reject_empty_export: bool = _env_flag("REJECT_EMPTY_EXPORT", "true")
    max_records_limit: int = int(os.getenv("MAX_RECORDS_LIMIT", "1000"))
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "2048"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def local_tz(self) -> Optional[tzinfo]:
        """Return the configured zone, or None meaning "host local time"."""

        if not self.local_timezone:
            return None
        return ZoneInfo(self.local_timezone)


settings = Settings()
