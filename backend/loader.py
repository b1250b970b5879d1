"""
Export acquisition: turn an uploaded or on-disk file into document text.

Accepts either the bare `export.xml` or the `.zip` archive produced by the
Health app's "Export All Health Data". This is the only module that reads
files; the extractor works on text already in memory.
"""

import io
import logging
import zipfile
from pathlib import Path
from typing import Union

from errors import ExportNotFoundError, InvalidExportError

logger = logging.getLogger(__name__)

# Searched in order inside an archive
EXPORT_CANDIDATE_PATHS = (
    "apple_health_export/export.xml",
    "export.xml",
    "Export.xml",
    "apple_health_export/Export.xml",
)

ROOT_MARKERS = ("<HealthData", "<healthdata")


def validate_export_text(text: str) -> str:
    """Reject blank documents and documents without a HealthData root."""
    if not text or not text.strip():
        raise InvalidExportError("Export document is empty")
    if not any(marker in text for marker in ROOT_MARKERS):
        raise InvalidExportError("File is not an Apple Health export (no <HealthData> element)")
    return text


def _decode(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidExportError(f"Export is not valid UTF-8 text: {e}") from e


def _read_zip(data: bytes) -> str:
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise InvalidExportError(f"Could not open ZIP archive: {e}") from e

    with archive:
        names = set(archive.namelist())
        for path in EXPORT_CANDIDATE_PATHS:
            if path in names:
                logger.info("Found export document at %s", path)
                return _decode(archive.read(path))
        raise ExportNotFoundError(
            f"No export.xml found in ZIP archive. Available files: {', '.join(sorted(names))}"
        )


def read_export_bytes(data: bytes, filename: str) -> str:
    """Decode an `.xml` or `.zip` upload into validated document text."""

    name = filename.lower()
    logger.info("Reading %s (%.2f MB)", filename, len(data) / (1024 * 1024))
    if name.endswith(".zip"):
        text = _read_zip(data)
    elif name.endswith(".xml"):
        text = _decode(data)
    else:
        raise InvalidExportError("Please provide a ZIP or XML file exported from Apple Health")
    return validate_export_text(text)


def load_export_file(path: Union[str, Path]) -> str:
    path = Path(path)
    return read_export_bytes(path.read_bytes(), path.name)
