"""
Error taxonomy for export handling.

Structural problems abort the whole operation and surface as a single
descriptive exception. Per-record anomalies never reach this module: the
extractor drops incomplete records and stores unparseable numbers as NaN.
"""


class HealthDataError(Exception):
    """Base class for every error raised by the export engine."""


class ParseError(HealthDataError):
    """The export document is not well-formed XML.

    The message carries the diagnostic from the underlying XML parser.
    """


class EmptyResultError(HealthDataError):
    """Extraction finished but kept no records.

    Raised by the session layer only; the extractor itself treats an empty
    result as a normal outcome.
    """


class ExtractionCancelled(HealthDataError):
    """A caller asked to stop the extraction at a batch boundary."""


class InvalidExportError(HealthDataError):
    """The supplied file is not a usable Apple Health export."""


class ExportNotFoundError(InvalidExportError):
    """An archive did not contain an export document at any known path."""
