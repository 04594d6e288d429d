"""
Exception hierarchy for the seasonality pipeline.

Every fatal condition of a run is a TrendsAnalysisError carrying a
human-readable message; row-level problems in the CSV are never raised.
"""

from typing import Any, Dict, Optional


class TrendsAnalysisError(Exception):
    """Base exception for all analysis errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context,
        }


# Upload checks (before any parsing)
class UploadError(TrendsAnalysisError):
    """The uploaded file was rejected before parsing."""
    pass


class InvalidFileTypeError(UploadError):
    """File extension / MIME type is not CSV."""

    def __init__(self, filename: str, content_type: Optional[str] = None):
        super().__init__(
            "Please select a CSV file exported from Google Trends.",
            context={'filename': filename, 'content_type': content_type},
        )


class FileTooLargeError(UploadError):
    """File exceeds the size ceiling."""

    def __init__(self, size: int, max_bytes: int):
        limit_mb = max_bytes / (1024 * 1024)
        super().__init__(
            f"File size must be less than {limit_mb:g}MB.",
            context={'size': size, 'max_bytes': max_bytes},
        )


# Parser failures
class ParseError(TrendsAnalysisError):
    """Base exception for CSV ingestion failures."""
    pass


class EmptyFileError(ParseError):
    def __init__(self):
        super().__init__("CSV file is empty")


class MalformedCsvError(ParseError):
    def __init__(self, reason: str, line: Optional[int] = None):
        super().__init__(f"Could not read the CSV file: {reason}", context={'line': line})


class HeaderNotFoundError(ParseError):
    def __init__(self, rows_scanned: int):
        super().__init__(
            "Could not find header row with date column in CSV file",
            context={'rows_scanned': rows_scanned},
        )


class DateColumnNotFoundError(ParseError):
    def __init__(self, header):
        super().__init__("Could not find date column in CSV file", context={'header': list(header)})


class ValueColumnNotFoundError(ParseError):
    def __init__(self, header):
        super().__init__("Could not find value column in CSV file", context={'header': list(header)})


class NoValidDataError(ParseError):
    def __init__(self, rows_seen: int = 0):
        super().__init__(
            "No valid data points found in the CSV file. Please check the file format.",
            context={'rows_seen': rows_seen},
        )


# Optional text enhancement; recovered locally, never fails a run
class EnhancementServiceError(TrendsAnalysisError):
    """The natural-language enhancement call failed or returned nothing."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        context = {'original_error': str(original_error)} if original_error else {}
        super().__init__(message, context=context)
        self.original_error = original_error
