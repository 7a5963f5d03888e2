"""
Custom exceptions for ride invoice conversion.

Only document-level failures are raised. Problems with a single row (a row
that is neither a booking nor a credit) or a single amount (a value that does
not parse as a number) are recovered where they happen and only logged.
"""

from typing import Optional, Dict, Any


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentLoadError(ConversionError):
    """Raised when the uploaded bytes cannot be opened as a PDF."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error
        if original_error:
            self.details['original_error'] = str(original_error)
            self.details['error_type'] = type(original_error).__name__


class DocumentTooShort(ConversionError):
    """Raised when the document has no pages beyond the cover page."""

    def __init__(self, page_count: int):
        super().__init__(
            "No tabular pages found (only cover page?).",
            {'page_count': page_count},
        )
        self.page_count = page_count


class NoRowsFound(ConversionError):
    """Raised when no invoice rows survive extraction."""

    def __init__(self, page_count: int):
        super().__init__(
            "No table rows found after skipping the first page.",
            {'page_count': page_count},
        )
        self.page_count = page_count
