"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the invoice
field extraction system. Field-level extraction misses are NOT exceptions
(they yield None); the classes below cover input refusal, the OCR
collaborator boundary and malformed numeric tokens.

Exception Hierarchy:
    InvoiceExtractionError (base)
    ├── InputError
    │   ├── EmptyDocumentError
    │   ├── InvalidConfidenceError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── CorruptedFileError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── OCRProcessingError
    ├── ExtractionError
    │   └── MalformedAmountError
    └── ConfigurationError
"""


class InvoiceExtractionError(Exception):
    """
    Base exception for all invoice extraction errors.

    All custom exceptions in this system inherit from this class,
    allowing for easy catching of all system-specific errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(InvoiceExtractionError):
    """Base exception for input handling errors."""
    pass


class EmptyDocumentError(InputError):
    """
    Raised when the OCR text handed to the pipeline is empty.

    The pipeline refuses to run on empty input; this is the only
    fatal error of the extraction core.
    """

    def __init__(self, source: str = None):
        message = "Document text is empty or missing"
        details = {"source": source} if source else None
        super().__init__(message, details)


class InvalidConfidenceError(InputError):
    """Raised when the OCR confidence is not a number in [0, 100]."""

    def __init__(self, confidence):
        message = f"OCR confidence must be a number between 0 and 100, got {confidence!r}"
        details = {"confidence": confidence}
        super().__init__(message, details)


class UnsupportedFileTypeError(InputError):
    """
    Raised when an unsupported file type is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".doc", [".txt", ".png"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file or directory does not exist."""

    def __init__(self, filepath: str):
        message = f"Input not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when a file or image buffer is corrupted or unreadable."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# OCR ERRORS
# =============================================================================

class OCRError(InvoiceExtractionError):
    """Base exception for OCR-related errors."""
    pass


class OCREngineNotAvailableError(OCRError):
    """Raised when the configured OCR engine is not available."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(OCRError):
    """Raised when OCR processing fails."""

    def __init__(self, source: str, reason: str = None):
        message = f"OCR processing failed for: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceExtractionError):
    """Base exception for errors raised inside extraction stages."""
    pass


class MalformedAmountError(ExtractionError):
    """
    Raised when a numeric-looking token does not parse as a number.

    Stages catch it and treat the slot as "no amount found".

    Example:
        >>> raise MalformedAmountError("12,3,4")
    """

    def __init__(self, raw: str, reason: str = None):
        message = f"Malformed amount: {raw!r}"
        details = {"raw": raw, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(InvoiceExtractionError):
    """Raised when a settings file is unreadable or holds unusable values."""

    def __init__(self, source: str, reason: str):
        message = f"Invalid configuration in {source}: {reason}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# Export all exceptions
__all__ = [
    'InvoiceExtractionError',
    'InputError',
    'EmptyDocumentError',
    'InvalidConfidenceError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'CorruptedFileError',
    'OCRError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'ExtractionError',
    'MalformedAmountError',
    'ConfigurationError',
]
