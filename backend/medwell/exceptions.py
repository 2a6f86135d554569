"""
MedWell Backend — Internal Exception Hierarchy
================================================

What:  Exceptions raised by the infrastructure layers (document store connector,
       completion provider, file storage).
How:   Each exception carries a message and an optional context dict. Services
       catch them at their boundary and convert them into tagged `Err` results
       (see medwell.results); a global handler in main.py renders any that
       escape as a 500.

Exception Hierarchy:
    MedWellError (base)
    ├── ValidationError          → Err(invalid_input)  → 400
    ├── FileStorageError         → Err(server_error)   → 500
    ├── CompletionServiceError   → Err(server_error)   → 500
    └── DatabaseError            → Err(server_error)   → 500
"""

from typing import Any, Dict, Optional


class MedWellError(Exception):
    """
    Base exception for all MedWell application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info, logged server-side
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MedWellError):
    """
    Raised when client input fails validation below the route layer.

    When:    Uploaded file type not allowed, file too large or empty.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FileStorageError(MedWellError):
    """Raised when reading, writing or deleting an uploaded file fails."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CompletionServiceError(MedWellError):
    """
    Raised when the external completion API call fails.

    What:    The vendor SDK raised (network error, invalid key, quota, bad request).
    How:     The original exception text is kept in `message` so it can be
             surfaced to the caller; there is no retry.
    """

    def __init__(
        self,
        message: str = "Completion service request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MedWellError):
    """
    Raised when the document store cannot be used.

    When:    A handler asks for the database before the connector has been
             opened, or after it was closed.
    """

    def __init__(
        self,
        message: str = "Database connection is not available",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
