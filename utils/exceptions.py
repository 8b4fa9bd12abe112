"""
Custom exceptions for the ArtistBook platform.

This module defines the exceptions raised by the availability engine and its
collaborators, enabling consistent error handling patterns across services
and the API layer.

Conflict outcomes of an availability check (too soon, no slot, blackout, ...)
are NOT exceptions; they are returned as result values. Only malformed input,
unknown records and state violations are raised.
"""

from typing import Any

from django.utils.translation import gettext_lazy as _
from rest_framework import status


class ArtistBookError(Exception):
    """
    Base exception for all ArtistBook custom exceptions.

    Attributes:
        message: Error message
        detail: Additional error details
        status_code: HTTP status code for API responses
    """

    error_code = "error"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        self.message = message if message else _("An error occurred")
        self.detail = detail
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self):
        return str(self.message)


class ValidationError(ArtistBookError):
    """
    Exception for malformed input (bad time format, end before start,
    date out of the allowed range). Raised before any lookup.
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        message = message if message else _("Validation error")
        super().__init__(message, detail, status_code)


class InvalidIntervalError(ValidationError):
    """
    Exception for intervals with zero or negative duration.
    """

    error_code = "invalid_interval"

    def __init__(self, message: str = None, detail: Any = None):
        message = message if message else _("Interval end must be after its start")
        super().__init__(message, detail)


class ResourceNotFoundError(ArtistBookError):
    """
    Exception for unknown artist/template/pattern/blackout ids.
    """

    error_code = "not_found"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_404_NOT_FOUND,
    ):
        message = message if message else _("Resource not found")
        super().__init__(message, detail, status_code)


class StateViolationError(ArtistBookError):
    """
    Exception for operations that would orphan dependent records, e.g.
    deleting a recurring pattern with materialized availability or creating
    a blackout over a confirmed booking.

    ``detail`` enumerates the offending dependent records.
    """

    error_code = "state_violation"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_409_CONFLICT,
    ):
        message = message if message else _("Operation conflicts with dependent records")
        super().__init__(message, detail, status_code)


class BookingConflictError(ArtistBookError):
    """
    Exception for a slot claim that lost the race to another booking.
    """

    error_code = "booking_conflict"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_409_CONFLICT,
    ):
        message = message if message else _("Booking conflict detected")
        super().__init__(message, detail, status_code)


class LockUnavailableError(ArtistBookError):
    """
    Exception raised when the per-artist lock cannot be acquired in time.
    """

    error_code = "lock_unavailable"

    def __init__(
        self,
        message: str = None,
        detail: Any = None,
        status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE,
    ):
        message = message if message else _("Calendar is busy, please try again")
        super().__init__(message, detail, status_code)
