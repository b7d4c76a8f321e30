# backend/session_booking/exceptions.py
"""
Domain errors raised by the booking services.

Every error carries the HTTP status it is reported with; the application
registers a single handler that turns them into {"detail": message}.
"""

from fastapi import status


class BookingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Malformed or out-of-range input the caller can correct."""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(BookingError):
    """The write collides with existing state (overlap, taken slot, resolved request)."""
    status_code = status.HTTP_409_CONFLICT


class ExpiredError(ConflictError):
    """
    A time-boxed action was attempted after its deadline.

    Raised only after the request has already been moved to EXPIRED,
    so repeating the call converges to the same outcome.
    """


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(BookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
