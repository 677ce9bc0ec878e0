"""Errors raised by the events API client."""

NOT_SIGNED_IN_MESSAGE = 'Not signed in'
INVALID_TOKEN_MESSAGE = 'Token is invalid or has expired'
NOT_AVAILABLE_MESSAGE = (
    'This event has not started yet or has been closed. Please try again later.'
)


class EventsApiError(Exception):
    """Base class for events API failures shown to the user."""


class UnauthenticatedError(EventsApiError):
    """No auth token was supplied; no request was made."""

    def __init__(self, message: str = NOT_SIGNED_IN_MESSAGE):
        super().__init__(message)


class InvalidCredentialError(EventsApiError):
    """The API rejected the token (HTTP 401)."""

    def __init__(self, message: str = INVALID_TOKEN_MESSAGE):
        super().__init__(message)


class HttpStatusError(EventsApiError):
    """Any other non-2xx response."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


def display_message(error: Exception, default: str) -> str:
    """Message shown inline for a failed fetch, falling back to ``default``."""
    return str(error) or default
