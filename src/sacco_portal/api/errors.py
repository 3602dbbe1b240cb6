"""
Error types and response classification for backend calls.

Every failure surfaced by the API client is a PortalError. Consumers check
``error.silent`` before printing or logging anything: silent errors mean the
session is no longer valid and are resolved by sending the member back to
login, never by showing an error.
"""

from typing import Any

import httpx

GENERIC_FAILURE = "Request failed"


class PortalError(Exception):
    """Base class for every classified client failure."""

    silent: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(PortalError):
    """HTTP 401 on an authenticated call. Never logged, shown or retried."""

    silent = True

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class RequestFailedError(PortalError):
    """Any other non-2xx response."""

    def __init__(self, message: str, status_code: int, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class TransportError(PortalError):
    """No usable response: connection failure, timeout or undecodable body."""


class SessionError(PortalError):
    """Local precondition failure in a session operation."""


def _format_details(details: list) -> str:
    parts = []
    for detail in details:
        if not isinstance(detail, dict):
            parts.append(str(detail))
            continue
        path = detail.get("path")
        if isinstance(path, list) and path:
            field = ".".join(str(p) for p in path)
        else:
            field = (detail.get("context") or {}).get("label") or "field"
        parts.append(f"{field}: {detail.get('message', '')}")
    return ", ".join(parts)


def extract_message(response: httpx.Response) -> tuple[str, Any]:
    """
    Pull a human-readable message out of an error response body.

    Returns:
        (message, details) where details is the raw validation list, if any.
    """
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE, None

    if not isinstance(body, dict):
        return GENERIC_FAILURE, None

    details = body.get("details")
    if isinstance(details, list) and details:
        return f"Validation failed: {_format_details(details)}", details

    message = body.get("message") or body.get("error")
    if isinstance(message, str) and message:
        return message, None
    return GENERIC_FAILURE, None


def classify_response(
    response: httpx.Response, authenticated: bool = True
) -> PortalError | None:
    """
    Classify an HTTP response.

    Args:
        response: The received response.
        authenticated: Whether the call carried a bearer credential. A 401 on an
            unauthenticated call (e.g. login) is an ordinary credential failure.

    Returns:
        None for 2xx, otherwise the classified error.
    """
    if response.is_success:
        return None

    if response.status_code == 401 and authenticated:
        return UnauthorizedError()

    message, details = extract_message(response)
    return RequestFailedError(message, response.status_code, details)


def classify_transport_error(exc: Exception) -> TransportError:
    """Classify a failure that produced no response."""
    if isinstance(exc, httpx.TimeoutException):
        return TransportError("Request timed out")
    if isinstance(exc, httpx.ConnectError):
        return TransportError("Cannot connect to the SACCO server")
    return TransportError(str(exc) or exc.__class__.__name__)


def should_retry(error: PortalError, attempt: int, max_retries: int = 1) -> bool:
    """
    Retry policy for read operations.

    Args:
        error: The failure from the previous attempt.
        attempt: Number of attempts already made (1 after the first failure).
        max_retries: Upper bound on retries.
    """
    if error.silent or attempt > max_retries:
        return False
    if isinstance(error, TransportError):
        return True
    # Client errors other than 401 will not change on a second attempt.
    return isinstance(error, RequestFailedError) and error.status_code >= 500
