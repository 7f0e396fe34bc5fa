"""
Exceptions for the MyAnimeList API client.

``classify_error`` maps a non-success response to one of these classes.
Every error keeps the original HTTP status and response body.
"""

import json
from typing import Any, Optional


class MALAPIError(Exception):
    """
    Base exception for MyAnimeList API errors (also the generic kind).

    Attributes:
        status: HTTP status code of the response (None if no response)
        body: Parsed JSON body, or raw text if it was not JSON
    """

    kind = "generic"
    status_code: Optional[int] = None

    def __init__(self, body: Any = None, status: Optional[int] = None, message: str = ""):
        self.status = status if status is not None else self.status_code
        self.body = body
        super().__init__(message or self._format())

    def _format(self) -> str:
        try:
            detail = json.dumps(self.body, indent=2, sort_keys=True)
        except (TypeError, ValueError):
            detail = repr(self.body)
        return f"MyAnimeList API error ({self.status}): {detail}"


class MALBadRequestError(MALAPIError):
    """400: malformed request or invalid parameters."""

    kind = "bad_request"
    status_code = 400


class MALUnauthorizedError(MALAPIError):
    """401: access token rejected."""

    kind = "unauthorized"
    status_code = 401
    dev_message = (
        "The access token is likely invalid or has expired, please re-authenticate."
    )

    def _format(self) -> str:
        return f"{super()._format()}\n{self.dev_message}"


class MALForbiddenError(MALAPIError):
    """
    403: MyAnimeList documents this as "DoS detected".

    Treated as a rate-limit or ban signal: no further requests should be
    made for the rest of the process.
    """

    kind = "forbidden"
    status_code = 403


class MALNotFoundError(MALAPIError):
    """404: unknown resource."""

    kind = "not_found"
    status_code = 404


class MALTransportError(MALAPIError):
    """Request never produced an HTTP response (network failure, timeout)."""

    kind = "transport"


_ERRORS_BY_STATUS = {
    cls.status_code: cls
    for cls in (MALBadRequestError, MALUnauthorizedError, MALForbiddenError, MALNotFoundError)
}


def classify_error(status: int, body: Any) -> MALAPIError:
    """
    Map a non-success status code and body to an API error.

    Args:
        status: HTTP status code
        body: Response body (parsed JSON or raw text)

    Returns:
        Error instance; unmapped statuses produce a generic MALAPIError
    """
    error_cls = _ERRORS_BY_STATUS.get(status, MALAPIError)
    return error_cls(body, status=status)
