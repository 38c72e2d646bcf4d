"""Exception types for profile fetching and validation.

Fetch failures are split into two classes:

- availability: the backend could not be reached or answered with something
  that is not the API (an HTML error page, a proxy response). These may be
  masked by the fallback profile.
- correctness: the backend answered and rejected the request, or answered
  with data that does not match the profile shape. These always reach the
  caller.
"""

from typing import Any


class ProfileServiceError(Exception):
    """Base exception for the profile service."""

    #: Whether the failure means "backend unavailable" rather than "backend said no".
    availability: bool = False


class ProfileFetchError(ProfileServiceError):
    """Base exception for failures while fetching the profile."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class NetworkFailure(ProfileFetchError):
    """Connection, DNS or timeout failure. Retried up to the attempt budget."""

    availability = True


class MalformedResponse(ProfileFetchError):
    """The response was not JSON (wrong content type or an HTML page). Never retried."""

    availability = True

    def __init__(
        self,
        message: str,
        url: str | None = None,
        content_type: str | None = None,
        is_html: bool = False,
    ):
        super().__init__(message, url=url)
        self.content_type = content_type
        self.is_html = is_html


class HttpStatusError(ProfileFetchError):
    """The backend answered with JSON and a non-2xx status. Never retried."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: str | None = None,
        body: str = "",
        response: dict[str, Any] | None = None,
        detail: str = "",
    ):
        super().__init__(message, url=url)
        self.status_code = status_code
        self.body = body
        self.response = response or {}
        #: Server-provided error message (``message`` or ``error`` key), or the body.
        self.message = detail or body


class ProfileValidationError(ProfileServiceError, ValueError):
    """Data does not match the profile shape, or a date could not be parsed."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []
