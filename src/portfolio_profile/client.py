"""Async client for the portfolio profile endpoint.

Fetches ``GET {api_url}/api/profile`` and turns it into a
``ProfileAggregate``. The page must always have something to render, so
the client keeps one TTL-bounded cache record and, when the backend is
unreachable, serves a static fallback profile instead of failing.

Failures are classified where they happen:

- ``NetworkFailure`` is retried with a fixed delay, then treated as
  "backend unavailable".
- ``MalformedResponse`` (HTML or other non-JSON) is not retried and is
  treated as "backend unavailable".
- ``HttpStatusError`` and ``ProfileValidationError`` always reach the caller.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import Any, Self

import httpx

from portfolio_profile.config import Settings
from portfolio_profile.exceptions import (
    HttpStatusError,
    MalformedResponse,
    NetworkFailure,
    ProfileFetchError,
    ProfileValidationError,
)
from portfolio_profile.logging import get_logger
from portfolio_profile.profile.aggregate import ProfileAggregate
from portfolio_profile.profile.fallback import fallback_payload

log = get_logger("portfolio_profile.client")

DEFAULT_BASE_URL = "http://localhost:4000"
PROFILE_PATH = "/api/profile"
DEFAULT_CACHE_TTL = 300.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_TIMEOUT = 10.0
ERROR_BODY_LIMIT = 200
PREVIEW_LIMIT = 100

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class ProfileState(Enum):
    """State of the client's profile slot."""

    EMPTY = "empty"
    FETCHING = "fetching"
    CACHED_VALID = "cached_valid"
    CACHED_EXPIRED = "cached_expired"
    FAILED = "failed"


@dataclass(frozen=True)
class CacheEntry:
    """The last materialized profile and when it was captured."""

    value: ProfileAggregate
    fetched_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        """Check whether the entry is younger than ``ttl`` seconds."""
        return now - self.fetched_at < ttl


def _looks_like_html(text: str) -> bool:
    head = text.lstrip()[:15].lower()
    return head.startswith("<!doctype") or head.startswith("<html")


class ProfileClient:
    """Async client that always produces a profile when the backend is merely down.

    One instance owns one cache record. Concurrent ``fetch_profile()``
    calls share a single in-flight request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        fallback_enabled: bool = True,
        fallback_on_not_found: bool = False,
        fallback_path: str | Path | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the profile client.

        Args:
            base_url: Base URL of the portfolio backend.
            cache_ttl: Seconds a fetched profile is served without a new request.
            max_attempts: Total attempts per fetch for network failures.
            retry_delay: Fixed delay in seconds between attempts.
            timeout: Timeout in seconds for a single attempt.
            fallback_enabled: Serve the fallback profile when the backend is unavailable.
            fallback_on_not_found: Also serve the fallback profile on a 404.
            fallback_path: Optional JSON file overriding the built-in fallback profile.
            http_client: Optional HTTP client to use. It is not closed by this client.
            clock: Monotonic clock used for cache expiry.
            sleep: Coroutine used to wait between attempts.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {max_attempts}")

        self._base_url = base_url.rstrip("/")
        self._endpoint = f"{self._base_url}{PROFILE_PATH}"
        self._cache_ttl = cache_ttl
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._fallback_enabled = fallback_enabled
        self._fallback_on_not_found = fallback_on_not_found
        self._fallback_path = fallback_path
        self._clock = clock
        self._sleep = sleep

        self._client = http_client
        self._owns_client = http_client is None

        self._cache: CacheEntry | None = None
        self._in_flight: asyncio.Task[ProfileAggregate] | None = None
        self._generation = 0
        self._failed = False

        log.info("profile_client_initialized", endpoint=self._endpoint)

    @property
    def endpoint(self) -> str:
        """The profile endpoint URL."""
        return self._endpoint

    @property
    def state(self) -> ProfileState:
        """Current state of the profile slot."""
        if self._in_flight is not None:
            return ProfileState.FETCHING
        if self._cache is not None:
            if self._cache.is_fresh(self._clock(), self._cache_ttl):
                return ProfileState.CACHED_VALID
            return ProfileState.CACHED_EXPIRED
        if self._failed:
            return ProfileState.FAILED
        return ProfileState.EMPTY

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = httpx.AsyncClient(headers=JSON_HEADERS, timeout=self._timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            log.debug("profile_client_closed")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def fetch_profile(self) -> ProfileAggregate:
        """Get the profile, from cache when fresh, otherwise from the backend.

        Returns:
            The live profile, or the fallback profile if the backend is unavailable.

        Raises:
            HttpStatusError: The backend rejected the request.
            ProfileValidationError: The response did not match the profile shape.
            NetworkFailure: The backend is unreachable and fallback is disabled.
            MalformedResponse: The backend did not return JSON and fallback is disabled.
        """
        entry = self._cache
        if entry is not None and entry.is_fresh(self._clock(), self._cache_ttl):
            log.debug("profile_cache_hit", profile_id=entry.value.id)
            return entry.value

        if self._in_flight is None:
            task = asyncio.create_task(self._load_profile(self._generation))
            task.add_done_callback(self._on_load_done)
            self._in_flight = task
        else:
            log.debug("profile_fetch_joined_in_flight")

        # Shield so one cancelled caller does not cancel the shared request
        return await asyncio.shield(self._in_flight)

    def get_profile(self) -> ProfileAggregate | None:
        """Get the last successfully materialized profile, if any."""
        return self._cache.value if self._cache else None

    def clear_cache(self) -> None:
        """Forget the cached profile so the next fetch goes to the backend."""
        self._cache = None
        self._in_flight = None
        self._failed = False
        self._generation += 1
        log.debug("profile_cache_cleared")

    def _on_load_done(self, task: asyncio.Task[ProfileAggregate]) -> None:
        if self._in_flight is task:
            self._in_flight = None
        # Mark the exception as retrieved; callers receive it through the shield
        if not task.cancelled():
            task.exception()

    async def _load_profile(self, generation: int) -> ProfileAggregate:
        """Fetch, validate and cache the profile, substituting the fallback if unavailable."""
        try:
            payload = await self._request_with_retry()
            aggregate = ProfileAggregate.create(payload)
        except ProfileFetchError as e:
            if not self._should_fall_back(e):
                self._mark_failed(generation)
                log.error(
                    "profile_fetch_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                    url=self._endpoint,
                )
                raise
            aggregate = self._load_fallback(e, generation)
        except ProfileValidationError as e:
            self._mark_failed(generation)
            log.error("profile_invalid", error=str(e), url=self._endpoint)
            raise

        self._store(aggregate, generation)
        return aggregate

    def _should_fall_back(self, error: ProfileFetchError) -> bool:
        if not self._fallback_enabled:
            return False
        if error.availability:
            return True
        return (
            self._fallback_on_not_found
            and isinstance(error, HttpStatusError)
            and error.status_code == 404
        )

    def _load_fallback(self, error: ProfileFetchError, generation: int) -> ProfileAggregate:
        log.warning(
            "profile_backend_unavailable_using_fallback",
            reason=type(error).__name__,
            error=str(error),
            url=self._endpoint,
        )
        try:
            return ProfileAggregate.create(fallback_payload(self._fallback_path))
        except ProfileValidationError:
            self._mark_failed(generation)
            raise

    def _store(self, aggregate: ProfileAggregate, generation: int) -> None:
        if generation != self._generation:
            log.debug("profile_fetch_discarded_after_clear", profile_id=aggregate.id)
            return
        self._cache = CacheEntry(value=aggregate, fetched_at=self._clock())
        self._failed = False
        log.info("profile_cached", profile_id=aggregate.id, ttl=self._cache_ttl)

    def _mark_failed(self, generation: int) -> None:
        if generation == self._generation:
            self._failed = True

    async def _request_with_retry(self) -> Any:
        """Request the profile, retrying network failures with a fixed delay.

        Returns:
            The decoded JSON body.
        """
        last_error: NetworkFailure | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self._request_once()
            except NetworkFailure as e:
                last_error = e
                if attempt < self._max_attempts:
                    log.warning(
                        "profile_fetch_attempt_failed",
                        attempt=attempt,
                        max_attempts=self._max_attempts,
                        delay=self._retry_delay,
                        error=str(e),
                    )
                    await self._sleep(self._retry_delay)
                else:
                    log.error(
                        "profile_fetch_max_attempts_reached",
                        max_attempts=self._max_attempts,
                        error=str(e),
                    )

        if last_error:
            raise last_error
        raise RuntimeError("Profile fetch failed without an error")

    async def _request_once(self) -> Any:
        """Make a single request and decode the profile body.

        Raises:
            NetworkFailure: The request could not be completed.
            MalformedResponse: The response was not JSON.
            HttpStatusError: The response was JSON with a non-2xx status.
            ProfileValidationError: The JSON body could not be decoded.
        """
        client = await self._get_client()
        try:
            response = await client.get(
                self._endpoint, headers=JSON_HEADERS, timeout=self._timeout
            )
        except httpx.RequestError as e:
            raise NetworkFailure(
                f"Unable to reach profile service: {e!r}", url=self._endpoint
            ) from e

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type.lower():
            text = response.text
            if _looks_like_html(text):
                raise MalformedResponse(
                    "Server returned HTML instead of JSON; the backend may not be "
                    f"running or the API URL is wrong: {self._endpoint}",
                    url=self._endpoint,
                    content_type=content_type,
                    is_html=True,
                )
            raise MalformedResponse(
                f"Expected JSON but received {content_type or 'no content type'}: "
                f"{text[:PREVIEW_LIMIT]}",
                url=self._endpoint,
                content_type=content_type,
            )

        if not response.is_success:
            raise self._status_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise ProfileValidationError(f"Profile response is not valid JSON: {e}") from e

    def _status_error(self, response: httpx.Response) -> HttpStatusError:
        body = response.text[:ERROR_BODY_LIMIT]
        data: dict[str, Any] = {}
        try:
            decoded = response.json()
        except ValueError:
            decoded = None
        if isinstance(decoded, dict):
            data = decoded
        detail = data.get("message") or data.get("error") or body
        return HttpStatusError(
            f"HTTP {response.status_code} from profile service: {detail}",
            status_code=response.status_code,
            url=self._endpoint,
            body=body,
            response=data,
            detail=str(detail),
        )


def create_profile_client(settings: Settings | None = None, **overrides: Any) -> ProfileClient:
    """Create a profile client configured from settings.

    Args:
        settings: Settings to use. Defaults to the cached application settings.
        **overrides: Keyword arguments passed to ``ProfileClient`` as-is.

    Returns:
        Configured profile client.
    """
    if settings is None:
        from portfolio_profile.config import get_settings

        settings = get_settings()

    options: dict[str, Any] = {
        "cache_ttl": settings.profile_cache_ttl,
        "max_attempts": settings.profile_fetch_max_attempts,
        "retry_delay": settings.profile_retry_delay,
        "timeout": settings.profile_request_timeout,
        "fallback_enabled": settings.profile_fallback_enabled,
        "fallback_on_not_found": settings.profile_fallback_on_not_found,
        "fallback_path": settings.profile_fallback_path,
    }
    options.update(overrides)
    return ProfileClient(settings.api_url, **options)
