"""Portfolio profile data access.

Fetches the portfolio profile from the backend with caching, retries and a
fallback dataset, and derives computed fields such as skill experience.
"""

from portfolio_profile.client import (
    CacheEntry,
    ProfileClient,
    ProfileState,
    create_profile_client,
)
from portfolio_profile.exceptions import (
    HttpStatusError,
    MalformedResponse,
    NetworkFailure,
    ProfileFetchError,
    ProfileServiceError,
    ProfileValidationError,
)
from portfolio_profile.profile import ProfileAggregate

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "HttpStatusError",
    "MalformedResponse",
    "NetworkFailure",
    "ProfileAggregate",
    "ProfileClient",
    "ProfileFetchError",
    "ProfileServiceError",
    "ProfileState",
    "ProfileValidationError",
    "create_profile_client",
]
