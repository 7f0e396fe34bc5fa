"""
MyAnimeList API client module.

This module provides access to the MyAnimeList v2 API using OAuth 2.0
(PKCE) authentication. It includes:

- MALClient: Authenticated HTTP client with one-shot 401 recovery
- Endpoint path definitions
- Error classification for non-success responses

Authentication is handled automatically via the OAuth module.
"""

from .client import MALClient, RetryBudget
from .exceptions import (
    MALAPIError,
    MALBadRequestError,
    MALForbiddenError,
    MALNotFoundError,
    MALTransportError,
    MALUnauthorizedError,
    classify_error,
)

__all__ = [
    "MALClient",
    "RetryBudget",
    "MALAPIError",
    "MALBadRequestError",
    "MALUnauthorizedError",
    "MALForbiddenError",
    "MALNotFoundError",
    "MALTransportError",
    "classify_error",
]
