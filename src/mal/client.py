"""
MyAnimeList API client with OAuth authentication.

This module provides an authenticated HTTP client for the MyAnimeList v2
API. It handles:

- Bearer token injection from the OAuth coordinator
- One recovery cycle on 401: refresh the token, or re-authorize if the
  refresh fails, then retry the request once
- Error classification for every other non-success response
- Halting all further requests after a 403 (rate limit / ban signal)

Every request is logged before it is sent.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

import requests

from src.oauth.coordinator import OAuthCoordinator
from src.oauth.exceptions import TokenNotAvailableError

from . import endpoints
from .exceptions import (
    MALForbiddenError,
    MALTransportError,
    MALUnauthorizedError,
    classify_error,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryBudget:
    """
    Recovery allowance for one logical API call.

    A 401 may be answered with at most one refresh, at most one full
    re-authorization (only if the refresh failed) and one retried request.
    """

    refreshes: int = 1
    reauthorizations: int = 1
    retries: int = 1

    @property
    def exhausted(self) -> bool:
        return self.retries <= 0


class MALClient:
    """
    Authenticated HTTP client for the MyAnimeList API.

    Example:
        from src.oauth.coordinator import OAuthCoordinator
        from src.mal.client import MALClient

        client = MALClient(OAuthCoordinator())
        anime = client.get_anime_list(status="completed", limit=10)
    """

    BASE_URL = "https://api.myanimelist.net/v2/"

    def __init__(
        self,
        oauth_coordinator: Optional[OAuthCoordinator] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize MyAnimeList API client.

        Args:
            oauth_coordinator: OAuth coordinator for authentication
                              (creates default if not provided)
            timeout: Request timeout in seconds (default: config request_timeout)
        """
        self.oauth = oauth_coordinator or OAuthCoordinator()
        self.timeout = timeout if timeout is not None else self.oauth.config.request_timeout
        self.session = requests.Session()

        logger.debug("MALClient initialized")

    @property
    def halted(self) -> bool:
        """
        True once any client sharing this coordinator received a 403.

        No further requests are sent through the coordinator after that.
        """
        return self.oauth.halted_by is not None

    def _get_full_url(self, endpoint: str) -> str:
        """Construct full API URL from an endpoint path."""
        return f"{self.BASE_URL}{endpoint.lstrip('/')}"

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
        authorize: bool = True,
    ) -> requests.Response:
        """Send one request with the current access token."""
        try:
            headers = self.oauth.get_authorization_header(authorize=authorize)
        except TokenNotAvailableError as e:
            logger.error(f"Not authorized: {e}")
            raise MALUnauthorizedError(
                None, message="No valid OAuth tokens available and authorization failed."
            ) from e

        headers["Accept"] = "application/json"

        logger.info(f"{method} {url}")
        if params:
            logger.debug(f"  Params: {params}")

        try:
            return self.session.request(
                method, url, headers=headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Network error: {e}")
            raise MALTransportError(None, message=f"Network error: {e}") from e

    def _recover(self, budget: RetryBudget) -> None:
        """
        Spend the budget on getting a new access token.

        Tries a refresh first; runs the full authorization flow only if the
        refresh fails. The retry is spent either way.
        """
        budget.retries -= 1

        if budget.refreshes > 0:
            budget.refreshes -= 1
            if self.oauth.refresh():
                logger.info("Access token refreshed, retrying request")
                return

        if budget.reauthorizations > 0:
            budget.reauthorizations -= 1
            logger.info("Access token was missing or invalid, re-authenticating...")
            self.oauth.run_authorization_flow()

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        budget: Optional[RetryBudget] = None,
    ) -> Any:
        """
        Make an authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: API endpoint path relative to the base URL
            params: Query parameters
            budget: Retry budget for this call (a fresh one by default)

        Returns:
            JSON response body

        Raises:
            MALUnauthorizedError: If the token is still rejected after recovery
            MALForbiddenError: On 403, and for every call after one
            MALBadRequestError, MALNotFoundError, MALAPIError: Other statuses
            MALTransportError: On network failure
        """
        halted_by = self.oauth.halted_by
        if halted_by is not None:
            raise MALForbiddenError(
                halted_by.body,
                status=halted_by.status,
                message="Requests halted after an earlier 403 (possible rate limit or ban).",
            )

        budget = budget or RetryBudget()
        method = method.upper()
        url = self._get_full_url(endpoint)

        first_attempt = True
        while True:
            # only the first attempt may start an authorization flow for a missing token
            response = self._send(method, url, params, authorize=first_attempt)
            first_attempt = False

            if response.ok:
                logger.debug(f"Response: {response.status_code}")
                return self._parse_body(response)

            body = self._parse_body(response)

            if response.status_code == 401 and not budget.exhausted:
                logger.warning("Authentication failed (401), recovering access token")
                self._recover(budget)
                continue

            error = classify_error(response.status_code, body)
            if isinstance(error, MALForbiddenError):
                logger.error("Forbidden (403): halting all further API requests")
                self.oauth.halted_by = error
            else:
                logger.error(f"API error ({response.status_code}): {body}")
            raise error

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make authenticated GET request."""
        return self.request("GET", endpoint, params=params)

    def get_anime_list(
        self,
        user_name: str = "@me",
        status: Optional[str] = None,
        sort: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Get a user's anime list.

        Args:
            user_name: MAL user name, or "@me" for the authorized user
            status: Filter by list status (e.g. "completed")
            sort: Sort order (e.g. "list_updated_at")
            limit: Page size
            offset: Page offset
            fields: Extra fields to include for each entry

        Returns:
            Response with ``data`` (list of entries) and ``paging``

        Raises:
            ValueError: If status or sort is not a known value
            MALAPIError: For API errors
        """
        if status is not None and status not in endpoints.ANIME_LIST_STATUSES:
            raise ValueError(f"Unknown anime list status: {status}")
        if sort is not None and sort not in endpoints.ANIME_LIST_SORTS:
            raise ValueError(f"Unknown anime list sort: {sort}")

        params: Dict[str, Any] = {}
        if status:
            params["status"] = status
        if sort:
            params["sort"] = sort
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset
        if fields:
            params["fields"] = ",".join(fields)

        return self.get(endpoints.USER_ANIME_LIST.format(user_name=user_name), params=params)
