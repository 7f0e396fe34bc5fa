"""
Token manager for MyAnimeList OAuth integration.

This module owns the in-memory token record and the two ways of acquiring
one from the token endpoint:
- Token exchange (authorization code + PKCE verifier -> access/refresh tokens)
- Token refresh (refresh token -> new access/refresh tokens)

Every successful acquisition replaces the stored record wholesale.
"""

import logging
from typing import Any, Dict, Optional, Type

import requests

from .config import MALOAuthConfig
from .exceptions import (
    MALOAuthError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
)
from .token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)


class TokenManager:
    """
    Manages OAuth token lifecycle.

    Lifecycle of the record: ``load()`` once at startup (absent if the file
    is missing or invalid), ``set()`` after every successful exchange or
    refresh, ``get()`` whenever a caller needs the current token.
    """

    def __init__(self, config: MALOAuthConfig, storage: Optional[TokenStorage] = None):
        """
        Initialize token manager.

        Args:
            config: OAuth configuration
            storage: Token storage (creates default if not provided)
        """
        self.config = config
        self.storage = storage or TokenStorage(config.token_file)
        self._token: Optional[TokenData] = None
        self._loaded = False

    def load(self) -> Optional[TokenData]:
        """
        (Re)load the token record from storage.

        Returns:
            TokenData if a valid record is stored, None otherwise
        """
        self._token = self.storage.load()
        self._loaded = True
        return self._token

    def get(self) -> Optional[TokenData]:
        """
        Get the current token record, loading it from storage on first use.

        Returns:
            TokenData if available, None otherwise
        """
        if not self._loaded:
            return self.load()
        return self._token

    def set(self, token_data: TokenData) -> None:
        """
        Persist a new token record and make it current.

        Raises:
            TokenStorageError: If the record could not be written
        """
        self.storage.save(token_data)
        self._token = token_data
        self._loaded = True

    def clear(self) -> None:
        """Delete the stored record (local revocation)."""
        self.storage.delete()
        self._token = None
        self._loaded = True

    def _request_token(
        self, data: Dict[str, Any], error_cls: Type[MALOAuthError], action: str
    ) -> TokenData:
        """
        POST a grant to the token endpoint and parse the response.

        Args:
            data: Grant-specific form fields
            error_cls: Exception raised on any failure
            action: Short description for log messages

        Returns:
            TokenData parsed from the response

        Raises:
            error_cls: On transport failure, unparsable body, an ``error``
                field (even with HTTP 200) or missing token fields
        """
        form = dict(data, client_id=self.config.client_id)
        if self.config.client_secret:
            form["client_secret"] = self.config.client_secret

        logger.info(f"POST {self.config.token_url}")

        try:
            response = requests.post(
                self.config.token_url,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                data=form,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during {action}: {e}")
            raise error_cls(f"Network error during {action}: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                f"Unparsable response during {action}: "
                f"{response.status_code} - {response.text}"
            )
            raise error_cls(
                f"Invalid response from token endpoint ({response.status_code})"
            ) from e

        if not isinstance(body, dict):
            logger.error(f"Unexpected response during {action}: {body!r}")
            raise error_cls("Invalid response from token endpoint")

        if "error" in body:
            logger.error(f"Error from {action}: {body}")
            message = body.get("message") or body.get("hint") or body["error"]
            raise error_cls(f"{action.capitalize()} failed: {message}")

        if not response.ok:
            logger.error(f"{action.capitalize()} failed: {response.status_code} - {body}")
            raise error_cls(
                f"{action.capitalize()} failed with status {response.status_code}"
            )

        try:
            return TokenData.from_dict(body)
        except (KeyError, TypeError) as e:
            logger.error(f"Invalid response from token endpoint: {e}")
            raise error_cls(f"Invalid response from token endpoint: {e}") from e

    def exchange_code_for_tokens(self, authorization_code: str, code_verifier: str) -> TokenData:
        """
        Exchange authorization code for access and refresh tokens.

        Called once per authorization attempt, from the redirect listener.
        The result is persisted before it is returned.

        Args:
            authorization_code: Code received on the redirect
            code_verifier: PKCE verifier of the authorization session

        Returns:
            TokenData with access and refresh tokens

        Raises:
            TokenExchangeError: If exchange fails
            TokenStorageError: If the tokens could not be persisted
        """
        logger.info("Exchanging authorization code for tokens")

        token_data = self._request_token(
            {
                "grant_type": "authorization_code",
                "code": authorization_code,
                "code_verifier": code_verifier,
            },
            TokenExchangeError,
            "token exchange",
        )

        self.set(token_data)
        logger.info("Access token granted")
        return token_data

    def refresh_tokens(self) -> TokenData:
        """
        Refresh access token using the stored refresh token.

        Makes exactly one request; retry policy belongs to the caller.

        Returns:
            New TokenData with fresh access token

        Raises:
            TokenRefreshError: If refresh fails
            TokenNotAvailableError: If no refresh token available
            TokenStorageError: If the new tokens could not be persisted
        """
        current_token = self.get()
        if not current_token:
            raise TokenNotAvailableError(
                "No refresh token available. Run authorization flow first."
            )

        logger.info("Refreshing access token")

        token_data = self._request_token(
            {
                "grant_type": "refresh_token",
                "refresh_token": current_token.refresh_token,
            },
            TokenRefreshError,
            "token refresh",
        )

        self.set(token_data)
        logger.info("Successfully refreshed access token")
        return token_data

    def get_access_token(self) -> str:
        """
        Get the current access token.

        Returns:
            Access token string

        Raises:
            TokenNotAvailableError: If no token is stored
        """
        token = self.get()
        if not token:
            raise TokenNotAvailableError(
                "No tokens available. Run authorization flow first."
            )
        return token.access_token

    def is_authorized(self) -> bool:
        """Check if a token record is available."""
        return self.get() is not None

    def get_token_status(self) -> dict:
        """
        Get current token status for diagnostics.

        Returns:
            Dictionary with token status information:
            - authorized: Whether we have tokens
            - token_type: Token type (if authorized)
            - expires_in: Lifetime in seconds reported at issue (if authorized)
            - token_file: Where the record is stored
        """
        token = self.get()

        if not token:
            return {
                "authorized": False,
                "message": "No tokens stored",
                "token_file": str(self.storage.token_file),
            }

        return {
            "authorized": True,
            "token_type": token.token_type,
            "expires_in": token.expires_in,
            "token_file": str(self.storage.token_file),
        }
