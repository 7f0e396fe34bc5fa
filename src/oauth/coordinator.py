"""
OAuth coordinator for high-level OAuth operations.

This module provides the main interface for OAuth operations in the
application. It coordinates the authorization flow and token management,
and is the only object the API client needs to talk to.
"""

import logging
from typing import Optional

from .auth_server import AuthorizationResult, run_authorization_flow
from .config import MALOAuthConfig
from .exceptions import AuthorizationError, MALOAuthError, TokenNotAvailableError
from .token_manager import TokenManager
from .token_storage import TokenData, TokenStorage

logger = logging.getLogger(__name__)


class OAuthCoordinator:
    """
    High-level coordinator for OAuth operations.

    Example:
        coordinator = OAuthCoordinator()
        if coordinator.ensure_authorized():
            headers = coordinator.get_authorization_header()
            # Use headers for API calls

    Attributes:
        halted_by: The 403 error that stopped all API requests made through
            this coordinator, or None
    """

    halted_by: Optional[Exception] = None

    def __init__(self, config: Optional[MALOAuthConfig] = None, open_browser: bool = True):
        """
        Initialize OAuth coordinator.

        Args:
            config: OAuth configuration (loads from environment if not provided)
            open_browser: Whether authorization flows open the browser automatically
        """
        self.config = config or MALOAuthConfig.from_env()
        self.open_browser = open_browser
        self.storage = TokenStorage(self.config.token_file)
        self.token_manager = TokenManager(self.config, self.storage)
        self.halted_by = None

    def ensure_authorized(self) -> bool:
        """
        Ensure we have a token record, running the flow once if needed.

        Returns:
            True if authorized (or authorization succeeded), False if failed
        """
        if self.token_manager.is_authorized():
            logger.info("Already authorized")
            return True

        logger.info("Access token was missing or invalid, re-authenticating...")
        return self.run_authorization_flow()

    def run_authorization_flow(self) -> bool:
        """
        Run the complete OAuth authorization flow.

        The token record is re-read from storage afterwards, so the current
        record always reflects what was persisted.

        Returns:
            True if authorization succeeded, False otherwise
        """
        try:
            result: AuthorizationResult = run_authorization_flow(
                self.config, self.token_manager, open_browser=self.open_browser
            )
        except AuthorizationError as e:
            logger.error(f"Authorization failed: {e}")
            return False

        self.token_manager.load()

        if not result.success:
            logger.error(f"Authorization failed: {result.error}")
            return False

        logger.info("Authorization complete! Tokens saved successfully.")
        return True

    def refresh(self) -> bool:
        """
        Refresh the access token without user interaction.

        Returns:
            True if a new token record was obtained, False otherwise
            (the caller decides whether to re-authorize)
        """
        try:
            self.token_manager.refresh_tokens()
            return True
        except MALOAuthError as e:
            logger.warning(f"Failed to refresh access token: {e}")
            return False

    def get_token(self) -> Optional[TokenData]:
        """Current token record, or None if not authorized."""
        return self.token_manager.get()

    def get_access_token(self, authorize: bool = True) -> str:
        """
        Get the current access token, authorizing first if there is none.

        Args:
            authorize: Run the authorization flow when no token is stored

        Returns:
            Access token string

        Raises:
            TokenNotAvailableError: If authorization did not produce a token
        """
        if not authorize:
            return self.token_manager.get_access_token()
        if not self.ensure_authorized():
            raise TokenNotAvailableError(
                "No tokens available and authorization failed."
            )
        return self.token_manager.get_access_token()

    def get_authorization_header(self, authorize: bool = True) -> dict:
        """
        Get Authorization header dict for API requests.

        Args:
            authorize: Run the authorization flow when no token is stored

        Returns:
            Dict with Authorization header: {"Authorization": "Bearer <token>"}

        Raises:
            TokenNotAvailableError: If not authorized
        """
        token = self.get_access_token(authorize=authorize)
        return {"Authorization": f"Bearer {token}"}

    def is_authorized(self) -> bool:
        """Check if a token record is stored."""
        return self.token_manager.is_authorized()

    def get_status(self) -> dict:
        """
        Get current authorization status for diagnostics.

        Returns:
            Dictionary with status information including:
            - authorized: bool
            - token_type: str (if authorized)
            - expires_in: int (if authorized)
            - token_file: str
            - message: str (if not authorized)
        """
        return self.token_manager.get_token_status()

    def revoke(self) -> None:
        """
        Revoke current authorization.

        This deletes the locally stored tokens. It does NOT revoke the
        tokens on MyAnimeList's servers.
        """
        self.token_manager.clear()
        logger.info("Authorization revoked locally. Re-authorization required.")
