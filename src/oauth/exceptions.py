"""
OAuth exception classes for MyAnimeList API integration.

This module defines the exception hierarchy for all OAuth-related errors,
providing clear error messages and recovery guidance.
"""


class MALOAuthError(Exception):
    """Base exception for all MyAnimeList OAuth errors."""

    pass


class ConfigurationError(MALOAuthError):
    """OAuth configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(MALOAuthError):
    """OAuth authorization flow error."""

    pass


class StateMismatchError(AuthorizationError):
    """Redirect carried a state parameter that does not match the session nonce."""

    pass


class AuthorizationDeniedError(AuthorizationError):
    """
    Provider redirected back with an error instead of an authorization code.

    Attributes:
        params: Redirect query parameters (state removed)
    """

    def __init__(self, message: str, params: dict = None):
        super().__init__(message)
        self.params = params or {}


class LauncherError(AuthorizationError):
    """The local environment could not open a browser."""

    pass


class TokenExchangeError(MALOAuthError):
    """Failed to exchange authorization code for tokens."""

    pass


class TokenRefreshError(MALOAuthError):
    """Failed to refresh access token using refresh token."""

    pass


class TokenNotAvailableError(MALOAuthError):
    """No valid tokens available (need to authorize first)."""

    pass


class TokenStorageError(MALOAuthError):
    """Token storage operation failed (file I/O error)."""

    pass
