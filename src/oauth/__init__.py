"""
OAuth 2.0 (PKCE) module for MyAnimeList API integration.

This module implements the authorization-code flow with a "plain" PKCE
challenge against MyAnimeList, with a single-use local redirect listener
and a JSON token file as the only durable state.

Public API:
    MALOAuthConfig: OAuth configuration management
    AuthorizationSession: Per-attempt nonce and PKCE pair
    TokenData: Token data structure
    TokenStorage: File-based token persistence
    TokenManager: Token exchange, refresh and in-memory record
    RedirectListener: Single-use redirect endpoint
    OAuthCoordinator: High-level OAuth interface

Exceptions:
    MALOAuthError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Authorization flow error
    StateMismatchError: Redirect state did not match the session
    AuthorizationDeniedError: Provider returned an error instead of a code
    LauncherError: Browser could not be opened
    TokenExchangeError: Token exchange failed
    TokenRefreshError: Token refresh failed
    TokenNotAvailableError: No valid tokens
    TokenStorageError: Storage operation failed
"""

from .auth_server import (
    AuthorizationResult,
    ListenerState,
    RedirectListener,
    run_authorization_flow,
)
from .config import MALOAuthConfig
from .coordinator import OAuthCoordinator
from .exceptions import (
    AuthorizationDeniedError,
    AuthorizationError,
    ConfigurationError,
    LauncherError,
    MALOAuthError,
    StateMismatchError,
    TokenExchangeError,
    TokenNotAvailableError,
    TokenRefreshError,
    TokenStorageError,
)
from .launcher import build_authorization_url, open_authorization_dialog
from .pkce import AuthorizationSession, begin_session
from .token_manager import TokenManager
from .token_storage import TokenData, TokenStorage

__all__ = [
    # Configuration
    "MALOAuthConfig",
    # Session / launcher
    "AuthorizationSession",
    "begin_session",
    "build_authorization_url",
    "open_authorization_dialog",
    # Token Storage
    "TokenData",
    "TokenStorage",
    # Token Manager
    "TokenManager",
    # Redirect Listener
    "RedirectListener",
    "ListenerState",
    "AuthorizationResult",
    "run_authorization_flow",
    # Coordinator
    "OAuthCoordinator",
    # Exceptions
    "MALOAuthError",
    "ConfigurationError",
    "AuthorizationError",
    "StateMismatchError",
    "AuthorizationDeniedError",
    "LauncherError",
    "TokenExchangeError",
    "TokenRefreshError",
    "TokenNotAvailableError",
    "TokenStorageError",
]
