"""
OAuth configuration for MyAnimeList API integration.

This module provides configuration management for OAuth 2.0 (PKCE)
authentication with MyAnimeList. Configuration can be loaded from
environment variables (optionally via a local .env file) or provided
programmatically.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError


@dataclass
class MALOAuthConfig:
    """
    Configuration for MyAnimeList OAuth 2.0.

    Attributes:
        client_id: MAL API client ID from https://myanimelist.net/apiconfig
        client_secret: MAL API client secret (optional, "other" app types have none)
        callback_host: Host the local redirect listener binds to
        callback_port: Port for the redirect listener (default: 5000)
        callback_path: URL path the provider redirects to
        authorization_url: MAL OAuth authorization endpoint
        token_url: MAL OAuth token endpoint
        token_file: Path of the persisted token file
        callback_timeout: Seconds to wait for the redirect (None waits indefinitely)
        request_timeout: Timeout in seconds for outbound HTTP calls
    """

    # Required - from MAL API config page
    client_id: str
    client_secret: Optional[str] = None

    # Redirect listener
    callback_host: str = "localhost"
    callback_port: int = 5000
    callback_path: str = "/"

    # MAL OAuth endpoints
    authorization_url: str = "https://myanimelist.net/v1/oauth2/authorize"
    token_url: str = "https://myanimelist.net/v1/oauth2/token"

    token_file: str = "auth.json"

    callback_timeout: Optional[float] = None
    request_timeout: float = 30

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not isinstance(self.callback_port, int) or not (
            1 <= self.callback_port <= 65535
        ):
            raise ConfigurationError(
                f"callback_port must be between 1 and 65535, got {self.callback_port}"
            )

        if not self.callback_path.startswith("/"):
            raise ConfigurationError("callback_path must start with '/'")

        if self.callback_timeout is not None and self.callback_timeout <= 0:
            raise ConfigurationError("callback_timeout must be positive")

        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

    @property
    def callback_url(self) -> str:
        """
        Full redirect URL registered with the MAL application.

        Returns:
            Complete callback URL (e.g., http://localhost:5000/)
        """
        return f"http://{self.callback_host}:{self.callback_port}{self.callback_path}"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "MALOAuthConfig":
        """
        Load configuration from environment variables.

        A ``.env`` file is loaded first (without overriding variables that
        are already set).

        Required environment variables:
            MAL_CLIENT_ID (or CLIENT_ID): MAL API client ID

        Optional environment variables:
            MAL_CLIENT_SECRET (or CLIENT_SECRET): MAL API client secret
            MAL_CALLBACK_HOST: Redirect listener host (default: localhost)
            MAL_CALLBACK_PORT: Redirect listener port (default: 5000)
            MAL_TOKEN_FILE: Token file path (default: auth.json)
            MAL_CALLBACK_TIMEOUT: Seconds to wait for the redirect (default: no limit)

        Args:
            dotenv_path: Explicit .env path (default: search from the working directory)

        Returns:
            MALOAuthConfig instance

        Raises:
            ConfigurationError: If required variables are missing or invalid
        """
        load_dotenv(dotenv_path)

        client_id = os.environ.get("MAL_CLIENT_ID") or os.environ.get("CLIENT_ID")
        client_secret = os.environ.get("MAL_CLIENT_SECRET") or os.environ.get(
            "CLIENT_SECRET"
        )

        if not client_id:
            raise ConfigurationError(
                "Missing MyAnimeList OAuth credentials. Set environment variables "
                "(or add them to .env):\n"
                "  MAL_CLIENT_ID=your_client_id\n"
                "  MAL_CLIENT_SECRET=your_client_secret  # optional\n"
                "\n"
                "Get credentials from: https://myanimelist.net/apiconfig"
            )

        timeout = os.environ.get("MAL_CALLBACK_TIMEOUT")
        try:
            port = int(os.environ.get("MAL_CALLBACK_PORT", "5000"))
            callback_timeout = float(timeout) if timeout else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            client_id=client_id,
            client_secret=client_secret or None,
            callback_host=os.environ.get("MAL_CALLBACK_HOST", "localhost"),
            callback_port=port,
            token_file=os.environ.get("MAL_TOKEN_FILE", "auth.json"),
            callback_timeout=callback_timeout,
        )
