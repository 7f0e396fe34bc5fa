"""
Authorization dialog launcher.

Builds the MyAnimeList authorize URL for an authorization session and
hands it to the user's default browser.
"""

import logging
import webbrowser
from urllib.parse import urlencode

from .config import MALOAuthConfig
from .exceptions import LauncherError
from .pkce import CODE_CHALLENGE_METHOD, AuthorizationSession

logger = logging.getLogger(__name__)


def build_authorization_url(config: MALOAuthConfig, session: AuthorizationSession) -> str:
    """
    Generate the MyAnimeList authorization URL.

    Args:
        config: OAuth configuration
        session: Current authorization session

    Returns:
        Complete authorization URL with query parameters
    """
    params = {
        "state": session.nonce,
        "response_type": "code",
        "client_id": config.client_id,
        "code_challenge": session.code_challenge,
        "code_challenge_method": CODE_CHALLENGE_METHOD,
    }
    return f"{config.authorization_url}?{urlencode(params)}"


def open_authorization_dialog(config: MALOAuthConfig, session: AuthorizationSession) -> str:
    """
    Open the authorization page in the default browser.

    Does not wait for the browser; the redirect listener picks up the result.

    Args:
        config: OAuth configuration
        session: Current authorization session

    Returns:
        The URL that was opened

    Raises:
        LauncherError: If no browser could be launched
    """
    url = build_authorization_url(config, session)
    logger.info(f"Opening authorization page: {config.authorization_url}")

    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise LauncherError(f"Could not open browser: {e}") from e

    if not opened:
        raise LauncherError("No runnable browser found")

    return url
