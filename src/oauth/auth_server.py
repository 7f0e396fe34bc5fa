"""
OAuth redirect listener for MyAnimeList API integration.

This module provides a local HTTP endpoint that receives the provider's
redirect at the end of the browser-based authorization step, checks the
state nonce, and exchanges the authorization code for tokens while the
browser connection is still open.

IMPORTANT: The listener is single-use. It serves one callback, closes its
socket and cannot be restarted; every authorization attempt gets a new
listener and a new session.

The listener runs in the calling thread: ``serve()`` blocks until the
callback arrives (or the optional timeout expires) and returns exactly once.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from flask import Flask, Response, jsonify, request
from werkzeug.serving import BaseWSGIServer, WSGIRequestHandler, make_server

from .config import MALOAuthConfig
from .exceptions import (
    AuthorizationDeniedError,
    AuthorizationError,
    LauncherError,
    MALOAuthError,
    StateMismatchError,
    TokenExchangeError,
    TokenStorageError,
)
from .launcher import build_authorization_url, open_authorization_dialog
from .pkce import AuthorizationSession, begin_session
from .token_manager import TokenManager
from .token_storage import TokenData

logger = logging.getLogger(__name__)


class ListenerState(str, Enum):
    """States of the redirect listener."""

    LISTENING = "listening"
    REJECTED = "rejected"
    FAILED = "failed"
    EXCHANGING = "exchanging"
    COMPLETE = "complete"


TERMINAL_STATES = frozenset(
    {ListenerState.REJECTED, ListenerState.FAILED, ListenerState.COMPLETE}
)


@dataclass
class AuthorizationResult:
    """
    Result of one authorization attempt.

    Attributes:
        state: Terminal listener state
        token: Token record (COMPLETE only)
        error: Why the attempt did not complete (REJECTED/FAILED only)
    """

    state: ListenerState
    token: Optional[TokenData] = None
    error: Optional[MALOAuthError] = None

    @property
    def success(self) -> bool:
        return self.state is ListenerState.COMPLETE


SUCCESS_PAGE = """<html>
<head><title>Authorization Successful</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px;">
    <h1 style="color: #4caf50;">Authorization Successful</h1>
    <p>OK, you can close this tab and return to the command line.</p>
</body>
</html>"""

EXCHANGE_FAILED_PAGE = """<html>
<head><title>Authorization Failed</title></head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px;">
    <h1 style="color: #d32f2f;">Authorization Failed</h1>
    <p>Could not obtain an access token from MyAnimeList.</p>
    <p style="margin-top: 30px; color: #666;">Check the command line for details. You can close this window.</p>
</body>
</html>"""


class RedirectRequestHandler(WSGIRequestHandler):
    """Request handler that logs the path only; the query carries the nonce and code."""

    def log_request(self, code="-", size="-") -> None:
        logger.debug(f"{self.command} {urlsplit(self.path).path} {code}")


class RedirectListener:
    """
    Single-use local HTTP endpoint for the OAuth redirect.

    State machine::

        LISTENING -> REJECTED                 (state nonce mismatch)
        LISTENING -> FAILED                   (no code: provider error, or timeout)
        LISTENING -> EXCHANGING -> COMPLETE   (code exchanged and persisted)
        LISTENING -> EXCHANGING -> FAILED     (exchange or persistence failed)

    Requests to paths other than the callback path get a 404 and leave
    the listener waiting.
    """

    def __init__(
        self,
        config: MALOAuthConfig,
        session: AuthorizationSession,
        token_manager: TokenManager,
    ):
        """
        Initialize the listener (does not bind yet).

        Args:
            config: OAuth configuration (host, port, path, timeout)
            session: Authorization session the redirect must match
            token_manager: Used for the code exchange and to persist tokens
        """
        self.config = config
        self.session = session
        self.token_manager = token_manager
        self.state = ListenerState.LISTENING
        self.result: Optional[AuthorizationResult] = None
        self.callbacks_served = 0
        self._server: Optional[BaseWSGIServer] = None
        self._used = False

        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)
        self.app.add_url_rule(
            self.config.callback_path,
            "oauth_callback",
            self._handle_callback,
            methods=["GET"],
        )

    def _finish(
        self,
        state: ListenerState,
        token: Optional[TokenData] = None,
        error: Optional[MALOAuthError] = None,
    ) -> None:
        """Move to a terminal state and record the result (first call wins)."""
        if self.result is not None:
            return
        self.state = state
        self.result = AuthorizationResult(state=state, token=token, error=error)

    def _handle_callback(self) -> Response:
        """Handle the provider's redirect."""
        self.callbacks_served += 1
        if self.state is not ListenerState.LISTENING:
            return Response("Authorization already handled", status=409, mimetype="text/plain")

        params = request.args.to_dict()
        state = params.pop("state", None)

        if not self.session.matches(state):
            logger.warning("Rejected redirect: invalid state parameter")
            self._finish(
                ListenerState.REJECTED,
                error=StateMismatchError("Redirect state does not match session nonce"),
            )
            return Response("Invalid state parameter", status=400, mimetype="text/plain")

        code = params.get("code")
        if not code:
            logger.error(f"Authentication failed: {params}")
            self._finish(
                ListenerState.FAILED,
                error=AuthorizationDeniedError(
                    f"Authorization denied: {params.get('error', 'no code returned')}",
                    params,
                ),
            )
            response = jsonify(params)
            response.status_code = 400
            return response

        logger.info("Authentication successful, getting access token...")
        self.state = ListenerState.EXCHANGING

        try:
            token = self.token_manager.exchange_code_for_tokens(
                code, self.session.code_verifier
            )
        except (TokenExchangeError, TokenStorageError) as e:
            logger.error(f"Failed to obtain access token: {e}")
            self._finish(ListenerState.FAILED, error=e)
            return Response(EXCHANGE_FAILED_PAGE, status=502, content_type="text/html")

        self._finish(ListenerState.COMPLETE, token=token)
        logger.info("Access token granted. Authorization complete.")
        return Response(SUCCESS_PAGE, status=200, content_type="text/html")

    @property
    def authorization_url(self) -> str:
        """Authorization URL for this listener's session."""
        return build_authorization_url(self.config, self.session)

    def bind(self) -> None:
        """
        Bind the listening socket.

        Called before the browser is opened so the redirect cannot arrive
        before anything is listening.

        Raises:
            AuthorizationError: If the listener was already used or the
                port cannot be bound
        """
        if self._used or self._server is not None:
            raise AuthorizationError("Redirect listener is single-use")

        try:
            self._server = make_server(
                self.config.callback_host,
                self.config.callback_port,
                self.app,
                request_handler=RedirectRequestHandler,
            )
        except (OSError, SystemExit) as e:
            # werkzeug reports bind failures with sys.exit(1)
            raise AuthorizationError(
                f"Could not listen on {self.config.callback_host}:"
                f"{self.config.callback_port}: {e}"
            ) from e

        logger.info(f"Listening for OAuth redirect on {self.config.callback_url}")

    def serve(self) -> AuthorizationResult:
        """
        Wait for the callback and resolve the attempt.

        Returns:
            AuthorizationResult in a terminal state

        Raises:
            AuthorizationError: If the listener was already used or cannot bind
        """
        if self._used:
            raise AuthorizationError("Redirect listener is single-use")
        if self._server is None:
            self.bind()
        self._used = True

        timeout = self.config.callback_timeout
        deadline = time.monotonic() + timeout if timeout else None

        try:
            while self.result is None:
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        logger.warning(f"Timeout waiting for callback after {timeout}s")
                        self._finish(
                            ListenerState.FAILED,
                            error=AuthorizationError(
                                f"No callback received within {timeout} seconds"
                            ),
                        )
                        break
                    self._server.timeout = remaining

                self._server.handle_request()

                if self.result is None and self.callbacks_served:
                    # callback handler raised before reaching a terminal state
                    self._finish(
                        ListenerState.FAILED,
                        error=AuthorizationError("Callback handling failed"),
                    )
        finally:
            self._server.server_close()
            logger.debug("Redirect listener closed")

        return self.result


def run_authorization_flow(
    config: MALOAuthConfig, token_manager: TokenManager, open_browser: bool = True
) -> AuthorizationResult:
    """
    Run the complete browser-based authorization flow.

    This function:
    1. Begins a new authorization session (nonce + PKCE pair)
    2. Binds the redirect listener
    3. Opens the browser (or displays the URL)
    4. Waits for the redirect and exchanges the code
    5. Returns the terminal result

    Args:
        config: OAuth configuration
        token_manager: Token manager that exchanges and persists tokens
        open_browser: Whether to automatically open browser (default: True)

    Returns:
        AuthorizationResult with the token record or the failure reason

    Raises:
        AuthorizationError: If the redirect listener cannot bind its port
    """
    session = begin_session()
    listener = RedirectListener(config, session, token_manager)
    listener.bind()

    auth_url = listener.authorization_url
    print("\nPlease authorize the application by visiting:")
    print(f"\n  {auth_url}\n")

    if open_browser:
        try:
            open_authorization_dialog(config, session)
        except LauncherError as e:
            logger.warning(f"Could not open browser automatically: {e}")
            print("Copy the URL above and paste it in your browser.")

    print("Waiting for authorization...")

    result = listener.serve()

    if result.success:
        logger.info("Authorization flow completed successfully")
    else:
        logger.error(f"Authorization flow ended in {result.state.value}: {result.error}")

    return result
