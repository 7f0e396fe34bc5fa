"""Tests for OAuth exceptions."""

import pytest

from src.oauth.exceptions import (
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


class TestOAuthExceptions:
    """Tests for OAuth exception hierarchy."""

    def test_mal_oauth_error_is_base_exception(self):
        """MALOAuthError is base for all OAuth errors."""
        error = MALOAuthError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize(
        "error_cls",
        [
            ConfigurationError,
            AuthorizationError,
            TokenExchangeError,
            TokenRefreshError,
            TokenNotAvailableError,
            TokenStorageError,
        ],
    )
    def test_errors_inherit_from_base(self, error_cls):
        """Every OAuth error inherits from MALOAuthError."""
        error = error_cls("boom")
        assert isinstance(error, MALOAuthError)
        assert str(error) == "boom"

    @pytest.mark.parametrize("error_cls", [StateMismatchError, LauncherError])
    def test_flow_errors_are_authorization_errors(self, error_cls):
        """Flow-specific errors are AuthorizationErrors."""
        assert issubclass(error_cls, AuthorizationError)

    def test_authorization_denied_error_keeps_params(self):
        """AuthorizationDeniedError carries the redirect parameters."""
        error = AuthorizationDeniedError("denied", {"error": "access_denied"})

        assert isinstance(error, AuthorizationError)
        assert error.params == {"error": "access_denied"}
        assert str(error) == "denied"

    def test_authorization_denied_error_defaults_to_empty_params(self):
        """AuthorizationDeniedError params default to an empty dict."""
        assert AuthorizationDeniedError("denied").params == {}

    def test_can_catch_all_oauth_errors_with_base(self):
        """All OAuth errors can be caught with MALOAuthError."""
        with pytest.raises(MALOAuthError):
            raise StateMismatchError("mismatch")

        with pytest.raises(MALOAuthError):
            raise TokenRefreshError("refresh failed")
