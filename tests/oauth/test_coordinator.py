"""Tests for OAuth coordinator module."""

import tempfile
from pathlib import Path
from unittest import mock

import pytest

from src.oauth.auth_server import AuthorizationResult, ListenerState
from src.oauth.config import MALOAuthConfig
from src.oauth.coordinator import OAuthCoordinator
from src.oauth.exceptions import (
    AuthorizationDeniedError,
    AuthorizationError,
    TokenNotAvailableError,
    TokenRefreshError,
)
from src.oauth.token_storage import TokenData

TOKEN_RESPONSE = {
    "access_token": "T1",
    "token_type": "Bearer",
    "expires_in": 3600,
    "refresh_token": "R1",
}


class TestOAuthCoordinator:
    """Tests for OAuthCoordinator class."""

    @pytest.fixture
    def config(self):
        """Create test OAuth config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield MALOAuthConfig(
                client_id="test_client_id",
                token_file=str(Path(tmpdir) / "auth.json"),
            )

    @pytest.fixture
    def coordinator(self, config):
        return OAuthCoordinator(config)

    def _complete_flow(self, coordinator):
        """Side effect for run_authorization_flow that persists T1."""

        def flow(config, token_manager, open_browser=True):
            token = TokenData.from_dict(TOKEN_RESPONSE)
            token_manager.storage.save(token)
            return AuthorizationResult(state=ListenerState.COMPLETE, token=token)

        return flow

    def test_coordinator_initialization(self, config):
        """OAuthCoordinator initializes correctly."""
        coordinator = OAuthCoordinator(config)

        assert coordinator.config == config
        assert coordinator.open_browser is True
        assert coordinator.storage is not None
        assert coordinator.token_manager.storage is coordinator.storage
        assert coordinator.halted_by is None

    @mock.patch("src.oauth.config.load_dotenv")
    @mock.patch.dict("os.environ", {"MAL_CLIENT_ID": "env_id"}, clear=True)
    def test_coordinator_loads_config_from_env(self, mock_dotenv):
        """OAuthCoordinator loads config from environment if not provided."""
        coordinator = OAuthCoordinator()

        assert coordinator.config.client_id == "env_id"

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_ensure_authorized_when_already_authorized(self, mock_run_flow, coordinator):
        """ensure_authorized does not run the flow when a record is stored."""
        coordinator.storage.save(TokenData.from_dict(TOKEN_RESPONSE))

        assert coordinator.ensure_authorized() is True
        mock_run_flow.assert_not_called()

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_ensure_authorized_runs_flow_when_not_authorized(
        self, mock_run_flow, coordinator, config
    ):
        """ensure_authorized runs the flow once and reloads the record."""
        mock_run_flow.side_effect = self._complete_flow(coordinator)

        assert coordinator.ensure_authorized() is True
        mock_run_flow.assert_called_once_with(
            config, coordinator.token_manager, open_browser=True
        )
        assert coordinator.get_token().access_token == "T1"

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_ensure_authorized_returns_false_on_flow_failure(
        self, mock_run_flow, coordinator
    ):
        """ensure_authorized returns False if the flow fails."""
        mock_run_flow.return_value = AuthorizationResult(
            state=ListenerState.FAILED,
            error=AuthorizationDeniedError("denied", {"error": "access_denied"}),
        )

        assert coordinator.ensure_authorized() is False
        mock_run_flow.assert_called_once()

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_run_authorization_flow_respects_open_browser(self, mock_run_flow, config):
        coordinator = OAuthCoordinator(config, open_browser=False)
        mock_run_flow.return_value = AuthorizationResult(state=ListenerState.REJECTED)

        assert coordinator.run_authorization_flow() is False
        assert mock_run_flow.call_args[1]["open_browser"] is False

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_run_authorization_flow_handles_bind_error(self, mock_run_flow, coordinator):
        """A listener that cannot bind is reported as failure."""
        mock_run_flow.side_effect = AuthorizationError("Could not listen on localhost:5000")

        assert coordinator.run_authorization_flow() is False

    def test_refresh_success(self, coordinator):
        coordinator.token_manager.refresh_tokens = mock.Mock()

        assert coordinator.refresh() is True

    def test_refresh_failure_returns_false(self, coordinator):
        coordinator.token_manager.refresh_tokens = mock.Mock(
            side_effect=TokenRefreshError("invalid_grant")
        )

        assert coordinator.refresh() is False

    def test_refresh_without_tokens_returns_false(self, coordinator):
        """No record to refresh is a failed refresh, not an exception."""
        assert coordinator.refresh() is False

    def test_get_authorization_header(self, coordinator):
        coordinator.storage.save(TokenData.from_dict(TOKEN_RESPONSE))

        assert coordinator.get_authorization_header() == {"Authorization": "Bearer T1"}

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_get_access_token_authorizes_when_missing(self, mock_run_flow, coordinator):
        mock_run_flow.side_effect = self._complete_flow(coordinator)

        assert coordinator.get_access_token() == "T1"

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_get_access_token_raises_when_flow_fails(self, mock_run_flow, coordinator):
        mock_run_flow.return_value = AuthorizationResult(state=ListenerState.FAILED)

        with pytest.raises(TokenNotAvailableError):
            coordinator.get_access_token()

    @mock.patch("src.oauth.coordinator.run_authorization_flow")
    def test_get_access_token_without_authorize(self, mock_run_flow, coordinator):
        """authorize=False never starts a flow."""
        with pytest.raises(TokenNotAvailableError):
            coordinator.get_access_token(authorize=False)

        mock_run_flow.assert_not_called()

    def test_get_status(self, coordinator):
        assert coordinator.get_status()["authorized"] is False

        coordinator.storage.save(TokenData.from_dict(TOKEN_RESPONSE))
        coordinator.token_manager.load()

        status = coordinator.get_status()
        assert status["authorized"] is True
        assert status["expires_in"] == 3600

    def test_revoke(self, coordinator):
        coordinator.storage.save(TokenData.from_dict(TOKEN_RESPONSE))
        assert coordinator.is_authorized() is True

        coordinator.revoke()

        assert coordinator.is_authorized() is False
        assert not coordinator.storage.exists()
