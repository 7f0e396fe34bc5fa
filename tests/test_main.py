"""Tests for the anime list CLI."""

import json
import logging
from unittest import mock

import pytest

from src.main import format_summary, main
from src.mal import client as mal_client
from src.mal.exceptions import MALForbiddenError, MALNotFoundError
from src.oauth.exceptions import ConfigurationError

ANIME_LIST = {
    "data": [
        {"node": {"id": 5114, "title": "Fullmetal Alchemist: Brotherhood"}},
        {"node": {"id": 9253, "title": "Steins;Gate"}},
    ],
    "paging": {},
}


def test_format_summary():
    summary = format_summary(ANIME_LIST)

    lines = summary.splitlines()
    assert lines[0] == "2 entries"
    assert "5114" in lines[1]
    assert "Steins;Gate" in lines[2]


def test_format_summary_empty():
    assert format_summary({}) == "0 entries"


class TestMain:
    """Tests for the main entry point."""

    @pytest.fixture(autouse=True)
    def restore_client_log_level(self):
        level = mal_client.logger.level
        yield
        mal_client.logger.setLevel(level)

    @mock.patch("src.main.MALClient")
    @mock.patch("src.main.OAuthCoordinator")
    def test_requests_are_logged_without_verbose(self, mock_coordinator, mock_client_class):
        """API request lines are shown at the default log level."""
        mock_client_class.return_value.get_anime_list.return_value = ANIME_LIST

        with mock.patch("sys.argv", ["mal-animelist"]):
            main()

        assert mal_client.logger.level == logging.INFO

    @mock.patch("src.main.MALClient")
    @mock.patch("src.main.OAuthCoordinator")
    def test_prints_json(self, mock_coordinator, mock_client_class, capsys):
        mock_client_class.return_value.get_anime_list.return_value = ANIME_LIST

        with mock.patch("sys.argv", ["mal-animelist", "--limit", "2"]):
            main()

        printed = json.loads(capsys.readouterr().out)
        assert printed == ANIME_LIST["data"]
        mock_client_class.return_value.get_anime_list.assert_called_once_with(
            user_name="@me", status="completed", sort="list_updated_at", limit=2
        )
        mock_coordinator.assert_called_once_with(open_browser=True)

    @mock.patch("src.main.MALClient")
    @mock.patch("src.main.OAuthCoordinator")
    def test_no_browser_flag(self, mock_coordinator, mock_client_class, capsys):
        mock_client_class.return_value.get_anime_list.return_value = ANIME_LIST

        with mock.patch("sys.argv", ["mal-animelist", "--no-browser", "--output", "summary"]):
            main()

        mock_coordinator.assert_called_once_with(open_browser=False)
        assert capsys.readouterr().out.startswith("2 entries")

    @mock.patch("src.main.MALClient")
    @mock.patch("src.main.OAuthCoordinator")
    def test_failed_startup_authorization(self, mock_coordinator, mock_client_class):
        """A failed startup authorization exits before any API call."""
        mock_coordinator.return_value.ensure_authorized.return_value = False

        with mock.patch("sys.argv", ["mal-animelist"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        mock_client_class.return_value.get_anime_list.assert_not_called()

    @pytest.mark.parametrize(
        "error, exit_code",
        [
            (ConfigurationError("Missing MyAnimeList OAuth credentials"), 1),
            (MALForbiddenError({"error": "forbidden"}), 2),
            (MALNotFoundError({"error": "not_found"}), 2),
        ],
    )
    @mock.patch("src.main.MALClient")
    @mock.patch("src.main.OAuthCoordinator")
    def test_error_exit_codes(self, mock_coordinator, mock_client_class, error, exit_code):
        mock_client_class.return_value.get_anime_list.side_effect = error

        with mock.patch("sys.argv", ["mal-animelist"]):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == exit_code
