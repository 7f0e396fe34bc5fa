#!/usr/bin/env python3
"""
MyAnimeList Anime List CLI Application.

This application authorizes against MyAnimeList (opening the browser the
first time) and prints the authorized user's anime list.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict

from .mal import client as mal_client
from .mal.client import MALClient
from .mal.endpoints import ANIME_LIST_SORTS, ANIME_LIST_STATUSES
from .mal.exceptions import MALAPIError, MALForbiddenError
from .oauth.coordinator import OAuthCoordinator
from .oauth.exceptions import ConfigurationError

# Configure logging
logging.basicConfig(
    level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def main() -> None:
    """Main entry point for the application."""
    parser = argparse.ArgumentParser(
        description="Print a MyAnimeList user's anime list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                 # Last 10 completed entries
  %(prog)s --status watching --limit 25    # Currently watching
  %(prog)s --output summary                # One line per entry
  %(prog)s --verbose                       # Also log authorization activity

Configuration:
  Set MAL_CLIENT_ID (and MAL_CLIENT_SECRET if your app has one) in the
  environment or in a .env file. Tokens are stored in auth.json.

  Register an API client at https://myanimelist.net/apiconfig
  with redirect URL http://localhost:5000/
        """,
    )

    parser.add_argument("--user", default="@me", help="MAL user name (default: @me)")
    parser.add_argument(
        "--status",
        default="completed",
        choices=ANIME_LIST_STATUSES,
        help="List status filter (default: completed)",
    )
    parser.add_argument(
        "--sort",
        default="list_updated_at",
        choices=ANIME_LIST_SORTS,
        help="Sort order (default: list_updated_at)",
    )
    parser.add_argument("--limit", type=int, default=10, help="Number of entries (default: 10)")
    parser.add_argument(
        "--output",
        type=str,
        default="json",
        choices=["json", "summary"],
        help="Output format (default: json)",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't automatically open browser when authorization is needed",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    # every API request is shown
    mal_client.logger.setLevel(logging.INFO)
    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        coordinator = OAuthCoordinator(open_browser=not args.no_browser)
        if not coordinator.ensure_authorized():
            print("Authorization failed. Run scripts/authorize_mal.py to retry.", file=sys.stderr)
            sys.exit(1)

        client = MALClient(coordinator)

        anime_list = client.get_anime_list(
            user_name=args.user, status=args.status, sort=args.sort, limit=args.limit
        )

        if args.output == "json":
            print(json.dumps(anime_list.get("data", []), indent=2, ensure_ascii=False))
        else:
            print(format_summary(anime_list))

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    except MALForbiddenError as e:
        print(f"Forbidden (possible rate limit or ban), stopping: {e}", file=sys.stderr)
        sys.exit(2)

    except MALAPIError as e:
        print(f"API error: {e}", file=sys.stderr)
        sys.exit(2)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        sys.exit(130)


def format_summary(anime_list: Dict[str, Any]) -> str:
    """
    Format an anime list response as one line per entry.

    Args:
        anime_list: Response of the user anime list endpoint

    Returns:
        Formatted string
    """
    entries = anime_list.get("data", [])
    lines = [f"{len(entries)} entries"]
    for entry in entries:
        node = entry.get("node", {})
        lines.append(f"  [{node.get('id', '?'):>6}] {node.get('title', '(untitled)')}")
    return "\n".join(lines)


if __name__ == "__main__":
    main()
