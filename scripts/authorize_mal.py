#!/usr/bin/env python3
"""
MyAnimeList OAuth Authorization Script

This script runs the browser-based OAuth authorization flow with
MyAnimeList. It:
- Opens the MAL authorization page in your browser
- Listens on http://localhost:5000/ for the redirect
- Exchanges the authorization code for tokens

After successful authorization, tokens are saved to auth.json (or
MAL_TOKEN_FILE) and are picked up automatically by the API client.

Usage:
    # Run authorization flow
    python scripts/authorize_mal.py

    # Show whether tokens are stored
    python scripts/authorize_mal.py --status

    # Delete stored tokens
    python scripts/authorize_mal.py --revoke

Prerequisites:
    - Environment variables (or a .env file):
        MAL_CLIENT_ID="your_client_id"
        MAL_CLIENT_SECRET="your_client_secret"   # only if your app has one
    - The MAL app's redirect URL set to http://localhost:5000/
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.oauth.coordinator import OAuthCoordinator
from src.oauth.exceptions import ConfigurationError, TokenStorageError

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def authorize(open_browser: bool = True, force: bool = False) -> int:
    """
    Run the authorization flow.

    Args:
        open_browser: Whether to automatically open browser
        force: Authorize even if tokens are already stored

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        coordinator = OAuthCoordinator(open_browser=open_browser)

        if coordinator.is_authorized() and not force:
            logger.info("Already authorized")
            logger.info(f"   Tokens stored in: {coordinator.config.token_file}")
            logger.info("   Use --force to authorize again, or --revoke to delete them")
            return 0

        logger.info("Starting OAuth authorization flow...")
        if coordinator.run_authorization_flow():
            logger.info("Authorization successful!")
            logger.info(f"   Tokens saved to: {coordinator.config.token_file}")
            return 0

        logger.error("Authorization failed")
        logger.error("   Please check the error messages above and try again")
        return 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1


def status() -> int:
    """
    Print the stored authorization status.

    Returns:
        Exit code (0 if authorized, 1 otherwise)
    """
    try:
        coordinator = OAuthCoordinator()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    info = coordinator.get_status()
    if not info["authorized"]:
        print(f"Not authorized ({info['message']}, file: {info['token_file']})")
        return 1

    print("Authorized")
    print(f"  Token file:  {info['token_file']}")
    print(f"  Token type:  {info['token_type']}")
    print(f"  Lifetime:    {info['expires_in']}s at issue")
    return 0


def revoke() -> int:
    """
    Revoke current authorization.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        coordinator = OAuthCoordinator()

        if not coordinator.is_authorized():
            logger.info("No authorization found to revoke")
            return 0

        coordinator.revoke()
        logger.info("Authorization revoked")
        logger.info(f"   Token file deleted: {coordinator.config.token_file}")
        return 0

    except (ConfigurationError, TokenStorageError) as e:
        logger.error(f"Error revoking authorization: {e}")
        return 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="MyAnimeList OAuth Authorization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run authorization flow
  python scripts/authorize_mal.py

  # Revoke existing authorization
  python scripts/authorize_mal.py --revoke
        """,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--revoke",
        action="store_true",
        help="Revoke existing authorization and delete tokens",
    )
    group.add_argument(
        "--status",
        action="store_true",
        help="Show whether tokens are stored",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Run the flow even if tokens are already stored",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't automatically open browser (display URL only)",
    )

    args = parser.parse_args()

    if args.revoke:
        return revoke()

    if args.status:
        return status()

    return authorize(open_browser=not args.no_browser, force=args.force)


if __name__ == "__main__":
    sys.exit(main())
