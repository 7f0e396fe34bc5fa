"""
Token storage for MyAnimeList OAuth integration.

This module provides file-based token persistence. The token file holds
exactly the JSON object returned by the token endpoint, stored in plaintext
and overwritten atomically on every successful exchange or refresh.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import TokenStorageError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("access_token", "token_type", "expires_in", "refresh_token")


@dataclass
class TokenData:
    """
    Stored OAuth token data.

    Attributes:
        access_token: Short-lived access token for API calls
        token_type: Token type (typically "Bearer")
        expires_in: Token lifetime in seconds from issue time
        refresh_token: Long-lived token for obtaining new access tokens
        raw: Token endpoint response exactly as returned
    """

    access_token: str
    token_type: str
    expires_in: int
    refresh_token: str
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON serialization.

        The raw response is written back unchanged; the typed fields take
        precedence if they were modified.

        Returns:
            Dictionary representation of token data
        """
        data = dict(self.raw)
        data.update(
            access_token=self.access_token,
            token_type=self.token_type,
            expires_in=self.expires_in,
            refresh_token=self.refresh_token,
        )
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "TokenData":
        """
        Create TokenData from a token endpoint response.

        Args:
            data: Dictionary with token data fields

        Returns:
            TokenData instance

        Raises:
            KeyError: If required fields are missing
            TypeError: If data is not an object or fields have wrong types
        """
        if not isinstance(data, dict):
            raise TypeError(f"Token data must be a JSON object, got {type(data).__name__}")

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            raise KeyError(f"Missing token fields: {', '.join(missing)}")

        for name in ("access_token", "token_type", "refresh_token"):
            if not isinstance(data[name], str) or not data[name]:
                raise TypeError(f"{name} must be a non-empty string")

        expires_in = data["expires_in"]
        if isinstance(expires_in, bool) or not isinstance(expires_in, int):
            raise TypeError("expires_in must be an integer")

        return cls(
            access_token=data["access_token"],
            token_type=data["token_type"],
            expires_in=expires_in,
            refresh_token=data["refresh_token"],
            raw=dict(data),
        )


class TokenStorage:
    """
    File-based token storage (plaintext JSON).

    A record is either fully present and valid, or treated as absent:
    missing, unreadable, partial and corrupt files all load as None.
    """

    def __init__(self, token_file: str):
        """
        Initialize token storage.

        Args:
            token_file: Path to token storage file (e.g., auth.json)
        """
        self.token_file = Path(token_file)

    def _set_secure_permissions(self) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            self.token_file.chmod(0o600)
            logger.debug(f"Set secure permissions (600) on {self.token_file}")
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not set secure permissions: {e}")

    def save(self, token_data: TokenData) -> None:
        """
        Save tokens to file, replacing any previous record.

        The JSON is written to a temporary file in the same directory and
        renamed over the target, so readers never observe a partial file.

        Args:
            token_data: Token data to save

        Raises:
            TokenStorageError: If save operation fails
        """
        directory = self.token_file.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{self.token_file.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(token_data.to_dict(), f)
            os.replace(tmp_path, self.token_file)
            tmp_path = None

            self._set_secure_permissions()

            logger.info(f"Tokens saved to {self.token_file}")
        except (IOError, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save tokens: {e}")
            raise TokenStorageError(f"Failed to save tokens: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def load(self) -> Optional[TokenData]:
        """
        Load tokens from file.

        Returns:
            TokenData if file exists and is valid, None otherwise

        Notes:
            - Returns None if file doesn't exist (normal on first run)
            - Returns None if file is corrupted or incomplete (logs warning)
            - Does not raise exceptions for missing/corrupted files
        """
        if not self.token_file.exists():
            logger.debug(f"No token file found at {self.token_file}")
            return None

        try:
            with open(self.token_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            token_data = TokenData.from_dict(data)
            logger.debug(f"Tokens loaded from {self.token_file}")
            return token_data

        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None
        except (IOError, OSError) as e:
            logger.warning(f"Could not read token file: {e}")
            return None

    def delete(self) -> bool:
        """
        Delete token file.

        Returns:
            True if file was deleted, False if file didn't exist

        Raises:
            TokenStorageError: If the file exists but cannot be removed
        """
        if self.token_file.exists():
            try:
                self.token_file.unlink()
                logger.info(f"Token file deleted: {self.token_file}")
                return True
            except (OSError, PermissionError) as e:
                logger.error(f"Failed to delete token file: {e}")
                raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.debug(f"Token file does not exist: {self.token_file}")
        return False

    def exists(self) -> bool:
        """Check if token file exists."""
        return self.token_file.exists()
