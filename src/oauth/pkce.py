"""
Per-attempt authorization session: state nonce and PKCE pair.

MyAnimeList only supports the "plain" PKCE transform, so the code
challenge sent to the authorize endpoint is the code verifier itself.
"""

import secrets
from dataclasses import dataclass

# 16 random bytes -> 22 URL-safe characters
NONCE_BYTES = 16

# 96 random bytes -> 128 URL-safe characters, the maximum verifier length
VERIFIER_BYTES = 96

CODE_CHALLENGE_METHOD = "plain"


@dataclass(frozen=True)
class AuthorizationSession:
    """
    State for a single authorization attempt.

    Attributes:
        nonce: Value sent as ``state`` and expected back on the redirect
        code_verifier: PKCE verifier sent to the token endpoint
        code_challenge: PKCE challenge sent to the authorize endpoint
    """

    nonce: str
    code_verifier: str
    code_challenge: str

    def matches(self, state: str) -> bool:
        """Check a redirect's state parameter against this session's nonce."""
        if not state:
            return False
        return secrets.compare_digest(state.encode("utf-8"), self.nonce.encode("utf-8"))


def begin_session() -> AuthorizationSession:
    """
    Create a fresh authorization session.

    Returns:
        AuthorizationSession with a random nonce and plain PKCE pair
    """
    verifier = secrets.token_urlsafe(VERIFIER_BYTES)
    return AuthorizationSession(
        nonce=secrets.token_urlsafe(NONCE_BYTES),
        code_verifier=verifier,
        code_challenge=verifier,
    )
