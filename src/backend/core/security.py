"""Security utilities for authenticating raters.

Accounts and logins live in the account service; this API only verifies the
bearer tokens it issues and derives the voting session they belong to.
"""

import hashlib
from typing import Any

from jose import JWTError, jwt

from core.config import settings

# Token issuer and audience for validation
TOKEN_ISSUER = "vizu-api"
TOKEN_AUDIENCE = "vizu-client"


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode
        expected_type: If provided, validates the token type matches

    Returns:
        The decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            audience=TOKEN_AUDIENCE,
        )
        if expected_type and payload.get("type") != expected_type:
            return None
        return payload
    except JWTError:
        return None


def session_id_from_token(token: str, payload: dict[str, Any]) -> str:
    """
    Resolve the voting session a token belongs to.

    Uses the `sid` claim when the account service sets one, otherwise a
    truncated hash of the token itself (one session per token).
    """
    sid = payload.get("sid")
    if sid:
        return str(sid)
    return hashlib.sha256(token.encode()).hexdigest()[:16]
