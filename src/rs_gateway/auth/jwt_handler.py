"""JWT issuing and verification for console administrators.

Tokens carry the admin id in `sub` and the username in `usr`; the username
is what ledger entries, blocks and moderation logs record as the actor.
HS256 with a shared JWT_SECRET. There is no revocation list: disabling an
admin takes effect on the next request because get_current_admin re-reads
the admin row.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.rs_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

_ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_TTL = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
REFRESH_TOKEN_TTL = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


def _issue(admin_id: str, username: str, token_type: str, ttl: timedelta) -> str:
    now = datetime.now(UTC)
    claims = {
        "sub": admin_id,
        "usr": username,
        "type": token_type,
        "iat": now,
        "exp": now + ttl,
    }
    return str(jwt.encode(claims, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(admin_id: str, username: str) -> str:
    return _issue(admin_id, username, "access", ACCESS_TOKEN_TTL)


def create_refresh_token(admin_id: str, username: str) -> str:
    return _issue(admin_id, username, "refresh", REFRESH_TOKEN_TTL)


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Decode *token* and insist on `type == expected_type`.

    Raises InvalidCredentialsError for a bad access token and
    InvalidRefreshTokenError for a bad refresh token.
    """
    error = InvalidCredentialsError if expected_type == "access" else InvalidRefreshTokenError
    try:
        claims: dict[str, str] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[_ALGORITHM]
        )
    except JWTError:
        raise error() from None
    if claims.get("type") != expected_type or not claims.get("sub"):
        raise error()
    return claims
