"""JWT token creation and verification for operator (admin) endpoints.

Wallet users never authenticate against this service; the only bearer
tokens are short-lived operator tokens carrying type="admin".

HS256 with a single shared JWT_SECRET. No revocation: a token is valid
until it expires.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.dg_common.errors import AdminAuthError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ADMIN_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)

ADMIN_TOKEN_TYPE = "admin"


def create_admin_token(subject: str) -> str:
    """Issue an operator token (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "type": ADMIN_TOKEN_TYPE,
        "iat": now,
        "exp": now + _ADMIN_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str, expected_type: str = ADMIN_TOKEN_TYPE) -> dict[str, str]:
    """Decode and validate a JWT token.

    Raises:
        AdminAuthError: invalid signature, expired, or wrong "type" claim.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise AdminAuthError("Invalid or expired token") from None

    if payload.get("type") != expected_type:
        raise AdminAuthError("Invalid token type")
    if not payload.get("sub"):
        raise AdminAuthError("Token has no subject")
    return payload
