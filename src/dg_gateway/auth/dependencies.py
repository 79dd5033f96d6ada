"""FastAPI dependency: require_admin.

Usage in any operator router:
    from src.dg_gateway.auth.dependencies import require_admin

    @router.post("/admin/thing")
    async def thing(admin: str = Depends(require_admin)):
        ...
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.dg_common.errors import AdminAuthError
from src.dg_gateway.auth.jwt_handler import decode_token

# auto_error=False so a missing header goes through AdminAuthError (unified envelope)
_bearer = HTTPBearer(auto_error=False)


async def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Validate the operator Bearer token and return its subject.

    Raises HTTP 401 (AdminAuthError) if the token is missing, invalid,
    expired or not an admin token.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AdminAuthError()
    payload = decode_token(credentials.credentials)
    return payload["sub"]
