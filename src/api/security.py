"""Bearer-token verification for protected routes.

Tokens are checked against the same secret, issuer and audience the
TokenIssuer signs with, with no clock-skew allowance.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from api.dependencies import get_settings
from domain.model.user import Role
from services.token_issuer import JWT_ALGORITHM
from utils.config import JWTSettings, Settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def verify_token(token: str, settings: JWTSettings) -> Optional[dict]:
    """Verify signature, issuer, audience and lifetime. Return the claims or None."""
    try:
        claims = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[JWT_ALGORITHM],
            audience=settings.audience,
            issuer=settings.issuer,
        )
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        return None
    if not claims.get("sub"):
        return None
    return claims


def require_roles(*roles: Role):
    """Dependency factory: authenticated caller whose role claim is one of ``roles``."""
    allowed = {role.value for role in roles}

    def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        settings: Settings = Depends(get_settings),
    ) -> dict:
        if not credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Bearer"},
            )

        claims = verify_token(credentials.credentials, settings.jwt)
        if claims is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if claims.get("role") not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return claims

    return dependency
