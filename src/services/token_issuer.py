"""Signed access-token issuance.

Claims written into every token:
    sub    user id
    email  user email
    role   Admin | User | Guest
    iss    JWTSettings.issuer
    aud    JWTSettings.audience
    iat, nbf, exp

Tokens are HS256-signed with the UTF-8 bytes of JWTSettings.secret_key.
Downstream gateways verify them; this module only builds them.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from domain.model.errors import DomainError, InternalError
from domain.model.token import IssuedToken
from port.user_directory import UserDirectory
from utils.config import JWTSettings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


class TokenIssuer:
    def __init__(self, directory: UserDirectory, settings: JWTSettings):
        self.directory = directory
        self.settings = settings

    def issue(self, user_id: str) -> IssuedToken | None:
        """Build and sign a token for an existing user.

        Returns None when user_id is empty or unknown.
        """
        if not user_id:
            return None

        try:
            user = self.directory.get_by_id(user_id)
        except DomainError:
            raise
        except Exception as e:
            raise InternalError("Failed to load user for token issuance", cause=e) from e

        if user is None:
            logger.info("Token not issued: unknown user", extra={"userId": user_id})
            return None

        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=self.settings.expiry_minutes)
        payload = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
        }
        try:
            token = jwt.encode(payload, self.settings.secret_key, algorithm=JWT_ALGORITHM)
        except JWTError as e:
            logger.error("Token signing failed", extra={"userId": user.id, "error": str(e)})
            raise InternalError("Failed to sign token", cause=e) from e

        logger.debug("Token issued", extra={"userId": user.id, "expiresAt": expires_at.isoformat()})
        return IssuedToken(user=user, token=token, expires_at=expires_at)
