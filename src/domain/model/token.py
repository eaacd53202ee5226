# domain/model/token.py

from dataclasses import dataclass
from datetime import datetime

from domain.model.user import User


@dataclass(frozen=True)
class IssuedToken:
    """Signed credential handed out after a successful login."""
    user: User
    token: str
    expires_at: datetime
