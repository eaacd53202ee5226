# domain/model/user.py

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Access role stored on a user record."""
    ADMIN = 'Admin'
    USER = 'User'
    GUEST = 'Guest'


@dataclass(frozen=True)
class RoleParse:
    """Outcome of mapping a free-form role string.

    ``role`` is None when the input matched no known role; callers decide
    whether that means a default or "leave unchanged".
    """
    role: Role | None

    @property
    def recognized(self) -> bool:
        return self.role is not None


def parse_role(value: str | None) -> RoleParse:
    """Map a role name case-insensitively onto :class:`Role`."""
    if value:
        lowered = value.strip().lower()
        for role in Role:
            if role.value.lower() == lowered:
                return RoleParse(role)
    return RoleParse(None)


@dataclass
class User:
    """Domain model representing a user identity record."""
    id: str
    first_name: str
    last_name: str
    email: str
    hashed_password: str
    role: Role
    created_at: datetime
    updated_at: datetime | None = None
    birth_date: datetime | None = None
    last_login: datetime | None = None
    jwt_token: str | None = None

    def copy(self, **changes) -> User:
        return replace(self, **changes)


# ── Inputs ───────────────────────────────────────────────


@dataclass(frozen=True)
class RegisterRequest:
    """Registration input. Every field is required."""
    first_name: str
    last_name: str
    email: str
    password: str
    role: str
    birth_date: datetime


@dataclass(frozen=True)
class EditUserRequest:
    """Partial update input. ``None`` means "not supplied"."""
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None
    birth_date: datetime | None = None
    role: str | None = None
    last_login: datetime | None = None
    updated_at: datetime | None = None
    jwt_token: str | None = None


@dataclass(frozen=True)
class Credentials:
    """Login input: email plus plaintext password."""
    email: str
    password: str
