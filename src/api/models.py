"""Pydantic models for API request/response.

Wire names are camelCase (``firstName``, ``expiresAt``); Python attributes
stay snake_case.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email

from domain.model.user import Credentials, EditUserRequest, RegisterRequest, User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_email_format(value: str) -> str:
    """Reject malformed addresses but keep the string exactly as sent.

    Emails are matched case-sensitively, so the normalized form that
    validate_email produces is discarded.
    """
    validate_email(value)
    return value


Email = Annotated[str, AfterValidator(_check_email_format)]


class RegisterBody(CamelModel):
    """Request model for user registration."""
    first_name: str
    last_name: str
    email: Email
    password: str
    role: str
    birth_date: datetime

    def to_domain(self) -> RegisterRequest:
        return RegisterRequest(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            password=self.password,
            role=self.role,
            birth_date=self.birth_date,
        )


class LoginBody(CamelModel):
    """Request model for login. Email is not format-checked so every bad login gets the same 401."""
    email: str
    password: str

    def to_domain(self) -> Credentials:
        return Credentials(email=self.email, password=self.password)


class EditUserBody(CamelModel):
    """Request model for partial update; omitted fields stay unchanged."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[Email] = None
    password: Optional[str] = None
    birth_date: Optional[datetime] = None
    role: Optional[str] = None
    last_login: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    jwt_token: Optional[str] = None

    def to_domain(self) -> EditUserRequest:
        return EditUserRequest(**self.model_dump())


class UserResponse(CamelModel):
    """Public view of a user. The password digest and cached token are never exposed."""
    id: str = Field(..., description="User ID")
    first_name: str
    last_name: str
    email: str
    role: str = Field(..., description="Admin, User or Guest")
    created_at: datetime
    updated_at: Optional[datetime] = None
    birth_date: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            role=user.role.value,
            created_at=user.created_at,
            updated_at=user.updated_at,
            birth_date=user.birth_date,
            last_login=user.last_login,
        )


class LoginResponse(CamelModel):
    """Response model for a successful login."""
    user: UserResponse
    token: str
    expires_at: datetime
