"""User lifecycle service: registration, authentication, merge update, deletion.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes; a user
that cannot be found is reported as None.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from domain.model.errors import (
    DomainError,
    DuplicateEmailError,
    InternalError,
    ValidationError,
)
from domain.model.user import (
    Credentials,
    EditUserRequest,
    RegisterRequest,
    Role,
    User,
    parse_role,
)
from port.password_hasher import PasswordHasherPort
from port.user_directory import UserDirectory
from services.password_hasher import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Fields copied verbatim when supplied non-empty and different
_TEXT_FIELDS = ('first_name', 'last_name', 'email')


def _validate_password(password: str | None) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")


@contextmanager
def _unexpected_errors(action: str, **context):
    """Re-raise anything that is not a DomainError as InternalError."""
    try:
        yield
    except DomainError:
        raise
    except Exception as e:
        logger.error(f"Failed to {action}", extra={**context, "error": str(e)})
        raise InternalError(f"Failed to {action}", cause=e) from e


class UserService:
    def __init__(self, directory: UserDirectory, hasher: PasswordHasherPort):
        self.directory = directory
        self.hasher = hasher

    def register(self, request: RegisterRequest | None) -> User:
        """Register a new user.

        Unknown role names fall back to Guest.

        Raises:
            ValidationError: missing request or email, password too short
            DuplicateEmailError: email already registered
            InternalError: storage failure
        """
        if request is None:
            raise ValidationError("Registration request is required")
        if not request.email:
            raise ValidationError("Email is required")

        with _unexpected_errors("register user", email=request.email):
            # Fast path only; the directory's unique index is authoritative
            if self.directory.get_by_email(request.email) is not None:
                raise DuplicateEmailError(request.email)

            _validate_password(request.password)

            role = parse_role(request.role).role or Role.GUEST
            now = datetime.now(timezone.utc)
            user = User(
                id=uuid.uuid4().hex,
                first_name=request.first_name,
                last_name=request.last_name,
                email=request.email,
                hashed_password=self.hasher.hash(request.password),
                role=role,
                created_at=now,
                updated_at=now,
                birth_date=request.birth_date,
            )
            created = self.directory.create(user)

        logger.info("User registered", extra={"userId": created.id, "role": created.role.value})
        return created

    def authenticate(self, credentials: Credentials | None) -> User | None:
        """Return the user matching the credentials, or None.

        Unknown email and wrong password produce the same None so callers
        cannot tell which one happened.
        """
        if credentials is None:
            raise ValidationError("Login request is required")
        if not credentials.email or not credentials.password:
            return None

        with _unexpected_errors("authenticate user"):
            user = self.directory.get_by_email(credentials.email)
            if user is None or not self.hasher.verify(credentials.password, user.hashed_password):
                logger.info("Authentication failed")
                return None

        logger.info("User authenticated", extra={"userId": user.id})
        return user

    def update(self, user_id: str, request: EditUserRequest | None) -> User | None:
        """Merge the supplied fields into the stored user.

        Returns None for an unknown id, and the stored record untouched
        (no write issued) when nothing would change. An unrecognized role
        name leaves the current role in place.

        Raises:
            ValidationError: empty id, missing request, new password too short
            DuplicateEmailError: new email belongs to another user
            InternalError: storage failure
        """
        if not user_id:
            raise ValidationError("User id is required")
        if request is None:
            raise ValidationError("Update request is required")

        with _unexpected_errors("update user", userId=user_id):
            current = self.directory.get_by_id(user_id)
            if current is None:
                return None

            changes = self._merge(current, request)
            if not changes:
                logger.debug("Update skipped: no changes", extra={"userId": user_id})
                return current

            new_email = changes.get('email')
            if new_email is not None:
                owner = self.directory.get_by_email(new_email)
                if owner is not None and owner.id != current.id:
                    raise DuplicateEmailError(new_email)

            changes['updated_at'] = request.updated_at or datetime.now(timezone.utc)
            updated = self.directory.update(current.id, current.copy(**changes))

        logger.info("User updated", extra={"userId": user_id, "fields": sorted(changes)})
        return updated

    def _merge(self, current: User, request: EditUserRequest) -> dict:
        changes = {}

        for name in _TEXT_FIELDS:
            value = getattr(request, name)
            if value and value != getattr(current, name):
                changes[name] = value

        # Same password as before counts as unchanged, so the digest is not rotated
        if request.password and not self.hasher.verify(request.password, current.hashed_password):
            _validate_password(request.password)
            changes['hashed_password'] = self.hasher.hash(request.password)

        if request.birth_date is not None and request.birth_date != current.birth_date:
            changes['birth_date'] = request.birth_date

        if request.role:
            parsed = parse_role(request.role)
            if not parsed.recognized:
                logger.warning("Ignoring unrecognized role", extra={"userId": current.id, "role": request.role})
            elif parsed.role != current.role:
                changes['role'] = parsed.role

        if request.jwt_token and request.jwt_token != current.jwt_token:
            changes['jwt_token'] = request.jwt_token

        if request.last_login is not None:
            changes['last_login'] = request.last_login

        return changes

    def delete(self, user_id: str) -> bool:
        """Hard-delete a user. Return False when no record had that id."""
        if not user_id:
            raise ValidationError("User id is required")

        with _unexpected_errors("delete user", userId=user_id):
            deleted = self.directory.delete(user_id)

        if deleted:
            logger.info("User deleted", extra={"userId": user_id})
        return deleted
