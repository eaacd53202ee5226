from typing import Protocol
from domain.model.user import User


class UserDirectory(Protocol):
    """Protocol defining durable storage of user records.

    Implementations must enforce email uniqueness themselves and raise
    ``DuplicateEmailError`` when an insert or replace would violate it.
    """
    def create(self, user: User) -> User:
        """Insert a new record. Raise DuplicateEmailError if the email is taken."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def update(self, user_id: str, user: User) -> User:
        """Replace the whole record stored under user_id and return it."""
        ...

    def delete(self, user_id: str) -> bool:
        """Remove the record. Return True only if one existed."""
        ...
