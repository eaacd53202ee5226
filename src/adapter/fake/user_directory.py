"""In-memory implementation of UserDirectory for testing."""

from domain.model.errors import DuplicateEmailError
from domain.model.user import User


class FakeUserDirectory:
    def __init__(self):
        self.store: dict[str, User] = {}

    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self.store.values())

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        if self._email_taken(user.email):
            raise DuplicateEmailError(user.email)
        self.store[user.id] = user.copy()
        return user

    def update(self, user_id: str, user: User) -> User:
        if self._email_taken(user.email, exclude_id=user_id):
            raise DuplicateEmailError(user.email)
        self.store[user_id] = user.copy()
        return user

    def delete(self, user_id: str) -> bool:
        return self.store.pop(user_id, None) is not None

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return user.copy()
        return None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return user.copy() if user else None
