"""bcrypt-backed password hashing.

Digests are self-describing (``$2b$<cost>$<salt><hash>``), so verification
needs nothing but the stored string.
"""

import bcrypt

BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash with a freshly generated salt; equal inputs give different digests."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True iff plaintext matches digest.

        bcrypt.checkpw compares in constant time. Malformed digests and
        over-long inputs count as a mismatch.
        """
        if not plaintext or not digest:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            return False
