from typing import Protocol


class PasswordHasherPort(Protocol):
    def hash(self, plaintext: str) -> str: ...
    def verify(self, plaintext: str, digest: str) -> bool: ...
