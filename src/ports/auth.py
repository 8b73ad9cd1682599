from datetime import datetime
from typing import Any, Protocol


class AuthPort(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, plain: str, hashed: str) -> bool: ...

    def hash_token(self, token: str) -> str:
        """Hash a high-entropy token (SHA256) for storage."""
        ...

    def create_token(
        self, claims: dict[str, Any], ttl_minutes: int, now: datetime | None = None
    ) -> str: ...

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Return the claims, or None when the token is invalid or expired."""
        ...
