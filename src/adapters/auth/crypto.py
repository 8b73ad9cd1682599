from datetime import datetime, timedelta
from typing import Any

from src.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    hash_token,
    verify_password,
)


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib (argon2) for password hashing."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def hash_token(self, token: str) -> str:
        return hash_token(token)

    def create_token(
        self, claims: dict[str, Any], ttl_minutes: int, now: datetime | None = None
    ) -> str:
        return create_access_token(claims, timedelta(minutes=ttl_minutes), now_utc=now)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        return decode_access_token(token)
