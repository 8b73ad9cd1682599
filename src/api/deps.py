import os
from collections.abc import Callable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.randomness import SystemRandom
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.app_shell.cache import TTLCache
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import VerifyTokenInput, run_verify_token
from src.domain.entities import User
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("SNL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "snl.db")
        self.rules_path = Path(os.environ.get("SNL_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = self.base_dir / "migrations"
        self.cors_origins = [
            o.strip()
            for o in os.environ.get("SNL_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
            if o.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Store ---
def get_store(settings: Settings = Depends(get_settings)) -> Iterator[SQLiteUnitOfWork]:
    """One unit of work per request: committed when the route returns, rolled back on error."""
    with SQLiteUnitOfWork(settings.db_path) as store:
        yield store


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_rng() -> SystemRandom:
    return SystemRandom()


def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter()


def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# --- Cache & rate limits ---
_cache_instance: TTLCache | None = None
_limiter_instance: RateLimiter | None = None


def get_cache(rules: Rules = Depends(get_rules)) -> TTLCache:
    """Get response cache singleton."""
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = TTLCache(default_ttl=rules.cache.leaderboard_ttl_seconds)
    return _cache_instance


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _limiter_instance
    if _limiter_instance is None:
        _limiter_instance = RateLimiter(rules.rate_limits)
    return _limiter_instance


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def limit_api(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    if not limiter.check_api(_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please slow down",
        )


def limit_auth(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
    if not limiter.check_auth(_client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, please try again later",
        )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_bearer_token(
    request: Request, token: Annotated[str | None, Depends(oauth2_scheme)]
) -> str:
    # Header first, then the HttpOnly cookie set at login.
    if not token:
        cookie_token = request.cookies.get("access_token")
        if cookie_token and cookie_token.startswith("Bearer "):
            token = cookie_token.split(" ", 1)[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_current_user(
    token: str = Depends(get_bearer_token),
    store: SQLiteUnitOfWork = Depends(get_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
) -> User:
    result = run_verify_token(VerifyTokenInput(token=token), store, auth_adapter, rules)
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return result.user


def require_permission(action: str) -> Callable[..., User]:
    """Dependency factory: the current user, provided their role grants `action`."""

    def checker(
        user: User = Depends(get_current_user),
        policy: PolicyEngine = Depends(get_policy),
    ) -> User:
        if not policy.check_permission(user.role, action):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return user

    return checker


def get_current_participant(user: User = Depends(require_permission("game:play"))) -> User:
    if user.team_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="User is not assigned to a team"
        )
    return user
