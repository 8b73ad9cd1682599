from typing import Any

from fastapi import APIRouter, Depends, Response

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.deps import (
    get_auth_adapter,
    get_clock,
    get_current_user,
    get_rules,
    get_store,
    limit_auth,
)
from src.api.responses import ok, raise_for_result
from src.api.schemas import LoginRequest, TeamResponse, user_out
from src.components.auth import LoginInput, LogoutInput, run_login, run_logout
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


@router.post("/login", dependencies=[Depends(limit_auth)])
def login(
    req: LoginRequest,
    response: Response,
    store: SQLiteUnitOfWork = Depends(get_store),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Authenticate a team or staff member and return a bearer token."""
    result = run_login(
        LoginInput(username=req.username, password=req.password),
        store,
        auth_adapter,
        clock,
        rules,
    )
    if not result.success:
        # Keep the LOGIN_FAILED audit entry; the request itself still fails.
        store.commit()
        raise_for_result(result)

    max_age = rules.auth.token_ttl_minutes * 60
    response.set_cookie(
        key="access_token",
        value=f"Bearer {result.token}",
        httponly=True,
        max_age=max_age,
        expires=max_age,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )
    return ok(
        {
            "access_token": result.token,
            "token_type": "bearer",
            "user": user_out(result.user),
            "team": TeamResponse.from_team(result.team) if result.team else None,
        },
        message="Login successful",
    )


@router.post("/logout")
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    store: SQLiteUnitOfWork = Depends(get_store),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    """End the current session and clear the cookie."""
    run_logout(LogoutInput(user=current_user), store, clock)
    response.delete_cookie(key="access_token")
    return ok(message="Logged out")


@router.get("/me")
def read_me(
    current_user: User = Depends(get_current_user),
    store: SQLiteUnitOfWork = Depends(get_store),
) -> dict[str, Any]:
    team = store.teams.get_by_id(current_user.team_id) if current_user.team_id else None
    return ok(
        {
            "user": user_out(current_user),
            "team": TeamResponse.from_team(team) if team else None,
        }
    )
