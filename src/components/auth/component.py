import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from src.components.audit import AuditAction, AuditService
from src.domain.entities import User
from src.rules.models import Rules

from .models import (
    AuthOutput,
    CreateStaffInput,
    DeleteAdminInput,
    LoginInput,
    LoginOutput,
    LogoutInput,
    UserListOutput,
    UserOutput,
    VerifyTokenInput,
)
from .ports import AuthAdapterPort, GameStorePort, TimePort

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
STAFF_ROLES = ("admin", "superadmin")


def run_login(
    inp: LoginInput,
    store: GameStorePort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
    rules: Rules,
) -> LoginOutput:
    audit = AuditService(store.audit, time)
    username = inp.username.strip()

    user = store.users.get_by_username(username)
    if not user or not auth_adapter.verify_password(inp.password, user.password_hash):
        audit.log(AuditAction.LOGIN_FAILED, actor_name=username, details={"reason": "credentials"})
        logger.warning("login failed for %s", username)
        return LoginOutput(success=False, error="Invalid credentials", error_code="unauthorized")

    team = store.teams.get_by_id(user.team_id) if user.team_id else None
    if team and team.status == "DISQUALIFIED":
        audit.log(AuditAction.LOGIN_FAILED, actor=user, details={"reason": "disqualified"})
        return LoginOutput(
            success=False,
            error="Your team has been disqualified. Contact an event administrator.",
            error_code="forbidden",
        )

    claims: dict[str, Any] = {"sub": str(user.id), "username": user.username, "role": user.role}
    if team:
        claims["team_id"] = str(team.id)
        claims["team_code"] = team.team_code

    now = time.now_utc()
    ttl = rules.auth.token_ttl_minutes
    token = auth_adapter.create_token(claims, ttl, now)
    if rules.auth.single_session:
        # Latest login wins; older tokens stop verifying.
        store.tokens.set(user.id, auth_adapter.hash_token(token), now + timedelta(minutes=ttl))

    audit.log(AuditAction.LOGIN, actor=user)
    return LoginOutput(user=user, team=team, token=token, success=True)


def run_logout(inp: LogoutInput, store: GameStorePort, time: TimePort) -> AuthOutput:
    store.tokens.clear(inp.user.id)
    AuditService(store.audit, time).log(AuditAction.LOGOUT, actor=inp.user)
    return AuthOutput(user=inp.user, success=True)


def run_verify_token(
    inp: VerifyTokenInput,
    store: GameStorePort,
    auth_adapter: AuthAdapterPort,
    rules: Rules,
) -> AuthOutput:
    claims = auth_adapter.decode_token(inp.token)
    if not claims:
        return AuthOutput(success=False, error="Invalid token", error_code="unauthorized")

    subject = claims.get("sub")
    try:
        user_id = UUID(str(subject))
    except (ValueError, TypeError):
        return AuthOutput(success=False, error="Invalid token payload", error_code="unauthorized")

    user = store.users.get_by_id(user_id)
    if not user:
        return AuthOutput(success=False, error="User not found", error_code="unauthorized")

    if rules.auth.single_session:
        stored = store.tokens.get(user.id)
        if stored is None or stored != auth_adapter.hash_token(inp.token):
            return AuthOutput(
                success=False,
                error="Session expired or signed in elsewhere",
                error_code="unauthorized",
            )

    return AuthOutput(user=user, claims=claims, success=True)


def run_create_staff(
    inp: CreateStaffInput,
    store: GameStorePort,
    auth_adapter: AuthAdapterPort,
    time: TimePort,
) -> UserOutput:
    if inp.role not in STAFF_ROLES:
        return UserOutput(success=False, error=f"Invalid role: {inp.role}", error_code="invalid")

    username = inp.username.strip()
    if not username:
        return UserOutput(success=False, error="Username is required", error_code="invalid")
    if len(inp.password) < MIN_PASSWORD_LENGTH:
        return UserOutput(
            success=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            error_code="invalid",
        )
    if store.users.get_by_username(username):
        return UserOutput(success=False, error="Username already exists", error_code="conflict")

    now = time.now_utc()
    user = User(
        username=username,
        password_hash=auth_adapter.hash_password(inp.password),
        role=inp.role,  # type: ignore[arg-type]
        created_at=now,
        updated_at=now,
    )
    store.users.save(user)
    AuditService(store.audit, time).log(
        AuditAction.ADMIN_CREATED,
        actor=inp.actor,
        target=str(user.id),
        details={"username": username, "role": inp.role},
    )
    return UserOutput(user=user, success=True)


def run_delete_admin(inp: DeleteAdminInput, store: GameStorePort, time: TimePort) -> UserOutput:
    try:
        uid = UUID(str(inp.admin_id))
    except (ValueError, TypeError):
        return UserOutput(success=False, error="Invalid user ID format", error_code="invalid")

    target = store.users.get_by_id(uid)
    if not target or target.role != "admin":
        return UserOutput(success=False, error="Admin not found", error_code="not_found")

    store.users.delete(target.id)
    AuditService(store.audit, time).log(
        AuditAction.ADMIN_DELETED,
        actor=inp.actor,
        target=str(target.id),
        details={"username": target.username},
    )
    return UserOutput(user=target, success=True)


def run_list_admins(store: GameStorePort) -> UserListOutput:
    return UserListOutput(users=store.users.list_by_role("admin"), success=True)
