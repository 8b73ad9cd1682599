from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Team, User


@dataclass
class LoginInput:
    username: str
    password: str


@dataclass
class LogoutInput:
    user: User


@dataclass
class VerifyTokenInput:
    token: str


@dataclass
class CreateStaffInput:
    username: str
    password: str
    role: str = "admin"
    actor: User | None = None


@dataclass
class DeleteAdminInput:
    actor: User
    admin_id: str


@dataclass
class LoginOutput:
    user: User | None = None
    team: Team | None = None
    token: str | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class AuthOutput:
    user: User | None = None
    claims: dict[str, Any] = field(default_factory=dict)
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
    error_code: str | None = None


@dataclass
class UserListOutput:
    users: list[User]
    success: bool = False
    error: str | None = None
    error_code: str | None = None
