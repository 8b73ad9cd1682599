"""
Auth component - Login, session verification and staff accounts.
"""

from .component import (
    run_create_staff,
    run_delete_admin,
    run_list_admins,
    run_login,
    run_logout,
    run_verify_token,
)
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

__all__ = [
    # Entry points
    "run_login",
    "run_logout",
    "run_verify_token",
    "run_create_staff",
    "run_delete_admin",
    "run_list_admins",
    # Input models
    "LoginInput",
    "LogoutInput",
    "VerifyTokenInput",
    "CreateStaffInput",
    "DeleteAdminInput",
    # Output models
    "LoginOutput",
    "AuthOutput",
    "UserOutput",
    "UserListOutput",
    # Ports
    "AuthAdapterPort",
    "GameStorePort",
    "TimePort",
]
