"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .current_user_use_case import CurrentUserUseCase
from .dtos import (
    RegisterCommand,
    UserInfo,
    AuthResponse,
    RefreshTokenResponse,
    CurrentUserResponse,
    MessageResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "CurrentUserUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "AuthResponse",
    "RefreshTokenResponse",
    "CurrentUserResponse",
    "MessageResponse",
    # DTOs - Nested Models
    "UserInfo",
]
