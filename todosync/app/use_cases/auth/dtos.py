"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from pydantic import BaseModel


# ============================================================================
# Commands
# ============================================================================


class RegisterCommand(BaseModel):
    """
    Register command - represents validated signup intent

    Created by API layer after request validation passes
    (password confirmation already checked).
    """

    name: str
    email: str
    password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """Response for register and login use cases"""

    user: UserInfo
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"


class CurrentUserResponse(BaseModel):
    """Response for current user use case"""

    user: UserInfo


class MessageResponse(BaseModel):
    """Plain acknowledgement"""

    message: str
