from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from todosync.api.error import ClientError, ServerError
from todosync.app.services.unit_of_work import UnitOfWork
from todosync.app.use_cases.auth import (
    RegisterCommand,
    RegisterUseCase,
    LoginUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    CurrentUserUseCase,
    AuthResponse,
    RefreshTokenResponse,
    CurrentUserResponse,
    MessageResponse,
)
from todosync.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/auth", tags=["Authentication"])


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    password_confirmation: str = Field(..., description="Must match password")

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password field confirmation does not match.")
        return value


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse
)
async def register(
    request: RegisterRequest, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    User Registration

    Creates a new account (with default categories) and logs it in.

    Raises:
        - 422 Unprocessable Entity: Invalid input or email already taken
        - 500 Internal Server Error: Server error
    """
    command = RegisterCommand(
        name=request.name, email=request.email, password=request.password
    )

    use_case = RegisterUseCase(uow)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(
                error,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                errors={"email": [error.message]},
            )
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=AuthResponse)
async def login(request: LoginRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    User Login

    Authenticates user, revokes their previous sessions and returns new tokens.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 500 Internal Server Error: Server error
    """
    use_case = LoginUseCase(uow)
    result = await use_case.execute(request.email, request.password)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


class RefreshRequest(BaseModel):
    """
    Refresh token HTTP request payload
    """

    refresh_token: str = Field(..., description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(request: RefreshRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Refresh Access Token

    Exchanges a refresh token for a new access/refresh pair (rotation).

    Raises:
        - 401 Unauthorized: Unknown, already used, expired or revoked token
        - 500 Internal Server Error: Server error
    """
    use_case = RefreshTokenUseCase(uow)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        error = result.error
        if error.code in ("INVALID_TOKEN", "SESSION_REVOKED", "SESSION_EXPIRED"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Revokes the caller's session; its refresh token and access tokens stop working.
    """
    use_case = LogoutUseCase(uow)
    result = await use_case.execute(UUID(current_user["session_id"]))

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/user", status_code=status.HTTP_200_OK, response_model=CurrentUserResponse)
async def get_user(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Authenticated User

    Raises:
        - 401 Unauthorized: Invalid or expired access token
    """
    use_case = CurrentUserUseCase(uow)
    result = await use_case.execute(UUID(current_user["user_id"]))

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value
