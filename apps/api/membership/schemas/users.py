from pydantic import Field

from membership.models.entities import RoleEnum
from membership.schemas.base import CamelModel, OptionalPassword, Password


class UserCreate(CamelModel):
    username: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    role: RoleEnum = RoleEnum.user
    password: Password


class UserUpdate(CamelModel):
    username: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    role: RoleEnum
    # Blank means "keep the current password".
    password: OptionalPassword = None


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    role: RoleEnum


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: Password


class SessionStatus(CamelModel):
    authenticated: bool
    user: UserResponse | None = None
