from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel, PatchModel

Role = Literal["admin", "user"]


class UserCreate(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: Role = "user"
    name: str = Field(min_length=1)
    email: str | None = None
    profile_picture: str | None = None


class UserUpdate(PatchModel):
    username: str | None = Field(default=None, min_length=1)
    password: str | None = None
    role: Role | None = None
    name: str | None = Field(default=None, min_length=1)
    email: str | None = None
    profile_picture: str | None = None


class UserResponse(CamelModel):
    """Outbound user. Has no credential field, so nothing can leak it."""

    id: str
    username: str
    role: Role
    name: str
    email: str | None = None
    profile_picture: str | None = None
