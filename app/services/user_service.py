import logging

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services.blob_store import BlobStore
from app.services.upload_validator import UploadedFile
from app.utils.exceptions import (
    DuplicateUsername,
    Forbidden,
    InvalidCredentials,
    NotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

_REQUIRED_FIELDS = ("username", "role", "name")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def to_public(user: User) -> dict:
    """Identity projection: everything but the credential."""
    return UserResponse.model_validate(user).model_dump(by_alias=True)


async def get_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.username))
    return list(result.scalars().all())


async def create_user(db: AsyncSession, payload: UserCreate) -> User:
    if await get_by_username(db, payload.username) is not None:
        logger.info("Rejected duplicate username %s", payload.username)
        raise DuplicateUsername(payload.username)

    data = payload.model_dump(exclude={"password"})
    user = User(**data, password_hash=hash_password(payload.password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    user = await get_by_username(db, username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for username %s", username)
        raise InvalidCredentials()
    return user


def changes_password(patch: UserUpdate) -> bool:
    """An empty or blank password in a patch leaves the stored hash alone."""
    return bool(patch.password and patch.password.strip())


async def update_user(db: AsyncSession, user_id: str, patch: UserUpdate) -> User:
    user = await get_user(db, user_id)
    updates = patch.model_dump(exclude_unset=True)

    if changes_password(patch):
        user.password_hash = hash_password(patch.password)
    updates.pop("password", None)

    for field in _REQUIRED_FIELDS:
        if field in updates and updates[field] is None:
            raise ValidationError(f"'{field}' cannot be null", data={"field": field})

    new_username = updates.get("username")
    if new_username and new_username != user.username:
        existing = await get_by_username(db, new_username)
        if existing is not None and existing.id != user.id:
            raise DuplicateUsername(new_username)

    for field, value in updates.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: str, acting: dict) -> None:
    if acting.get("id") == user_id:
        raise Forbidden("You cannot delete your own account")
    await get_user(db, user_id)
    # vehicles.assigned_to_user_id is cleared by ON DELETE SET NULL
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("Deleted user %s", user_id)


def check_profile_access(user_id: str, acting: dict) -> None:
    if acting.get("role") != "admin" and acting.get("id") != user_id:
        raise Forbidden()


async def set_profile_picture(
    db: AsyncSession,
    blob_store: BlobStore,
    user_id: str,
    upload: UploadedFile,
    acting: dict,
) -> User:
    check_profile_access(user_id, acting)
    user = await get_user(db, user_id)

    user.profile_picture = await blob_store.put(upload.content, upload.filename, upload.content_type)
    await db.commit()
    await db.refresh(user)
    return user
