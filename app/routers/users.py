from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import Identity, require_admin, require_auth
from app.schemas.user import UserCreate, UserUpdate
from app.services import user_service
from app.services.blob_store import BlobStore, get_blob_store
from app.services.session_store import SessionStore, get_session_store
from app.services.upload_validator import IMAGE_TYPES, read_upload
from app.utils.response import success_response

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    users = await user_service.list_users(db)
    return success_response(data=[user_service.to_public(u) for u in users])


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.get_user(db, user_id)
    return success_response(data=user_service.to_public(user))


@router.post("", status_code=201)
async def create_user(
    payload: UserCreate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.create_user(db, payload)
    return success_response(data=user_service.to_public(user))


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    patch: UserUpdate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    user = await user_service.update_user(db, user_id, patch)
    data = user_service.to_public(user)
    if user_service.changes_password(patch):
        await store.revoke_user(user_id)
    else:
        await store.refresh_user(user_id, data)
    return success_response(data=data)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    await user_service.delete_user(db, user_id, identity.user)
    await store.revoke_user(user_id)
    return Response(status_code=204)


@router.post("/{user_id}/profile-picture")
async def upload_profile_picture(
    user_id: str,
    profile_picture: UploadFile = File(..., alias="profilePicture"),
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
    store: SessionStore = Depends(get_session_store),
):
    user_service.check_profile_access(user_id, identity.user)
    upload = await read_upload(
        profile_picture, IMAGE_TYPES, settings.max_profile_picture_size_bytes
    )
    user = await user_service.set_profile_picture(db, blobs, user_id, upload, identity.user)

    data = user_service.to_public(user)
    if identity.id == user_id:
        await store.replace(identity.token, data)
    return success_response(data=data)
