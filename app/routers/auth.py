from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import Identity, require_auth
from app.schemas.auth import LoginRequest
from app.services import user_service
from app.services.session_store import SessionStore, get_session_store
from app.utils.response import success_response

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    user = await user_service.authenticate(db, request.username, request.password)
    identity = user_service.to_public(user)

    token = await store.create(identity)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return success_response(data={"user": identity})


@router.post("/logout")
async def logout(
    response: Response,
    identity: Identity = Depends(require_auth),
    store: SessionStore = Depends(get_session_store),
):
    await store.delete(identity.token)
    response.delete_cookie(settings.session_cookie_name)
    return success_response(data={"success": True})


@router.get("/me")
async def me(identity: Identity = Depends(require_auth)):
    return success_response(data={"user": identity.user, "authenticated": True})
