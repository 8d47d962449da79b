from dataclasses import dataclass

from fastapi import Depends, Request

from app.config import settings
from app.services.session_store import SessionStore, get_session_store
from app.utils.exceptions import Forbidden, Unauthenticated


@dataclass
class Identity:
    """Who is making the request, as recorded in server-side session state."""

    token: str
    user: dict

    @property
    def id(self) -> str:
        return self.user["id"]

    @property
    def is_admin(self) -> bool:
        return self.user.get("role") == "admin"


async def get_identity(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Identity:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise Unauthenticated()
    user = await store.get(token)
    if user is None:
        raise Unauthenticated("Session expired or invalid")
    return Identity(token=token, user=user)


async def require_auth(identity: Identity = Depends(get_identity)) -> Identity:
    return identity


async def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
