from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import Identity, require_admin, require_auth
from app.schemas.config import ConfigEntryResponse, ConfigUpdate
from app.services import config_service
from app.utils.response import success_response

router = APIRouter(prefix="/config", tags=["config"])


@router.get("")
async def get_all_config(
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return success_response(data=await config_service.get_all(db))


@router.get("/{key}")
async def get_config(
    key: str,
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    entry = await config_service.get(db, key)
    return success_response(data=ConfigEntryResponse.model_validate(entry).model_dump())


@router.put("/{key}")
async def set_config(
    key: str,
    payload: ConfigUpdate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    entry = await config_service.set(db, key, payload.value)
    return success_response(data=ConfigEntryResponse.model_validate(entry).model_dump())
