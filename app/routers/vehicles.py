from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import Identity, require_admin, require_auth
from app.schemas.vehicle import InvoiceRemoveRequest, VehicleCreate, VehicleUpdate
from app.services import vehicle_service
from app.services.blob_store import BlobStore, get_blob_store
from app.services.upload_validator import DOCUMENT_TYPES, IMAGE_TYPES, read_uploads
from app.utils.response import success_response

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("")
async def get_vehicles(
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    vehicles = await vehicle_service.list_visible(db, identity.user)
    return success_response(data=[vehicle_service.to_public(v, identity.user) for v in vehicles])


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: str,
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await vehicle_service.get_vehicle_for(db, vehicle_id, identity.user)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.post("", status_code=201)
async def create_vehicle(
    payload: VehicleCreate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await vehicle_service.create_vehicle(db, payload)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.patch("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: str,
    patch: VehicleUpdate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await vehicle_service.update_vehicle(db, vehicle_id, patch)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.delete("/{vehicle_id}", status_code=204)
async def delete_vehicle(
    vehicle_id: str,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await vehicle_service.delete_vehicle(db, vehicle_id)
    return Response(status_code=204)


@router.post("/{vehicle_id}/photos/{category}")
async def upload_photos(
    vehicle_id: str,
    category: str,
    photos: list[UploadFile] = File(...),
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    vehicle_service.photo_column(category)
    uploads = await read_uploads(photos, IMAGE_TYPES, settings.max_upload_size_bytes)
    vehicle = await vehicle_service.attach_photos(db, blobs, vehicle_id, category, uploads)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.post("/{vehicle_id}/invoices")
async def upload_invoices(
    vehicle_id: str,
    invoices: list[UploadFile] = File(...),
    document_type: str | None = Form(default=None, alias="documentType"),
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
):
    document_type = vehicle_service.check_document_type(document_type)
    uploads = await read_uploads(invoices, DOCUMENT_TYPES, settings.max_upload_size_bytes)
    vehicle = await vehicle_service.attach_invoices(db, blobs, vehicle_id, uploads, document_type)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.delete("/{vehicle_id}/invoices")
async def delete_invoice(
    vehicle_id: str,
    payload: InvoiceRemoveRequest,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    vehicle = await vehicle_service.remove_invoice(db, vehicle_id, payload.invoice_url)
    return success_response(data=vehicle_service.to_public(vehicle, identity.user))


@router.post("/{vehicle_id}/notify")
async def notify_update(
    vehicle_id: str,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    sent = await vehicle_service.notify_update(db, vehicle_id)
    message = None if sent else "Notifications are disabled"
    return success_response(data={"sent": sent}, message=message)
