import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate, VehicleResponse, VehicleUpdate
from app.services import notifier
from app.services.blob_store import BlobStore
from app.services.upload_validator import UploadedFile
from app.utils.exceptions import (
    DuplicateVin,
    Forbidden,
    InvalidCategory,
    NotFound,
    ValidationError,
)
from app.utils.locks import KeyedLock

logger = logging.getLogger(__name__)

PHOTO_COLUMNS: dict[str, str] = {
    "loading": "loading_photos",
    "unloading": "unloading_photos",
    "warehouse": "warehouse_photos",
}

INVOICE_TYPES = ("invoice", "carfax")

_REQUIRED_FIELDS = ("vin", "lot", "year", "make", "model", "destination", "has_title", "has_key")

# Serializes read-modify-write on the JSON list columns
vehicle_locks = KeyedLock()


def to_public(vehicle: Vehicle, identity: dict) -> dict:
    data = VehicleResponse.model_validate(vehicle).model_dump(by_alias=True)
    if identity.get("role") != "admin":
        data.pop("adminNote", None)
    return data


async def get_vehicle(db: AsyncSession, vehicle_id: str) -> Vehicle:
    vehicle = await db.get(Vehicle, vehicle_id, populate_existing=True)
    if vehicle is None:
        raise NotFound("Vehicle not found")
    return vehicle


async def get_vehicle_for(db: AsyncSession, vehicle_id: str, identity: dict) -> Vehicle:
    vehicle = await get_vehicle(db, vehicle_id)
    if identity.get("role") != "admin" and vehicle.assigned_to_user_id != identity.get("id"):
        raise Forbidden()
    return vehicle


async def get_by_vin(db: AsyncSession, vin: str) -> Vehicle | None:
    result = await db.execute(select(Vehicle).where(Vehicle.vin == vin))
    return result.scalars().first()


async def list_vehicles(db: AsyncSession) -> list[Vehicle]:
    result = await db.execute(select(Vehicle))
    return list(result.scalars().all())


async def list_for_user(db: AsyncSession, user_id: str) -> list[Vehicle]:
    result = await db.execute(select(Vehicle).where(Vehicle.assigned_to_user_id == user_id))
    return list(result.scalars().all())


async def list_visible(db: AsyncSession, identity: dict) -> list[Vehicle]:
    if identity.get("role") == "admin":
        return await list_vehicles(db)
    return await list_for_user(db, identity["id"])


async def _check_assignee(db: AsyncSession, user_id: str | None) -> None:
    if user_id is not None and await db.get(User, user_id) is None:
        raise ValidationError("Assigned user does not exist", data={"field": "assignedToUserId"})


async def create_vehicle(db: AsyncSession, payload: VehicleCreate) -> Vehicle:
    if await get_by_vin(db, payload.vin) is not None:
        logger.info("Rejected duplicate VIN %s", payload.vin)
        raise DuplicateVin(payload.vin)
    await _check_assignee(db, payload.assigned_to_user_id)

    vehicle = Vehicle(
        **payload.model_dump(),
        loading_photos=[],
        unloading_photos=[],
        warehouse_photos=[],
        invoices=[],
    )
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    return vehicle


async def update_vehicle(db: AsyncSession, vehicle_id: str, patch: VehicleUpdate) -> Vehicle:
    """Shallow merge. VIN uniqueness is only enforced on create."""
    updates = patch.model_dump(exclude_unset=True)
    for field in _REQUIRED_FIELDS:
        if field in updates and updates[field] is None:
            raise ValidationError(f"'{field}' cannot be null", data={"field": field})

    async with vehicle_locks.hold(vehicle_id):
        vehicle = await get_vehicle(db, vehicle_id)
        if "assigned_to_user_id" in updates:
            await _check_assignee(db, updates["assigned_to_user_id"])
        for field, value in updates.items():
            setattr(vehicle, field, value)
        await db.commit()
        await db.refresh(vehicle)
    return vehicle


async def delete_vehicle(db: AsyncSession, vehicle_id: str) -> None:
    """Attached blobs are left in the blob store."""
    async with vehicle_locks.hold(vehicle_id):
        vehicle = await get_vehicle(db, vehicle_id)
        await db.delete(vehicle)
        await db.commit()
    logger.info("Deleted vehicle %s", vehicle_id)


def photo_column(category: str) -> str:
    column = PHOTO_COLUMNS.get(category)
    if column is None:
        raise InvalidCategory(
            f"Invalid photo category '{category}'. Allowed: {', '.join(PHOTO_COLUMNS)}",
            data={"category": category},
        )
    return column


async def attach_photos(
    db: AsyncSession,
    blob_store: BlobStore,
    vehicle_id: str,
    category: str,
    files: list[UploadedFile],
) -> Vehicle:
    column = photo_column(category)
    async with vehicle_locks.hold(vehicle_id):
        vehicle = await get_vehicle(db, vehicle_id)
        refs = [await blob_store.put(f.content, f.filename, f.content_type) for f in files]
        setattr(vehicle, column, [*(getattr(vehicle, column) or []), *refs])
        await db.commit()
        await db.refresh(vehicle)
    return vehicle


def check_document_type(document_type: str | None) -> str:
    document_type = document_type or "invoice"
    if document_type not in INVOICE_TYPES:
        raise ValidationError(
            f"Invalid document type '{document_type}'. Allowed: {', '.join(INVOICE_TYPES)}",
            data={"field": "documentType"},
        )
    return document_type


async def attach_invoices(
    db: AsyncSession,
    blob_store: BlobStore,
    vehicle_id: str,
    files: list[UploadedFile],
    document_type: str | None = None,
) -> Vehicle:
    document_type = check_document_type(document_type)
    async with vehicle_locks.hold(vehicle_id):
        vehicle = await get_vehicle(db, vehicle_id)
        new = [
            {"url": await blob_store.put(f.content, f.filename, f.content_type), "type": document_type}
            for f in files
        ]
        vehicle.invoices = [*(vehicle.invoices or []), *new]
        await db.commit()
        await db.refresh(vehicle)
    return vehicle


def _invoice_url(entry) -> str | None:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        return entry.get("url")
    return None


async def remove_invoice(db: AsyncSession, vehicle_id: str, reference: str | None) -> Vehicle:
    if not reference:
        raise ValidationError("Invoice URL is required", data={"field": "invoiceUrl"})

    async with vehicle_locks.hold(vehicle_id):
        vehicle = await get_vehicle(db, vehicle_id)
        existing = vehicle.invoices or []
        remaining = [inv for inv in existing if _invoice_url(inv) != reference]
        if len(remaining) != len(existing):
            vehicle.invoices = remaining
            await db.commit()
            await db.refresh(vehicle)
    return vehicle


async def notify_update(db: AsyncSession, vehicle_id: str) -> bool:
    vehicle = await get_vehicle(db, vehicle_id)
    if vehicle.assigned_to_user_id is None:
        raise ValidationError("Vehicle has no assigned user")
    user = await db.get(User, vehicle.assigned_to_user_id)
    if user is None or not user.email:
        raise ValidationError("Assigned user has no e-mail address")
    return await notifier.send_vehicle_update(vehicle, user.email, user.name)
