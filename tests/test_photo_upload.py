import asyncio
import io
from unittest.mock import patch

import pytest

from app.config import settings
from app.database import async_session
from app.models.vehicle import Vehicle
from app.services import vehicle_service
from app.services.blob_store import get_blob_store
from app.services.upload_validator import UploadedFile
from app.utils.exceptions import NotFound
from tests.helpers import create_vehicle, jpeg, pdf


@pytest.mark.asyncio
async def test_photos_append_in_upload_order(admin_client):
    vehicle = await create_vehicle(admin_client)
    url = f"/api/vehicles/{vehicle['id']}/photos/loading"

    first = await admin_client.post(url, files=[("photos", jpeg("f1.jpg")), ("photos", jpeg("f2.jpg"))])
    assert first.status_code == 200
    refs_after_first = first.json()["data"]["loadingPhotos"]
    assert len(refs_after_first) == 2

    second = await admin_client.post(url, files=[("photos", jpeg("f3.jpg"))])
    assert second.status_code == 200
    data = second.json()["data"]
    assert data["loadingPhotos"][:2] == refs_after_first
    assert len(data["loadingPhotos"]) == 3
    assert len(set(data["loadingPhotos"])) == 3
    assert data["unloadingPhotos"] == []
    assert data["warehousePhotos"] == []


@pytest.mark.asyncio
async def test_photo_categories_are_independent(admin_client):
    vehicle = await create_vehicle(admin_client)

    await admin_client.post(f"/api/vehicles/{vehicle['id']}/photos/warehouse", files=[("photos", jpeg())])
    response = await admin_client.post(
        f"/api/vehicles/{vehicle['id']}/photos/unloading", files=[("photos", jpeg())]
    )

    data = response.json()["data"]
    assert len(data["warehousePhotos"]) == 1
    assert len(data["unloadingPhotos"]) == 1
    assert data["loadingPhotos"] == []


@pytest.mark.asyncio
async def test_photo_invalid_category(admin_client):
    vehicle = await create_vehicle(admin_client)

    response = await admin_client.post(
        f"/api/vehicles/{vehicle['id']}/photos/interior", files=[("photos", jpeg())]
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_CATEGORY"


@pytest.mark.asyncio
async def test_photo_unsupported_type(admin_client):
    vehicle = await create_vehicle(admin_client)

    response = await admin_client.post(
        f"/api/vehicles/{vehicle['id']}/photos/loading",
        files=[("photos", ("notes.txt", io.BytesIO(b"hello"), "text/plain"))],
    )

    assert response.status_code == 400
    assert response.json()["code"] == "UNSUPPORTED_FILE_TYPE"


@pytest.mark.asyncio
async def test_photo_too_large(admin_client):
    vehicle = await create_vehicle(admin_client)

    with patch.object(settings, "max_upload_size_bytes", 50):
        response = await admin_client.post(
            f"/api/vehicles/{vehicle['id']}/photos/loading", files=[("photos", jpeg())]
        )

    assert response.status_code == 400
    assert response.json()["code"] == "FILE_TOO_LARGE"
    refreshed = await admin_client.get(f"/api/vehicles/{vehicle['id']}")
    assert refreshed.json()["data"]["loadingPhotos"] == []


@pytest.mark.asyncio
async def test_photo_too_many_files(admin_client):
    vehicle = await create_vehicle(admin_client)

    with patch.object(settings, "max_files_per_upload", 2):
        response = await admin_client.post(
            f"/api/vehicles/{vehicle['id']}/photos/loading",
            files=[("photos", jpeg(f"{i}.jpg")) for i in range(3)],
        )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_photo_upload_unknown_vehicle(admin_client):
    response = await admin_client.post("/api/vehicles/missing/photos/loading", files=[("photos", jpeg())])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_photo_upload_requires_admin(admin_client, user_client, regular_user_id):
    vehicle = await create_vehicle(admin_client, assignedToUserId=regular_user_id)

    response = await user_client.post(
        f"/api/vehicles/{vehicle['id']}/photos/loading", files=[("photos", jpeg())]
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invoices_default_to_invoice_type_and_append(admin_client):
    vehicle = await create_vehicle(admin_client)
    url = f"/api/vehicles/{vehicle['id']}/invoices"

    response = await admin_client.post(url, files=[("invoices", pdf())])
    assert response.status_code == 200
    invoices = response.json()["data"]["invoices"]
    assert len(invoices) == 1
    assert invoices[0]["type"] == "invoice"
    assert invoices[0]["url"].startswith("/api/files/")

    response = await admin_client.post(url, files=[("invoices", pdf("carfax.pdf"))], data={"documentType": "carfax"})
    invoices = response.json()["data"]["invoices"]
    assert [i["type"] for i in invoices] == ["invoice", "carfax"]


@pytest.mark.asyncio
async def test_invoice_invalid_document_type(admin_client):
    vehicle = await create_vehicle(admin_client)

    response = await admin_client.post(
        f"/api/vehicles/{vehicle['id']}/invoices",
        files=[("invoices", pdf())],
        data={"documentType": "receipt"},
    )

    assert response.status_code == 400


async def _set_invoices(vehicle_id: str, invoices: list) -> None:
    async with async_session() as session:
        vehicle = await session.get(Vehicle, vehicle_id)
        vehicle.invoices = invoices
        await session.commit()


@pytest.mark.asyncio
async def test_remove_invoice_handles_legacy_and_tagged_entries(admin_client):
    vehicle = await create_vehicle(admin_client)
    await _set_invoices(vehicle["id"], [
        "/api/files/legacy.pdf",
        {"url": "/api/files/a.pdf", "type": "invoice"},
        {"url": "/api/files/b.pdf", "type": "carfax"},
    ])
    url = f"/api/vehicles/{vehicle['id']}/invoices"

    response = await admin_client.request("DELETE", url, json={"invoiceUrl": "/api/files/a.pdf"})
    assert response.status_code == 200
    assert response.json()["data"]["invoices"] == [
        "/api/files/legacy.pdf",
        {"url": "/api/files/b.pdf", "type": "carfax"},
    ]

    response = await admin_client.request("DELETE", url, json={"invoiceUrl": "/api/files/legacy.pdf"})
    assert response.json()["data"]["invoices"] == [{"url": "/api/files/b.pdf", "type": "carfax"}]


@pytest.mark.asyncio
async def test_remove_missing_invoice_is_noop(admin_client):
    vehicle = await create_vehicle(admin_client)
    await _set_invoices(vehicle["id"], [{"url": "/api/files/a.pdf", "type": "invoice"}])

    response = await admin_client.request(
        "DELETE", f"/api/vehicles/{vehicle['id']}/invoices", json={"invoiceUrl": "/api/files/nope.pdf"}
    )

    assert response.status_code == 200
    assert response.json()["data"]["invoices"] == [{"url": "/api/files/a.pdf", "type": "invoice"}]


@pytest.mark.asyncio
async def test_remove_invoice_requires_url(admin_client):
    vehicle = await create_vehicle(admin_client)

    response = await admin_client.request("DELETE", f"/api/vehicles/{vehicle['id']}/invoices", json={})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_concurrent_appends_keep_every_photo(admin_client):
    vehicle = await create_vehicle(admin_client)
    blobs = get_blob_store()

    async def attach(name: str):
        async with async_session() as session:
            upload = UploadedFile(filename=name, content_type="image/jpeg", content=b"\xff\xd8")
            await vehicle_service.attach_photos(session, blobs, vehicle["id"], "loading", [upload])

    await asyncio.gather(*(attach(f"{i}.jpg") for i in range(5)))

    async with async_session() as session:
        stored = await session.get(Vehicle, vehicle["id"])
    assert len(stored.loading_photos) == 5


@pytest.mark.asyncio
async def test_delete_waits_for_pending_append_then_append_sees_404(admin_client):
    vehicle = await create_vehicle(admin_client)
    blobs = get_blob_store()

    async def delete():
        async with async_session() as session:
            await vehicle_service.delete_vehicle(session, vehicle["id"])

    async with vehicle_service.vehicle_locks.hold(vehicle["id"]):
        task = asyncio.create_task(delete())
        await asyncio.sleep(0.05)
        assert not task.done()
    await task

    async with async_session() as session:
        upload = UploadedFile(filename="late.jpg", content_type="image/jpeg", content=b"\xff\xd8")
        with pytest.raises(NotFound):
            await vehicle_service.attach_photos(session, blobs, vehicle["id"], "loading", [upload])
