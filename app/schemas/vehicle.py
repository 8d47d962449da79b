from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel, PatchModel

PhotoCategory = Literal["loading", "unloading", "warehouse"]
DocumentType = Literal["invoice", "carfax"]


class InvoiceDocument(CamelModel):
    url: str
    type: DocumentType = "invoice"


class VehicleCreate(CamelModel):
    vin: str = Field(min_length=1)
    lot: str = Field(min_length=1)
    year: int
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    has_title: bool = False
    has_key: bool = False
    note: str | None = ""
    admin_note: str | None = ""
    assigned_to_user_id: str | None = None
    container_number: str | None = None
    booking_number: str | None = None
    etd: str | None = None
    eta: str | None = None


class VehicleUpdate(PatchModel):
    vin: str | None = Field(default=None, min_length=1)
    lot: str | None = Field(default=None, min_length=1)
    year: int | None = None
    make: str | None = Field(default=None, min_length=1)
    model: str | None = Field(default=None, min_length=1)
    destination: str | None = Field(default=None, min_length=1)
    has_title: bool | None = None
    has_key: bool | None = None
    note: str | None = None
    admin_note: str | None = None
    assigned_to_user_id: str | None = None
    container_number: str | None = None
    booking_number: str | None = None
    etd: str | None = None
    eta: str | None = None


class VehicleResponse(CamelModel):
    id: str
    vin: str
    lot: str
    year: int
    make: str
    model: str
    destination: str
    has_title: bool
    has_key: bool
    note: str | None = ""
    admin_note: str | None = ""
    assigned_to_user_id: str | None = None
    container_number: str | None = None
    booking_number: str | None = None
    etd: str | None = None
    eta: str | None = None
    loading_photos: list[str] = []
    unloading_photos: list[str] = []
    warehouse_photos: list[str] = []
    # Legacy rows hold bare reference strings
    invoices: list[InvoiceDocument | str] = []


class InvoiceRemoveRequest(CamelModel):
    invoice_url: str | None = None
