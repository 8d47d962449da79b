import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String

from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    vin = Column(String, nullable=False, index=True)
    lot = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    destination = Column(String, nullable=False)
    has_title = Column(Boolean, nullable=False, default=False)
    has_key = Column(Boolean, nullable=False, default=False)
    note = Column(String, nullable=True, default="")
    admin_note = Column(String, nullable=True, default="")
    assigned_to_user_id = Column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Logistics
    container_number = Column(String, nullable=True)
    booking_number = Column(String, nullable=True)
    etd = Column(String, nullable=True)
    eta = Column(String, nullable=True)

    # Lists are reassigned, never mutated in place, so the ORM sees the change
    loading_photos = Column(JSON, nullable=False, default=list)
    unloading_photos = Column(JSON, nullable=False, default=list)
    warehouse_photos = Column(JSON, nullable=False, default=list)
    invoices = Column(JSON, nullable=False, default=list)
