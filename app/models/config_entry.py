import uuid

from sqlalchemy import Column, JSON, String

from app.database import Base


class ConfigEntry(Base):
    __tablename__ = "config"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String, nullable=False, unique=True)
    value = Column(JSON, nullable=False)
