from app.models.user import User
from app.models.vehicle import Vehicle
from app.models.config_entry import ConfigEntry

__all__ = ["User", "Vehicle", "ConfigEntry"]
