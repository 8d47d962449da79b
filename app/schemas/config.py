from typing import Any

from pydantic import BaseModel


class ConfigEntryResponse(BaseModel):
    key: str
    value: Any

    model_config = {"from_attributes": True}


class ConfigUpdate(BaseModel):
    value: Any
