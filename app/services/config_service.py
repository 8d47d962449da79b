"""Reference data (makes, models, destinations) stored as key -> JSON value."""
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.config_entry import ConfigEntry
from app.utils.exceptions import NotFound, ValidationError

CONFIG_KEYS = ("makes", "models", "destinations")


async def get(db: AsyncSession, key: str) -> ConfigEntry:
    result = await db.execute(select(ConfigEntry).where(ConfigEntry.key == key))
    entry = result.scalars().first()
    if entry is None:
        raise NotFound("Config not found")
    return entry


async def get_all(db: AsyncSession) -> dict[str, Any]:
    result = await db.execute(select(ConfigEntry))
    return {entry.key: entry.value for entry in result.scalars().all()}


async def set(db: AsyncSession, key: str, value: Any) -> ConfigEntry:
    """Upsert. The shape of value is the caller's business."""
    if key not in CONFIG_KEYS:
        raise ValidationError(
            f"Unknown config key '{key}'. Allowed: {', '.join(CONFIG_KEYS)}",
            data={"field": "key"},
        )
    if value is None:
        raise ValidationError("'value' is required", data={"field": "value"})

    result = await db.execute(select(ConfigEntry).where(ConfigEntry.key == key))
    entry = result.scalars().first()
    if entry is None:
        entry = ConfigEntry(key=key, value=value)
        db.add(entry)
    else:
        entry.value = value
    await db.commit()
    await db.refresh(entry)
    return entry
