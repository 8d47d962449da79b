import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.config_entry import ConfigEntry
from app.models.user import User
from app.services.user_service import hash_password

logger = logging.getLogger(__name__)


SEED_CONFIG = {
    "makes": ["Toyota", "Honda", "Ford", "Chevrolet", "BMW", "Mercedes", "Nissan", "Hyundai"],
    "models": {
        "Toyota": ["Camry", "Corolla", "RAV4", "Highlander"],
        "Honda": ["Accord", "Civic", "CR-V", "Pilot"],
        "Ford": ["F-150", "Mustang", "Explorer", "Edge"],
        "Chevrolet": ["Silverado", "Malibu", "Equinox", "Tahoe"],
        "BMW": ["3 Series", "5 Series", "X3", "X5"],
        "Mercedes": ["C-Class", "E-Class", "GLE", "GLC"],
        "Nissan": ["Altima", "Rogue", "Sentra", "Pathfinder"],
        "Hyundai": ["Elantra", "Sonata", "Tucson", "Santa Fe"],
    },
    "destinations": ["Dubai", "Jeddah", "Riyadh", "Kuwait", "Doha", "Abu Dhabi", "Muscat", "Manama"],
}


async def seed_data(session: AsyncSession) -> None:
    result = await session.execute(select(User).where(User.username == settings.seed_admin_username))
    if result.scalars().first() is None:
        session.add(User(
            username=settings.seed_admin_username,
            password_hash=hash_password(settings.seed_admin_password),
            role="admin",
            name="Administrator",
        ))
        logger.info("Seeded admin user %s", settings.seed_admin_username)

    result = await session.execute(select(ConfigEntry.key))
    existing = set(result.scalars().all())
    for key, value in SEED_CONFIG.items():
        if key not in existing:
            session.add(ConfigEntry(key=key, value=value))
            logger.info("Seeded config %s", key)

    await session.commit()
