import io

from httpx import AsyncClient

from app.database import async_session
from app.models.user import User
from app.services.user_service import hash_password

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
USER_USERNAME = "buyer"
USER_PASSWORD = "buyer-pass"

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 100
PDF_BYTES = b"%PDF-1.4\n" + b"0" * 100

SAMPLE_VEHICLE = {
    "vin": "1HGCM82633A004352",
    "lot": "459812",
    "year": 2024,
    "make": "Toyota",
    "model": "Camry",
    "destination": "Dubai",
}


async def create_user(username: str, password: str, role: str = "user", email: str | None = None) -> str:
    async with async_session() as session:
        user = User(
            username=username,
            password_hash=hash_password(password),
            role=role,
            name=username.title(),
            email=email,
        )
        session.add(user)
        await session.commit()
        return user.id


async def login(client: AsyncClient, username: str, password: str):
    return await client.post("/api/auth/login", json={"username": username, "password": password})


async def create_vehicle(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/vehicles", json={**SAMPLE_VEHICLE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def jpeg(name: str = "photo.jpg"):
    return (name, io.BytesIO(JPEG_BYTES), "image/jpeg")


def pdf(name: str = "invoice.pdf"):
    return (name, io.BytesIO(PDF_BYTES), "application/pdf")
