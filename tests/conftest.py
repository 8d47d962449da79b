import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="vehicle-logistics-tests-")

# Must be set before app.config is imported
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.sqlite3"
os.environ["DATA_DIR"] = _TMP_DIR
os.environ["SMTP_HOST"] = ""
os.environ["SEED_ADMIN_USERNAME"] = "admin"
os.environ["SEED_ADMIN_PASSWORD"] = "admin123"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import settings  # noqa: E402
from app.database import async_session, create_tables, drop_tables  # noqa: E402
from app.main import app  # noqa: E402
from app.seed import seed_data  # noqa: E402
from app.services import session_store as session_store_module  # noqa: E402
from app.services.session_store import InMemorySessionStore  # noqa: E402
from tests.helpers import (  # noqa: E402
    ADMIN_PASSWORD,
    ADMIN_USERNAME,
    USER_PASSWORD,
    USER_USERNAME,
    create_user,
    login,
)


@pytest_asyncio.fixture
async def reset_db():
    await drop_tables()
    await create_tables()
    async with async_session() as session:
        await seed_data(session)
    session_store_module.session_store = InMemorySessionStore(settings.session_ttl_seconds)
    yield


@pytest_asyncio.fixture
async def client(reset_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def admin_client(client):
    response = await login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert response.status_code == 200
    return client


@pytest_asyncio.fixture
async def regular_user_id(reset_db):
    return await create_user(USER_USERNAME, USER_PASSWORD, email="buyer@example.com")


@pytest_asyncio.fixture
async def user_client(regular_user_id):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        response = await login(c, USER_USERNAME, USER_PASSWORD)
        assert response.status_code == 200
        yield c
