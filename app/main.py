import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import create_tables, async_session
from app.seed import seed_data
from app.routers.auth import router as auth_router
from app.routers.users import router as users_router
from app.routers.vehicles import router as vehicles_router
from app.routers.config import router as config_router
from app.routers.files import router as files_router
from app.utils.exceptions import register_exception_handlers
from app.utils.upload_limits import UploadLimitMiddleware

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    async with async_session() as session:
        await seed_data(session)
    logger.info("Vehicle logistics API v%s started", VERSION)
    yield


app = FastAPI(
    title="Vehicle Logistics API",
    description="Vehicle registration, assignment, attachments and shipping logistics",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(UploadLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(vehicles_router, prefix="/api")
app.include_router(config_router, prefix="/api")
app.include_router(files_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "vehicle-logistics-api", "version": VERSION}, "message": None}
