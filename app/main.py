from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager, suppress
import asyncio
import uvicorn
import logging

from app.storage.local import LocalStorageService
from app.storage.pocketbase import PocketBaseService
from app.settings import settings
from app.routers.image_service import router as image_router
from app.image_service.models import HealthResponse
from app.exceptions import add_exception_handlers

logging.basicConfig(level=settings.log_level)
log = logging.getLogger("image-gallery")

async def probe_metadata_store(db: PocketBaseService, delay: float):
    """
        One-shot diagnostic: checks the images collection once, ``delay`` seconds
        after startup. A failure is only logged; it never gates the service.
    """
    await asyncio.sleep(delay)
    try:
        await db.check_ready()
        log.info("PocketBase %s collection is ready", db.collection)
    except Exception as e:
        log.warning("PocketBase collection not ready yet: %s", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
        Async context manager for FastAPI application lifecycle events.
        Initializes and closes resources (upload directory, PocketBase client) for the application.
    """
    # Initialize resources
    app.state.storage = LocalStorageService(settings.upload_dir)
    app.state.db = PocketBaseService()
    probe = asyncio.create_task(probe_metadata_store(app.state.db, settings.readiness_probe_delay))
    yield
    # Cleanup resources
    probe.cancel()
    with suppress(asyncio.CancelledError):
        await probe
    await app.state.db.close()
    app.state.storage.close()

# Initialize App
app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    description="Local Image Gallery",
)

# Add exception handlers
add_exception_handlers(app)

# CORS - Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add the routers
app.include_router(image_router)

# Check Health
@app.get("/health", response_model=HealthResponse)
def health():
    """
        Liveness end point; does not consult PocketBase.
    """
    return HealthResponse()

# Static files; "/" must be mounted last so it does not shadow the API
app.mount(settings.uploads_mount, StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
app.mount("/", StaticFiles(directory=settings.public_dir, html=True, check_dir=False), name="public")

if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
