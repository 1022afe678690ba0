# storecast/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from storecast.core.config import get_settings
from storecast.core.route_guard import RouteGuardMiddleware
from storecast.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from storecast.models import profile as _profile_models  # noqa: F401
from storecast.models import store as _store_models  # noqa: F401
from storecast.models import content as _content_models  # noqa: F401


# Routers
from storecast.routers.auth import router as auth_router, callback_router
from storecast.routers.users import router as profile_router, admin_router as user_admin_router
from storecast.routers.stores import router as stores_router
from storecast.routers.content import router as content_router
from storecast.routers.dashboard import router as dashboard_router
from storecast.routers.admin import router as admin_pages_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to the database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "Storecast CMS",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Page guard: /dashboard and /admin need the right role ---
app.add_middleware(RouteGuardMiddleware)

# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# JSON API under the prefix, e.g. /api
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(profile_router, prefix=settings.API_PREFIX)
app.include_router(user_admin_router, prefix=settings.API_PREFIX)
app.include_router(stores_router, prefix=settings.API_PREFIX)
app.include_router(content_router, prefix=settings.API_PREFIX)

# Guarded page view models
app.include_router(callback_router)
app.include_router(dashboard_router)
app.include_router(admin_pages_router)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "storecast-backend"}
