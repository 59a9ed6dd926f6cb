import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from openmusic import models  # noqa: F401  (registers tables on Base.metadata)
from openmusic.api import router
from openmusic.cache import Cache
from openmusic.config import get_settings
from openmusic.database import Store
from openmusic.exceptions import AuthenticationError, ClientError, OpenMusicError
from openmusic.schemas import HealthResponse

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup: resources already placed on app.state are left alone
    owned = []
    if getattr(app.state, "store", None) is None:
        app.state.store = Store.from_url(settings.database_url, echo=settings.debug)
        owned.append(app.state.store)
        # Create tables (development only)
        if settings.debug:
            await app.state.store.create_all()
    if getattr(app.state, "cache", None) is None:
        app.state.cache = Cache(settings.redis_url)
        await app.state.cache.connect()
        owned.append(app.state.cache)

    logger.info(f"{settings.app_name} started")
    yield

    # Shutdown
    for resource in owned:
        await resource.close()
    logger.info(f"{settings.app_name} stopped")


app = FastAPI(
    title=settings.app_name,
    description="Albums, songs and playlists with cached album likes",
    version="1.0.0",
    lifespan=lifespan,
)


# Exception handlers
@app.exception_handler(ClientError)
async def client_error_handler(request: Request, exc: ClientError):
    headers = exc.headers if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(OpenMusicError)
async def server_error_handler(request: Request, exc: OpenMusicError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status, "message": "Server failure"},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"status": "fail", "message": "Invalid payload"},
    )


# Include routers
app.include_router(router)


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint"""
    db_status = "healthy" if await request.app.state.store.ping() else "unhealthy"
    redis_status = "healthy" if await request.app.state.cache.ping() else "unhealthy"
    overall = "ok" if db_status == "healthy" and redis_status == "healthy" else "degraded"
    return HealthResponse(status=overall, database=db_status, redis=redis_status)
