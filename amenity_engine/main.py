# amenity_engine/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .core.config import is_running_tests, settings
from .core.exceptions import DomainException
from .database import Base, engine
from .routes import health
from .routes.v1 import amenities as amenities_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables on startup; nothing to release on shutdown."""
    logger.info("Resort amenities API starting up...")
    logger.info(f"Environment: {settings.environment}")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    # Importing models registers their tables on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    logger.info("Resort amenities API shutting down...")


app = FastAPI(
    title="Resort Amenities API",
    description="Amenity catalogue, opening hours, availability and reservations",
    version=__version__,
    lifespan=app_lifespan,
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Fallback for domain errors raised outside a route's own handling."""
    if exc.status_code >= 500:
        logger.error(f"Unhandled service error on {request.url.path}: {exc.message}")
    http_exc = exc.to_http_exception()
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(amenities_v1.router, prefix="/amenities")

app.include_router(api_v1)
app.include_router(health.router)
