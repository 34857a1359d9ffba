from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dabs_site.api.age_gate import router as age_gate_router
from dabs_site.api.catalog import router as catalog_router
from dabs_site.api.consent import router as consent_router
from dabs_site.api.contact import router as contact_router
from dabs_site.api.dashboard import router as dashboard_router
from dabs_site.api.requests import router as requests_router
from dabs_site.api.stores import router as stores_router
from dabs_site.config import get_settings
from dabs_site.dashboard_view import router as dashboard_view_router
from dabs_site.dependencies.services import (
    get_forwarder_cached,
    get_sheets_client_cached,
    get_store_directory_cached,
    resolve_submission_strategies,
)
from dabs_site.health import router as health_router


def configure_logging() -> None:
    """Ensure application logs use the INFO level by default."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(logging.INFO)

# Configure logging as soon as the module is loaded
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    # --- Startup Logic ---
    settings = get_settings()

    settings_snapshot = settings.model_dump(exclude={"google_sheets_api_key"})
    logger.info("Application settings on startup: %s", settings_snapshot)

    sheets = get_sheets_client_cached()
    forwarder = get_forwarder_cached()
    directory = get_store_directory_cached()
    if sheets.configured:
        directory.start(settings.store_refresh_interval)
    else:
        logger.warning("Sheets not configured; store directory refresh disabled.")
    resolve_submission_strategies()
    logger.info("Application startup complete.")

    try:
        yield  # The application is now running
    finally:
        # --- Shutdown Logic ---
        await directory.stop()
        await sheets.close()
        await forwarder.close()
        logger.info("Application shutdown complete.")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected invalid request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


# --- Application Setup ---

settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# --- Include Routers ---

app.include_router(stores_router, prefix="/api")
app.include_router(requests_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(age_gate_router, prefix="/api")
app.include_router(consent_router, prefix="/api")
app.include_router(contact_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(health_router)
app.include_router(dashboard_view_router)
