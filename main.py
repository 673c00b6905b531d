"""
Main application entry point for the Real Estate Manager API.

This module initializes the FastAPI application, configures CORS and
logging, maps domain errors to HTTP responses and includes routers for
users, properties and the property view.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- estate_manager.database: Database engine and table bootstrap
- estate_manager.coordinator: Refresh coordinator shared by the routes
- estate_manager.users: Users router
- estate_manager.properties: Properties router
- estate_manager.views: Property view router
- estate_manager.core: Application settings
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from estate_manager.core import get_settings
from estate_manager.coordinator import get_coordinator
from estate_manager.database import create_tables, engine
from estate_manager.errors import (
    CascadeError,
    DuplicateEmailError,
    EstateError,
    NotFoundError,
    OwnerReferenceError,
    StaleViewError,
    StoreError,
    ValidationError,
)
from estate_manager.logging import configure_logging, get_logger
from estate_manager.properties import router as properties_router
from estate_manager.users import router as users_router
from estate_manager.views import router as views_router

settings = get_settings()
logger = get_logger(__name__)

# Initialize FastAPI application
app = FastAPI(title="Real Estate Manager API")

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


ERROR_STATUS = {
    ValidationError: 422,
    OwnerReferenceError: 422,
    DuplicateEmailError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    CascadeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(EstateError)
async def estate_error_handler(request: Request, exc: EstateError):
    """
    Translate a domain error into a JSON response.

    The most specific entry of ``ERROR_STATUS`` in the error's MRO decides
    the status code.

    Args:
        request (Request): Incoming request.
        exc (EstateError): Raised domain error.

    Returns:
        JSONResponse: ``{"detail": ..., "error": ...}`` body, plus
        ``committed`` when a write succeeded but the reload after it failed.
    """
    status_code = next(
        (ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS),
        status.HTTP_400_BAD_REQUEST,
    )
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc))
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, StaleViewError):
        content["committed"] = jsonable_encoder(exc.committed)
    return JSONResponse(status_code=status_code, content=content)


@app.on_event("startup")
def startup_event():
    """
    FastAPI startup event handler.

    Configures logging, creates tables when enabled and loads the initial
    view. A store failure here is logged; the API still starts.
    """
    configure_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)
    if settings.CREATE_TABLES:
        create_tables(engine)
    try:
        get_coordinator().refresh_all()
    except StoreError as exc:
        logger.error("initial_refresh_failed", error=str(exc))


# Include routers for application areas
app.include_router(users_router)
app.include_router(properties_router)
app.include_router(views_router)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Real Estate Manager API. Visit /docs for Swagger UI"}
