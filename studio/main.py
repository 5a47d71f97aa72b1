import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
# This is needed for relationships between models in different files
from . import (
    models,  # noqa: F401
    models_google_calendar,  # noqa: F401
)
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.companies.router import auth_router
from .domain.companies.router import router as companies_router
from .domain.events.router import router as events_router
from .domain.members.router import router as members_router
from .domain.packages.router import router as packages_router
from .domain.projects.router import router as projects_router
from .domain.recommendations.router import router as recommendations_router
from .domain.reminders.router import router as reminders_router
from .domain.roles.router import router as roles_router
from .routes.google_calendar import router as google_calendar_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Studio API", version="1.0.0", lifespan=lifespan)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "form")]
    return ".".join(parts)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    content = {"success": False, "message": exc.detail}
    conflicts = getattr(exc, "conflicts", None)
    if conflicts is not None:
        content["conflicts"] = conflicts
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Render the first validation error as a 400 with a readable message.
    A missing Authorization header is an authentication failure, not bad input.
    """
    errors = exc.errors()
    for error in errors:
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(status_code=401, content={"success": False, "message": "Not authenticated"})

    logger.warning(f"Validation error for {request.url.path}: {errors}")
    if not errors:
        return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request"})

    error = errors[0]
    field = _field_name(error.get("loc", ()))
    if error.get("type") == "missing":
        message = f"{field} is required" if field else "Request body is required"
    else:
        message = str(error.get("msg", "Invalid request")).removeprefix("Value error, ")
        if field and error.get("type") != "value_error":
            message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "message": "An internal server error occurred"})


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(companies_router)
app.include_router(members_router)
app.include_router(roles_router)
app.include_router(projects_router)
app.include_router(events_router)
app.include_router(packages_router)
app.include_router(reminders_router)
app.include_router(recommendations_router)
app.include_router(google_calendar_router)


@app.get("/")
def root():
    return {"message": "Studio API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
