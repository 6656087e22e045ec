import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

# Importing models registers every table with Base before create_all
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, SessionLocal, engine
from .domain.account_requests.router import admin_router as admin_account_requests_router
from .domain.account_requests.router import public_router as account_requests_router
from .domain.auth.router import check_router as auth_check_router
from .domain.auth.router import router as auth_router
from .domain.branches.router import admin_router as admin_branches_router
from .domain.branches.router import owner_router as owner_branches_router
from .domain.catalog.router import router as catalog_router
from .domain.dashboard.router import router as dashboard_router
from .domain.orders.router import customer_router, delivery_router, employee_router
from .domain.owners.router import router as owners_router
from .domain.settings.router import router as settings_router
from .domain.shops.router import admin_router as admin_shops_router
from .domain.shops.router import owner_router as owner_shops_router
from .domain.staff.router import router as staff_router
from .domain.users.router import router as users_router
from .security_headers import SecurityHeadersMiddleware
from .seed import seed_reference_data

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="LaundryGo API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "message": "Validation failed"},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    elapsed_ms = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(auth_check_router)
app.include_router(account_requests_router)
app.include_router(admin_account_requests_router)
app.include_router(admin_shops_router)
app.include_router(admin_branches_router)
app.include_router(owners_router)
app.include_router(users_router)
app.include_router(owner_shops_router)
app.include_router(owner_branches_router)
app.include_router(catalog_router)
app.include_router(staff_router)
app.include_router(settings_router)
app.include_router(dashboard_router)
app.include_router(employee_router)
app.include_router(delivery_router)
app.include_router(customer_router)


@app.get("/")
def root():
    return {"message": "LaundryGo API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
