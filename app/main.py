# app/main.py
"""
FastAPI application entry point.
Includes security middleware, domain + global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import lots, zones, capacity, spots, status as spot_status, subscriptions, health
from app.database import create_tables
from app.config import settings
from app.exceptions import ParkingCoreError, StorageFailure, ValidationError
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Inventory API",
    description="Spot inventory, zone provisioning, subscription expiry and live spot status.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow operator dashboard to call the API) ─────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth. Caller identity is validated upstream;
    this only keeps the API closed on shared networks.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Domain Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(ParkingCoreError)
async def parking_error_handler(request: Request, exc: ParkingCoreError):
    if isinstance(exc, StorageFailure):
        logger.error(f"Storage failure on {request.url.path}: {exc.message} ({exc.cause})")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ── Request Validation Handler ───────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same shape and status as a domain ValidationError
    errors = jsonable_encoder(exc.errors())
    fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in errors)
    logger.info(f"{request.method} {request.url.path} rejected: invalid request ({fields})")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ValidationError.code, "detail": f"Invalid request: {fields}", "errors": errors},
    )


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(lots.router,          prefix="/api/v1", tags=["Lots"])
app.include_router(zones.router,         prefix="/api/v1", tags=["Zones"])
app.include_router(capacity.router,      prefix="/api/v1", tags=["Capacity"])
app.include_router(spots.router,         prefix="/api/v1", tags=["Spots"])
app.include_router(spot_status.router,   prefix="/api/v1", tags=["Status"])
app.include_router(subscriptions.router, prefix="/api/v1", tags=["Subscriptions"])
app.include_router(health.router,        prefix="/api/v1", tags=["Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("Parking inventory backend starting up...")
    create_tables()
    logger.info("Database tables ready")
    logger.info(f"Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info(f"Read-triggered subscription sweep: {'on' if settings.SWEEP_ON_STATUS else 'off'}")


@app.on_event("shutdown")
async def shutdown():
    logger.info("Parking inventory backend shutting down...")
