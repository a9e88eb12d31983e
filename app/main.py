import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.db.database import create_db_and_tables
from app.api.v1.endpoints import flights
from services.amadeus_client import AmadeusClient
from services.exceptions import ProviderError, RannerError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def error_response(message: str, status: int) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": {"message": message, "status": status}})


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    app.state.provider_client = AmadeusClient()
    logger.info("Application startup complete: database and provider client ready.")
    yield
    await app.state.provider_client.close()


# ============================================================
# FASTAPI APP SETUP
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Trip flights API

    * Flights saved against trips, editable by their owner or an admin
    * Flight offer search, price confirmation, seat maps and prediction
    * Booking pass-through and reference lookups
    """,
    version=settings.VERSION,
    lifespan=lifespan,
)

# ============================================================
# CORS CONFIG
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ============================================================
# ERROR HANDLERS
# ============================================================
@app.exception_handler(RannerError)
async def ranner_error_handler(request: Request, exc: RannerError):
    if isinstance(exc, ProviderError):
        logger.error("%s %s failed at provider stage %s: %s", request.method, request.url.path, exc.stage.value, exc.message)
    return error_response(exc.message, exc.status)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return error_response("; ".join(parts) or "Invalid request", 400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("Internal server error", 500)


# ============================================================
# API ROUTERS
# ============================================================
app.include_router(flights.router, prefix="/flights", tags=["flights"])


@app.get("/health")
def health():
    return {"status": "healthy"}
