import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import daily_stats, devices, payments, sessions, stats
from app.core.config import settings
from app.db.session import engine
from app.services.razorpay_client import RazorpayClient

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One Razorpay client (and so one pair of caches) per process
    app.state.razorpay_client = RazorpayClient.from_settings()
    logger.info("[STARTUP] Maya admin API ready")
    try:
        yield
    finally:
        await app.state.razorpay_client.close()
        await engine.dispose()


app = FastAPI(title="Maya Admin API", version="1.0.0", lifespan=lifespan)

ALLOWED_ORIGINS = settings.get_allowed_origins()

# CORS headers are also added on unhandled errors, see below
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Ensure CORS headers are included even on unhandled exceptions"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}")

    response = JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )

    origin = request.headers.get("origin")
    if origin and origin in ALLOWED_ORIGINS:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


app.include_router(stats.router, prefix="/api/stats", tags=["stats"])
app.include_router(daily_stats.router, prefix="/api", tags=["stats"])
app.include_router(devices.router, prefix="/api", tags=["devices"])
app.include_router(sessions.router, prefix="/api", tags=["sessions"])
app.include_router(payments.router, prefix="/api", tags=["payments"])


@app.get("/")
async def root():
    return {"message": "Maya Admin API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
