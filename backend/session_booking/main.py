# backend/session_booking/main.py

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .exceptions import BookingError
from .redis_client import redis_client
from .routers import (
    admin_session_requests,
    admin_sessions,
    availability_overrides,
    availability_rules,
    availability_settings,
    session_requests,
    sessions,
    slots,
)
from .services.expiry_reaper import expiry_reaper_loop

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/booking"


@asynccontextmanager
async def lifespan(app: FastAPI):
    reaper_task = None
    if settings.reaper_enabled:
        reaper_task = asyncio.create_task(expiry_reaper_loop())

    yield

    if reaper_task is not None:
        reaper_task.cancel()
        try:
            await reaper_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="Session Booking API", lifespan=lifespan)


# ===== Error mapping =====
@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


# ===== Routers =====
for module in (
    availability_settings,
    availability_rules,
    availability_overrides,
    slots,
    session_requests,
    admin_session_requests,
    sessions,
    admin_sessions,
):
    app.include_router(module.router, prefix=API_PREFIX)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False
    return {"status": "ok", "redis": redis_ok}
