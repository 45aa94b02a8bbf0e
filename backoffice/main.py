import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler
from slowapi.middleware import SlowAPIMiddleware

from backoffice.core.config import settings
from backoffice.core.errors import register_exception_handlers
from backoffice.core.logging import setup_logging
from backoffice.core.rate_limiter import limiter
from backoffice.middleware.request_logger import RequestLoggerMiddleware

from backoffice.api.health import router as health_router
from backoffice.api.bookings import router as bookings_router
from backoffice.api.rooms import router as rooms_router
from backoffice.api.dashboard import router as dashboard_router


# -------------------------------------------------
# Logging
# -------------------------------------------------

setup_logging()
logger = logging.getLogger(__name__)

logger.info("Starting application")


# -------------------------------------------------
# FastAPI
# -------------------------------------------------

app = FastAPI(
    title="Hotel Back-Office",
    description="Rooms, bookings, availability and the booking audit log",
    version="0.1.0",
)

# -------------------------------------------------
# Rate Limiting (slowapi)
# -------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggerMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(bookings_router)
app.include_router(rooms_router)
app.include_router(dashboard_router)


# -------------------------------------------------
# Lifecycle
# -------------------------------------------------


@app.on_event("startup")
async def on_startup():
    logger.info("FastAPI startup")

    from backoffice.database import engine, init_db
    from backoffice.services.payment_status import resolve_payment_status_table

    await init_db()

    # Resolved once; transitions read it from app.state
    app.state.payment_statuses = await resolve_payment_status_table(engine)


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("FastAPI shutdown")

    from backoffice.database import engine

    await engine.dispose()
