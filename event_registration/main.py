# event_registration/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from event_registration.api.v1.api import api_router
from event_registration.core.config import settings
from event_registration.core.exceptions import RegistrationError
from event_registration.core.kafka_producer import close_kafka_singleton
from event_registration.core.limiter import limiter
from event_registration.scheduler import init_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="[%(asctime)s] [%(levelname)s] %(message)s",
    )
    logger.info("Application starting up...")
    if settings.SCHEDULER_ENABLED:
        init_scheduler()
    yield
    logger.info("Application shutting down...")
    shutdown_scheduler()
    close_kafka_singleton()


app = FastAPI(
    title="Event Registration Service",
    version="1.0.0",
    description="""
        Event registration with capacity control, a FIFO waiting list,
        bank-transfer payment tracking and scheduled data retention.

        Most endpoints require JWT authentication via the `Authorization: Bearer <token>` header.
        Payment status reports use the `X-Internal-Api-Key` header; the cleanup
        trigger uses `Authorization: Bearer <CRON_SECRET>`.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_dict()},
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Event Registration Service is running"}
