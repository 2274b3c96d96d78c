# event_registration/api/v1/api.py

from fastapi import APIRouter
from event_registration.api.v1.endpoints import (
    events,
    registrations,
    waitlist,
    payments,
    cron,
    health,
)

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(events.router)
api_router.include_router(registrations.router)
api_router.include_router(waitlist.router)
api_router.include_router(payments.router)
api_router.include_router(cron.router)
